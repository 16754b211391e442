# autowheel/filters.py
"""Catalog filter engine.

A single conjunctive predicate evaluated over the in-memory catalog. The
result keeps catalog order; sorting is left to the presentation layer.
"""
from typing import Iterable, List, Optional

from .schemas import FilterState

# fields searched by the free-text query
SEARCH_FIELDS = ("make", "model", "location", "category", "engine_cc")

# filter fields compared for exact equality with the listing attribute
EXACT_FIELDS = ("make", "fuel_type", "category", "engine_cc", "vehicle_grade", "transmission")

EMPTY_FILTERS = FilterState()


def matches_query(listing, query: Optional[str]) -> bool:
    needle = (query or "").lower()
    if not needle:
        return True
    for field in SEARCH_FIELDS:
        value = getattr(listing, field, None)
        if value and needle in str(value).lower():
            return True
    return False


def matches_filters(listing, filters: FilterState) -> bool:
    for field in EXACT_FIELDS:
        wanted = getattr(filters, field)
        if wanted is not None and getattr(listing, field, None) != wanted:
            return False

    if filters.min_price is not None or filters.max_price is not None:
        price = getattr(listing, "price", None)
        if price is None:
            return False
        low = filters.min_price if filters.min_price is not None else 0
        high = filters.max_price if filters.max_price is not None else float("inf")
        if not low <= float(price) <= high:
            return False

    if filters.hot_deals_only and not getattr(listing, "is_hot_deal", False):
        return False
    return True


def matches(listing, query: Optional[str] = None, filters: Optional[FilterState] = None) -> bool:
    return matches_query(listing, query) and matches_filters(listing, filters or EMPTY_FILTERS)


def filter_listings(listings: Iterable, query: Optional[str] = None, filters: Optional[FilterState] = None) -> List:
    filters = filters or EMPTY_FILTERS
    return [item for item in listings if matches(item, query, filters)]
