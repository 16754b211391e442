# autowheel/browse.py
"""Catalog browsing session: debounced text search plus immediate filters."""
from typing import Callable, List, Optional

from .client import CatalogUnavailable
from .debounce import use_debounced_value
from .filters import filter_listings
from .schemas import FilterState
from .utils import logger


class CatalogBrowser:
    def __init__(self, fetch_listings: Callable[[], List], delay_ms: Optional[int] = None, **debounce_kwargs):
        self._fetch = fetch_listings
        self.listings: List = []
        self.visible: List = []
        self.query = ""
        self.filters = FilterState()
        self.error: Optional[str] = None
        self._listeners: List[Callable[[List], None]] = []
        self._search = use_debounced_value("", delay_ms, on_change=self._on_query_settled, **debounce_kwargs)

    @property
    def active_query(self) -> str:
        """The query the visible results were computed with."""
        return self._search.value

    def load(self) -> List:
        try:
            self.listings = list(self._fetch())
            self.error = None
        except CatalogUnavailable as e:
            # keep whatever was loaded before
            logger.error("Catalog unavailable: %s", e)
            self.error = str(e)
        return self.recompute()

    def type_query(self, text: str) -> None:
        self.query = text
        self._search.set(text)

    def set_filters(self, **changes) -> List:
        self.filters = FilterState.model_validate({**self.filters.model_dump(), **changes})
        return self.recompute()

    def clear_filters(self) -> List:
        self.filters = FilterState()
        self.query = ""
        self._search.reset("")
        return self.recompute()

    def recompute(self) -> List:
        self.visible = filter_listings(self.listings, self._search.value, self.filters)
        for listener in list(self._listeners):
            try:
                listener(self.visible)
            except Exception:
                logger.exception("Results listener failed")
        return self.visible

    def on_results_changed(self, callback: Callable[[List], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def _on_query_settled(self, _value) -> None:
        self.recompute()

    def close(self) -> None:
        self._search.cancel()
