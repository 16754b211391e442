# autowheel/services.py
from math import ceil
from typing import Dict, Optional

from sqlalchemy.orm import Session

from . import crud, schemas
from .filters import filter_listings
from .utils import logger


def total_price(price: Optional[float], tax: Optional[float]) -> Optional[float]:
    if price is None:
        return None
    return float(price) + float(tax) if tax is not None else float(price)


def create_car(db: Session, payload: schemas.CarCreate):
    data = payload.model_dump()
    data["total_price"] = total_price(data.get("price"), data.get("tax"))
    obj = crud.create_car(db, data)
    logger.info("Created car %s: %s %s", obj.id, obj.make, obj.model)
    return obj


def update_car(db: Session, car_id: int, payload: schemas.CarUpdate):
    updates: Dict = payload.model_dump(exclude_unset=True)
    existing = crud.get_car(db, car_id)
    if existing is None:
        return None
    if "price" in updates or "tax" in updates:
        price = updates.get("price", existing.price)
        tax = updates.get("tax", existing.tax)
        updates["total_price"] = total_price(price, tax)
    obj = crud.update_car(db, car_id, updates)
    logger.info("Updated car %s (%s)", car_id, ", ".join(sorted(updates)) or "no changes")
    return obj


def catalog(db: Session):
    return [schemas.CarOut.model_validate(c) for c in crud.list_cars(db)]


def search_catalog(db: Session, query: Optional[str], filters: schemas.FilterState,
                   page: int = 1, limit: int = 10) -> schemas.CarPage:
    matching = filter_listings(catalog(db), query, filters)
    total = len(matching)
    start = (page - 1) * limit
    return schemas.CarPage(
        data=matching[start:start + limit],
        total=total,
        page=page,
        limit=limit,
        total_pages=max(1, ceil(total / limit)),
    )
