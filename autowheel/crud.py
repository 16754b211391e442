# autowheel/crud.py
"""CRUD operations for `Car` and `SuccessStory` entities.

Helpers return `None`/`False` for missing rows and leave the HTTP mapping to
the routes.
"""
from sqlalchemy import update
from .models import Car, SuccessStory
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional

def create_car(db: Session, data: Dict[str, Any]) -> Car:
    obj = Car(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def get_car(db: Session, car_id: int) -> Optional[Car]:
    return db.get(Car, car_id)

def list_cars(db: Session) -> List[Car]:
    # newest first, like the catalog page
    return db.query(Car).order_by(Car.created_at.desc(), Car.id.desc()).all()

def update_car(db: Session, car_id: int, updates: Dict[str, Any]) -> Optional[Car]:
    obj = db.get(Car, car_id)
    if not obj:
        return None
    for k, v in updates.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj

def delete_car(db: Session, car_id: int) -> bool:
    obj = db.get(Car, car_id)
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True

def increment_views(db: Session, car_id: int) -> Optional[int]:
    res = db.execute(
        update(Car).where(Car.id == car_id).values(views=Car.views + 1)
    )
    db.commit()
    if res.rowcount == 0:
        return None
    return db.get(Car, car_id).views

def create_story(db: Session, data: Dict[str, Any]) -> SuccessStory:
    obj = SuccessStory(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def list_stories(db: Session) -> List[SuccessStory]:
    return db.query(SuccessStory).order_by(SuccessStory.created_at.desc(), SuccessStory.id.desc()).all()

def update_story(db: Session, story_id: int, updates: Dict[str, Any]) -> Optional[SuccessStory]:
    obj = db.get(SuccessStory, story_id)
    if not obj:
        return None
    for k, v in updates.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj

def delete_story(db: Session, story_id: int) -> bool:
    obj = db.get(SuccessStory, story_id)
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True
