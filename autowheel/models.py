# autowheel/models.py
"""SQLAlchemy ORM models for persisted entities.

`Car` is the catalog listing, `SuccessStory` the curated testimonial and
`StorageEntry` the key-value slot table behind `storage.SqlStore`.
"""
from sqlalchemy import Boolean, Column, Float, Integer, JSON, Numeric, Text, TIMESTAMP, func, Index
from .db import Base

class Car(Base):
    __tablename__ = "cars"
    id = Column(Integer, primary_key=True, index=True)
    make = Column(Text)
    model = Column(Text)
    year = Column(Integer)
    price = Column(Numeric(14, 2))
    tax = Column(Numeric(14, 2))
    total_price = Column(Numeric(14, 2))
    mileage = Column(Integer)
    engine_cc = Column(Text)
    fuel_type = Column(Text)
    transmission = Column(Text)
    vehicle_grade = Column(Text)
    category = Column(Text)
    location = Column(Text)
    images = Column(JSON, default=list)
    features = Column(JSON, default=list)
    description = Column(Text)
    is_hot_deal = Column(Boolean, default=False, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    rating = Column(Float)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

Index("idx_cars_price", Car.price)
Index("idx_cars_make", Car.make)


class SuccessStory(Base):
    __tablename__ = "success_stories"
    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    photo = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class StorageEntry(Base):
    __tablename__ = "storage_entries"
    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
