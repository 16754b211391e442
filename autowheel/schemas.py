# autowheel/schemas.py
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .images import primary_image


class InquiryType(str, Enum):
    GENERAL = "general"
    PRICE = "price"
    TEST_DRIVE = "test_drive"
    FINANCING = "financing"
    TRADE_IN = "trade_in"


class ContactMethod(str, Enum):
    WHATSAPP = "whatsapp"
    PHONE = "phone"
    EMAIL = "email"


class InquiryStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    IN_PROGRESS = "in_progress"
    SOLD = "sold"
    CANCELLED = "cancelled"


class CarBase(BaseModel):
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    price: Optional[float] = Field(None, ge=0)
    tax: Optional[float] = Field(None, ge=0)
    mileage: Optional[int] = Field(None, ge=0)
    engine_cc: Optional[str] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    vehicle_grade: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    images: List[str] = []
    features: List[str] = []
    description: Optional[str] = None
    is_hot_deal: bool = False
    rating: Optional[float] = Field(None, ge=1, le=5)

    @field_validator("images", "features", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


class CarCreate(CarBase):
    pass


class CarUpdate(BaseModel):
    make: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    price: Optional[float] = Field(None, ge=0)
    tax: Optional[float] = Field(None, ge=0)
    mileage: Optional[int] = Field(None, ge=0)
    engine_cc: Optional[str] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    vehicle_grade: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    description: Optional[str] = None
    is_hot_deal: Optional[bool] = None
    rating: Optional[float] = Field(None, ge=1, le=5)


class CarOut(CarBase):
    id: int
    total_price: Optional[float] = None
    views: int = 0
    is_hot_deal: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("views", "is_hot_deal", mode="before")
    @classmethod
    def _unset_counters(cls, v, info):
        if v is None:
            return 0 if info.field_name == "views" else False
        return v

    @computed_field
    @property
    def primary_image(self) -> str:
        return primary_image(self.images, self.make, self.model)

    model_config = ConfigDict(from_attributes=True)


class CarPage(BaseModel):
    data: List[CarOut]
    total: int
    page: int
    limit: int
    total_pages: int


class FilterState(BaseModel):
    """Optional browse constraints; an unset field never excludes a listing."""
    make: Optional[str] = None
    fuel_type: Optional[str] = None
    category: Optional[str] = None
    engine_cc: Optional[str] = None
    vehicle_grade: Optional[str] = None
    transmission: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    hot_deals_only: bool = False

    @field_validator(
        "make", "fuel_type", "category", "engine_cc", "vehicle_grade",
        "transmission", "min_price", "max_price", mode="before",
    )
    @classmethod
    def _blank_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class InquiryRecord(BaseModel):
    id: str
    # listing snapshot, copied at submission time
    car_id: Union[int, str]
    car_make: str = ""
    car_model: str = ""
    car_year: Optional[int] = None
    car_price: Optional[float] = None

    customer_name: str
    customer_email: str
    customer_phone: str
    customer_location: str = ""
    customer_message: str

    inquiry_type: InquiryType = InquiryType.GENERAL
    preferred_contact_method: ContactMethod = ContactMethod.WHATSAPP
    timestamp: datetime
    status: InquiryStatus = InquiryStatus.PENDING
    admin_notes: Optional[str] = None
    follow_up_date: Optional[date] = None


class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus
    admin_notes: Optional[str] = None
    follow_up_date: Optional[date] = None


class InquiryStatistics(BaseModel):
    total: int
    by_status: dict
    by_type: dict


class SuccessStoryBase(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=100)
    photo: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class SuccessStoryCreate(SuccessStoryBase):
    pass


class SuccessStoryUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, min_length=1, max_length=100)
    photo: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)


class SuccessStoryOut(SuccessStoryBase):
    id: int
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    email: str
    password: str
