# autowheel/validation.py
"""Inquiry form validation and normalization.

`validate_inquiry` never raises for bad input: it returns either a
`ValidInquiry` carrying the normalized form or an `InvalidInquiry` with one
message per failing field, all fields checked independently.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ValidationError, field_validator

from .schemas import ContactMethod, InquiryType

# Sri Lankan: 0771234567, +94771234567, 94771234567
# International: +1234567890, +441234567890, +44 20 7946 0958
PHONE_PATTERN = re.compile(r"^(\+?[0-9]{1,4}[\s-]?)?(\(?[0-9]{1,4}\)?[\s-]?)?[0-9\s-]{7,}$")
NAME_PATTERN = re.compile(r"[a-zA-Z\s]+")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")
BARE_COUNTRY_CODE = re.compile(r"[1-9][0-9]{10,}")

SRI_LANKA_CODE = "+94"


def _enum_value(v: Any) -> Any:
    return v.value if isinstance(v, Enum) else v


def normalize_phone(value: str) -> str:
    cleaned = PHONE_SEPARATORS.sub("", value.strip())
    if cleaned.startswith("0") and len(cleaned) == 10:
        return SRI_LANKA_CODE + cleaned[1:]
    if BARE_COUNTRY_CODE.fullmatch(cleaned):
        return "+" + cleaned
    return cleaned if cleaned.startswith("+") else "+" + cleaned


class InquiryForm(BaseModel):
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_message: str
    customer_location: str = ""
    inquiry_type: InquiryType = InquiryType.GENERAL
    preferred_contact_method: ContactMethod = ContactMethod.WHATSAPP

    @field_validator("customer_name")
    @classmethod
    def _name(cls, v: str) -> str:
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        if len(v) > 100:
            raise ValueError("Name must be less than 100 characters")
        if not NAME_PATTERN.fullmatch(v):
            raise ValueError("Name can only contain letters and spaces")
        return v

    @field_validator("customer_email")
    @classmethod
    def _email(cls, v: str) -> str:
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError("Please enter a valid email address")
        return v.lower()

    @field_validator("customer_phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        if len(v) < 7:
            raise ValueError("Phone number is too short")
        if len(v) > 20:
            raise ValueError("Phone number is too long")
        if not PHONE_PATTERN.match(v):
            raise ValueError(
                "Please enter a valid phone number "
                "(e.g., +94771234567, 0771234567, or international format)"
            )
        return normalize_phone(v)

    @field_validator("customer_message")
    @classmethod
    def _message(cls, v: str) -> str:
        if len(v) < 10:
            raise ValueError("Message must be at least 10 characters")
        if len(v) > 1000:
            raise ValueError("Message must be less than 1000 characters")
        return v

    @field_validator("customer_location", mode="before")
    @classmethod
    def _location(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("inquiry_type", mode="before")
    @classmethod
    def _inquiry_type(cls, v: Any) -> Any:
        v = _enum_value(v)
        if not isinstance(v, str) or v not in {t.value for t in InquiryType}:
            raise ValueError("Invalid inquiry type")
        return v

    @field_validator("preferred_contact_method", mode="before")
    @classmethod
    def _contact_method(cls, v: Any) -> Any:
        v = _enum_value(v)
        if not isinstance(v, str) or v not in {m.value for m in ContactMethod}:
            raise ValueError("Invalid contact method")
        return v


@dataclass(frozen=True)
class ValidInquiry:
    data: InquiryForm
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class InvalidInquiry:
    field_errors: Dict[str, str]
    success: bool = field(default=False, init=False)


ValidationResult = Union[ValidInquiry, InvalidInquiry]


def _error_message(err: Dict[str, Any]) -> str:
    if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
        return str(err["ctx"]["error"])
    return err["msg"]


def validate_inquiry(raw: Mapping[str, Any]) -> ValidationResult:
    try:
        form = InquiryForm.model_validate(dict(raw))
    except ValidationError as exc:
        errors: Dict[str, str] = {}
        for err in exc.errors():
            name = str(err["loc"][0]) if err["loc"] else "__root__"
            errors.setdefault(name, _error_message(err))
        return InvalidInquiry(field_errors=errors)
    return ValidInquiry(data=form)
