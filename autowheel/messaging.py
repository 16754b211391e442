# autowheel/messaging.py
"""Human-readable inquiry summaries and the WhatsApp deep-link handoff."""
import os
import re
import webbrowser
from urllib.parse import quote

from .utils import logger

WHATSAPP_URL = "https://wa.me/{number}?text={text}"
DEFAULT_WHATSAPP_NUMBER = "94771234567"

INQUIRY_TYPE_LABELS = {
    "general": "General inquiry",
    "price": "Price inquiry",
    "test_drive": "Test drive request",
    "financing": "Financing options",
    "trade_in": "Trade-in",
}

CONTACT_METHOD_LABELS = {
    "whatsapp": "WhatsApp",
    "phone": "Phone call",
    "email": "Email",
}


def format_price(amount) -> str:
    if amount is None:
        return "Price on request"
    return f"LKR {float(amount):,.0f}"


def _value(v):
    return getattr(v, "value", v)


def build_inquiry_message(record) -> str:
    """Summarize an inquiry record (or anything with the same snapshot fields)."""
    year = f"{record.car_year} " if record.car_year else ""
    inquiry_type = _value(record.inquiry_type)
    contact = _value(record.preferred_contact_method)
    lines = [
        "Hello AutoWheel!",
        f"I'm interested in the {year}{record.car_make} {record.car_model} (ID: {record.car_id}).",
        f"Price: {format_price(record.car_price)}",
        f"Inquiry: {INQUIRY_TYPE_LABELS.get(inquiry_type, inquiry_type)}",
        "",
        f"Name: {record.customer_name}",
        f"Phone: {record.customer_phone}",
        f"Email: {record.customer_email}",
    ]
    if record.customer_location:
        lines.append(f"Location: {record.customer_location}")
    lines.append(f"Preferred contact: {CONTACT_METHOD_LABELS.get(contact, contact)}")
    lines.extend(["", f"Message: {record.customer_message}"])
    return "\n".join(lines)


def whatsapp_url(message: str, number: str = None) -> str:
    number = number or os.getenv("WHATSAPP_NUMBER", DEFAULT_WHATSAPP_NUMBER)
    digits = re.sub(r"\D", "", number)
    return WHATSAPP_URL.format(number=digits, text=quote(message, safe=""))


def open_in_browser(url: str) -> None:
    logger.debug("Opening %s", url)
    if not webbrowser.open_new_tab(url):
        raise RuntimeError("No browser available to open the message link")
