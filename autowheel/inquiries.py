# autowheel/inquiries.py
"""Persisted inquiry queue and the customer submission pipeline."""
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .bus import INQUIRY_QUEUE_KEY, InquiryQueueBus
from .messaging import build_inquiry_message, open_in_browser, whatsapp_url
from .schemas import InquiryRecord, InquiryStatus
from .storage import KeyValueStore, StorageError
from .utils import logger
from .validation import InquiryForm, InvalidInquiry, validate_inquiry


class CorruptQueue(StorageError):
    """The stored queue cannot be parsed, so it must not be written over."""


class InquiryQueue:
    """The full list of inquiries kept as one JSON document in a storage slot.

    Every change is a read-modify-write of the whole list with no locking, so
    two writers racing on the same slot lose one of the updates.
    """

    def __init__(self, store: KeyValueStore, key: str = INQUIRY_QUEUE_KEY):
        self.store = store
        self.key = key

    def read(self) -> List[InquiryRecord]:
        """Strict read for write paths: an unreadable queue raises `CorruptQueue`."""
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
            return [InquiryRecord.model_validate(item) for item in items]
        except (ValueError, TypeError, ValidationError) as e:
            raise CorruptQueue(f"Inquiry queue {self.key!r} is unreadable") from e

    def load(self) -> List[InquiryRecord]:
        try:
            return self.read()
        except CorruptQueue as e:
            logger.error("Error loading inquiry queue %r: %s", self.key, e.__cause__)
            return []

    def save(self, records: List[InquiryRecord]) -> None:
        payload = json.dumps([r.model_dump(mode="json") for r in records])
        self.store.set(self.key, payload)

    def append(self, record: InquiryRecord) -> None:
        records = self.read()
        records.append(record)
        self.save(records)


@dataclass
class SubmissionResult:
    ok: bool
    reason: Optional[str] = None
    field_errors: Dict[str, str] = field(default_factory=dict)
    inquiry: Optional[InquiryRecord] = None
    handoff_url: Optional[str] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_inquiry_record(listing, form: InquiryForm, now: Optional[datetime] = None) -> InquiryRecord:
    return InquiryRecord(
        id=uuid.uuid4().hex,
        car_id=listing.id,
        car_make=listing.make or "",
        car_model=listing.model or "",
        car_year=listing.year,
        car_price=float(listing.price) if listing.price is not None else None,
        timestamp=now or _utcnow(),
        status=InquiryStatus.PENDING,
        **form.model_dump(),
    )


def submit_inquiry(
    listing,
    raw: Mapping,
    queue: InquiryQueue,
    bus: InquiryQueueBus,
    opener: Callable[[str], None] = open_in_browser,
    clock: Optional[Callable[[], datetime]] = None,
) -> SubmissionResult:
    """Validate, persist, notify, then hand off to WhatsApp, strictly in that order."""
    result = validate_inquiry(raw)
    if isinstance(result, InvalidInquiry):
        return SubmissionResult(ok=False, reason="validation", field_errors=result.field_errors)

    record = build_inquiry_record(listing, result.data, now=(clock or _utcnow)())
    try:
        queue.append(record)
    except StorageError as e:
        logger.error("Could not persist inquiry for car %s: %s", record.car_id, e)
        return SubmissionResult(
            ok=False,
            reason="Could not save your inquiry. Please try again.",
        )

    bus.publish()

    url = whatsapp_url(build_inquiry_message(record))
    try:
        opener(url)
    except Exception as e:
        logger.warning("Message handoff failed for inquiry %s: %s", record.id, e)

    logger.info("Inquiry %s submitted for car %s", record.id, record.car_id)
    return SubmissionResult(ok=True, inquiry=record, handoff_url=url)
