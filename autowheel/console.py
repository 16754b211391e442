# autowheel/console.py
"""Admin view over the persisted inquiry queue.

The console never trusts its in-memory copy: it re-reads the queue on mount,
on activation and on every bus notification, and every mutation is a full
read-modify-write of the stored queue.
"""
from collections import Counter
from datetime import date, datetime, timezone
from typing import List, Optional, Union

from .bus import InquiryQueueBus
from .inquiries import InquiryQueue
from .messaging import build_inquiry_message, whatsapp_url
from .schemas import InquiryRecord, InquiryStatus, InquiryType
from .utils import logger


UNSET = object()


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AdminInquiryConsole:
    def __init__(self, queue: InquiryQueue, bus: InquiryQueueBus):
        self.queue = queue
        self.bus = bus
        self.inquiries: List[InquiryRecord] = []
        self._unsubscribe = None

    def mount(self) -> "AdminInquiryConsole":
        self.refresh()
        if self._unsubscribe is None:
            self._unsubscribe = self.bus.on_inquiry_queue_changed(self.refresh)
        return self

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def activate(self) -> None:
        self.refresh()

    def refresh(self) -> None:
        self.inquiries = self.queue.load()

    def get(self, inquiry_id: str) -> Optional[InquiryRecord]:
        self.refresh()
        return next((r for r in self.inquiries if r.id == inquiry_id), None)

    def update_status(
        self,
        inquiry_id: str,
        status: Union[InquiryStatus, str],
        admin_notes: Optional[str] = UNSET,
        follow_up_date: Optional[date] = UNSET,
    ) -> Optional[InquiryRecord]:
        """Change the status; notes and follow-up date change only when passed, and None clears them."""
        status = InquiryStatus(status)
        records = self.queue.read()
        for i, record in enumerate(records):
            if record.id != inquiry_id:
                continue
            changes = {"status": status}
            if admin_notes is not UNSET:
                changes["admin_notes"] = admin_notes
            if follow_up_date is not UNSET:
                changes["follow_up_date"] = follow_up_date
            records[i] = record.model_copy(update=changes)
            self.queue.save(records)
            self.inquiries = records
            logger.info("Inquiry %s moved to %s", inquiry_id, status.value)
            self.bus.publish()
            return records[i]
        return None

    def delete(self, inquiry_id: str) -> bool:
        records = self.queue.read()
        remaining = [r for r in records if r.id != inquiry_id]
        if len(remaining) == len(records):
            return False
        self.queue.save(remaining)
        self.inquiries = remaining
        logger.info("Inquiry %s deleted", inquiry_id)
        self.bus.publish()
        return True

    def contact_url(self, inquiry_id: str) -> Optional[str]:
        record = self.get(inquiry_id)
        if record is None:
            return None
        return whatsapp_url(build_inquiry_message(record))

    def list(
        self,
        status: Optional[Union[InquiryStatus, str]] = None,
        car_id=None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[InquiryRecord]:
        items = self.inquiries
        if status is not None:
            items = [r for r in items if r.status == InquiryStatus(status)]
        if car_id is not None:
            items = [r for r in items if str(r.car_id) == str(car_id)]
        if start is not None:
            items = [r for r in items if _as_utc(r.timestamp) >= _as_utc(start)]
        if end is not None:
            items = [r for r in items if _as_utc(r.timestamp) <= _as_utc(end)]
        return sorted(items, key=lambda r: _as_utc(r.timestamp), reverse=True)

    def statistics(self) -> dict:
        by_status = Counter(r.status.value for r in self.inquiries)
        by_type = Counter(r.inquiry_type.value for r in self.inquiries)
        return {
            "total": len(self.inquiries),
            "by_status": {s.value: by_status.get(s.value, 0) for s in InquiryStatus},
            "by_type": {t.value: by_type.get(t.value, 0) for t in InquiryType},
        }
