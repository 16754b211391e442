# tests/test_console.py
import json
from datetime import date, datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest

from autowheel.bus import InquiryQueueBus
from autowheel.console import AdminInquiryConsole
from autowheel.inquiries import InquiryQueue, build_inquiry_record, submit_inquiry
from autowheel.schemas import InquiryStatus
from autowheel.storage import StorageError
from autowheel.validation import validate_inquiry


@pytest.fixture
def seeded(listing, form, queue):
    data = validate_inquiry(form).data
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    records = [build_inquiry_record(listing, data, now=start + timedelta(days=i)) for i in range(4)]
    queue.save(records)
    return records


def test_mount_reads_queue(seeded, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    assert [r.id for r in console.inquiries] == [r.id for r in seeded]


def test_bus_notification_refreshes(listing, form, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    assert console.inquiries == []
    submit_inquiry(listing, form, queue, bus, opener=lambda url: None)
    assert len(console.inquiries) == 1


def test_unmount_stops_refreshing(listing, form, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    console.unmount()
    submit_inquiry(listing, form, queue, bus, opener=lambda url: None)
    assert console.inquiries == []
    console.activate()
    assert len(console.inquiries) == 1


def test_delete_leaves_n_minus_one(seeded, store, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    target = seeded[1].id
    assert console.delete(target) is True

    fresh = AdminInquiryConsole(InquiryQueue(store.context()), InquiryQueueBus(store.context())).mount()
    ids = [r.id for r in fresh.inquiries]
    assert len(ids) == len(seeded) - 1
    assert target not in ids


def test_delete_unknown(seeded, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    assert console.delete("nope") is False
    assert len(queue.load()) == len(seeded)


def test_update_status_writes_through(seeded, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    updated = console.update_status(seeded[0].id, "contacted", admin_notes="Called back",
                                    follow_up_date=date(2024, 2, 1))
    assert updated.status is InquiryStatus.CONTACTED
    stored = {r.id: r for r in queue.load()}[seeded[0].id]
    assert stored.status is InquiryStatus.CONTACTED
    assert stored.admin_notes == "Called back"
    assert stored.follow_up_date == date(2024, 2, 1)
    assert stored.timestamp == seeded[0].timestamp


def test_update_status_rejects_unknown_values(seeded, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    with pytest.raises(ValueError):
        console.update_status(seeded[0].id, "archived")
    assert console.update_status("missing", "sold") is None


def test_mutation_notifies_other_consoles(seeded, store, queue, bus):
    other_tab = store.context()
    other = AdminInquiryConsole(InquiryQueue(other_tab), InquiryQueueBus(other_tab)).mount()
    AdminInquiryConsole(queue, bus).mount().delete(seeded[0].id)
    assert len(other.inquiries) == len(seeded) - 1


def test_contact_url_uses_snapshot(seeded, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    url = console.contact_url(seeded[0].id)
    assert url.startswith("https://wa.me/")
    text = parse_qs(urlparse(url).query)["text"][0]
    assert "Toyota Camry" in text and "LKR 8,500,000" in text
    assert console.contact_url("missing") is None


def test_list_filters_and_orders(seeded, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    console.update_status(seeded[2].id, InquiryStatus.SOLD)
    assert [r.id for r in console.list()] == [r.id for r in reversed(seeded)]
    assert [r.id for r in console.list(status="sold")] == [seeded[2].id]
    assert console.list(car_id="8") == []
    window = console.list(start=datetime(2024, 1, 2), end=datetime(2024, 1, 3, tzinfo=timezone.utc))
    assert [r.id for r in window] == [seeded[2].id, seeded[1].id]


def test_statistics(seeded, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    console.update_status(seeded[0].id, "contacted")
    stats = console.statistics()
    assert stats["total"] == 4
    assert stats["by_status"]["pending"] == 3
    assert stats["by_status"]["contacted"] == 1
    assert stats["by_status"]["sold"] == 0
    assert stats["by_type"]["test_drive"] == 4


def test_mutations_refuse_unreadable_queue(seeded, store, queue, bus):
    rows = json.loads(store.get(queue.key))
    rows[2]["status"] = "archived"
    original = json.dumps(rows)
    store.set(queue.key, original)

    console = AdminInquiryConsole(queue, bus).mount()
    assert console.inquiries == []
    with pytest.raises(StorageError):
        console.delete(seeded[0].id)
    with pytest.raises(StorageError):
        console.update_status(seeded[0].id, "sold")
    assert store.get(queue.key) == original


def test_update_status_can_clear_notes(seeded, queue, bus):
    console = AdminInquiryConsole(queue, bus).mount()
    target = seeded[0].id
    console.update_status(target, "contacted", admin_notes="Call Friday", follow_up_date=date(2024, 2, 1))

    kept = console.update_status(target, "in_progress")
    assert kept.admin_notes == "Call Friday"
    assert kept.follow_up_date == date(2024, 2, 1)

    cleared = console.update_status(target, "sold", admin_notes=None, follow_up_date=None)
    assert cleared.admin_notes is None
    assert cleared.follow_up_date is None
    stored = {r.id: r for r in queue.load()}[target]
    assert stored.admin_notes is None and stored.follow_up_date is None
