# tests/conftest.py
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from apscheduler.jobstores.base import JobLookupError

from autowheel.bus import InquiryQueueBus
from autowheel.db import Base, engine, SessionLocal
from autowheel.inquiries import InquiryQueue
from autowheel.storage import MemoryStore
import autowheel.models  # noqa: F401


class FakeJob:
    def __init__(self, scheduler, func, run_date, args):
        self.scheduler = scheduler
        self.func = func
        self.run_date = run_date
        self.args = list(args)

    def remove(self):
        if self not in self.scheduler.jobs:
            raise JobLookupError(id(self))
        self.scheduler.jobs.remove(self)


class FakeScheduler:
    """Just enough of APScheduler's API to drive date jobs from a manual clock."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.jobs = []

    def clock(self):
        return self.now

    def add_job(self, func, trigger, run_date=None, args=(), **kwargs):
        job = FakeJob(self, func, run_date, args)
        self.jobs.append(job)
        return job

    def advance(self, ms):
        target = self.now + timedelta(milliseconds=ms)
        while True:
            due = sorted((j for j in self.jobs if j.run_date <= target), key=lambda j: j.run_date)
            if not due:
                break
            job = due[0]
            self.jobs.remove(job)
            self.now = job.run_date
            job.func(*job.args)
        self.now = target


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def queue(store):
    return InquiryQueue(store)


@pytest.fixture
def bus(store):
    bus = InquiryQueueBus(store)
    yield bus
    bus.close()


@pytest.fixture
def listing():
    return SimpleNamespace(id=7, make="Toyota", model="Camry", year=2020, price=8_500_000)


@pytest.fixture
def form():
    return {
        "customer_name": "John Doe",
        "customer_email": "John@Example.com",
        "customer_phone": "077-123 4567",
        "customer_location": " Colombo ",
        "customer_message": "I am interested in this car",
        "inquiry_type": "test_drive",
        "preferred_contact_method": "whatsapp",
    }
