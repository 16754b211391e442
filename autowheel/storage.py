# autowheel/storage.py
"""Key-value storage port.

Values are opaque strings (JSON in practice), read and replaced wholesale.
`subscribe` reports changes written through *other* handles of the same
backing store, never the handle's own writes; callers that need same-handle
notification publish explicitly (see `bus.InquiryQueueBus`).
"""
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

from apscheduler.jobstores.base import JobLookupError
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from .models import StorageEntry
from .scheduler import get_scheduler
from .utils import env_int, logger

ChangeCallback = Callable[[str, Optional[str]], None]


class StorageError(Exception):
    """Raised when the backing store cannot be read or written."""


class KeyValueStore(ABC):
    def __init__(self):
        self._subscribers: Dict[str, List[ChangeCallback]] = {}
        self._sub_lock = threading.Lock()

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    def subscribe(self, key: str, callback: ChangeCallback) -> Callable[[], None]:
        with self._sub_lock:
            self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe():
            with self._sub_lock:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)
        return unsubscribe

    def _dispatch(self, key: str, value: Optional[str]) -> None:
        with self._sub_lock:
            callbacks = list(self._subscribers.get(key, ()))
        for callback in callbacks:
            try:
                callback(key, value)
            except Exception:
                logger.exception("Storage change listener failed for %s", key)


class MemoryBackend:
    """Shared in-memory data; each `MemoryStore` on it acts as a separate context."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.handles: List["MemoryStore"] = []
        self.lock = threading.Lock()


class MemoryStore(KeyValueStore):
    def __init__(self, backend: Optional[MemoryBackend] = None):
        super().__init__()
        self.backend = backend or MemoryBackend()
        with self.backend.lock:
            self.backend.handles.append(self)

    def context(self) -> "MemoryStore":
        """Open another handle on the same data, like a second browser tab."""
        return MemoryStore(self.backend)

    def close(self) -> None:
        with self.backend.lock:
            if self in self.backend.handles:
                self.backend.handles.remove(self)

    def get(self, key: str) -> Optional[str]:
        return self.backend.data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Value for {key} must be a string")
        with self.backend.lock:
            self.backend.data[key] = value
            others = [h for h in self.backend.handles if h is not self]
        for handle in others:
            handle._dispatch(key, value)


class SqlStore(KeyValueStore):
    """Durable store on the `storage_entries` table.

    Every write bumps the row version. Writes from other handles or other
    processes are picked up by `poll()`, which `watch()` runs periodically.
    """

    def __init__(self, session_factory):
        super().__init__()
        self._session_factory = session_factory
        self._seen: Dict[str, int] = {}
        self._seen_lock = threading.Lock()
        self._job = None

    @contextmanager
    def _session(self):
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    def _version(self, key: str) -> int:
        try:
            with self._session() as db:
                version = db.execute(
                    select(StorageEntry.version).where(StorageEntry.key == key)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read version of {key}") from e
        return version or 0

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session() as db:
                entry = db.get(StorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            logger.error("Storage read failed for %s: %s", key, e)
            raise StorageError(f"Could not read {key}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self._session() as db:
                res = db.execute(
                    update(StorageEntry)
                    .where(StorageEntry.key == key)
                    .values(value=value, version=StorageEntry.version + 1)
                )
                if res.rowcount == 0:
                    db.add(StorageEntry(key=key, value=value, version=1))
                    db.flush()
                version = db.execute(
                    select(StorageEntry.version).where(StorageEntry.key == key)
                ).scalar_one()
                db.commit()
        except SQLAlchemyError as e:
            logger.error("Storage write failed for %s: %s", key, e)
            raise StorageError(f"Could not save {key}") from e
        with self._seen_lock:
            self._seen[key] = version

    def subscribe(self, key: str, callback: ChangeCallback) -> Callable[[], None]:
        with self._seen_lock:
            if key not in self._seen:
                self._seen[key] = self._version(key)
        return super().subscribe(key, callback)

    def poll(self) -> List[str]:
        """Notify subscribers of keys changed elsewhere since the last look."""
        with self._sub_lock:
            keys = [k for k, callbacks in self._subscribers.items() if callbacks]
        changed = []
        for key in keys:
            try:
                version = self._version(key)
            except StorageError as e:
                logger.warning("Storage poll skipped %s: %s", key, e)
                continue
            with self._seen_lock:
                if version == self._seen.get(key):
                    continue
                self._seen[key] = version
            changed.append(key)
            self._dispatch(key, self.get(key))
        return changed

    def watch(self, scheduler=None, seconds: Optional[int] = None):
        if self._job is not None:
            return self._job
        seconds = seconds or env_int("STORAGE_POLL_SECONDS", 2)
        sched = scheduler or get_scheduler()
        self._job = sched.add_job(self.poll, "interval", seconds=seconds, max_instances=1)
        logger.info("Polling storage for changes every %ss", seconds)
        return self._job

    def unwatch(self) -> None:
        if self._job is not None:
            try:
                self._job.remove()
            except JobLookupError:
                logger.debug("Storage poll job already gone")
            self._job = None
