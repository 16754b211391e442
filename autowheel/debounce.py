# autowheel/debounce.py
"""Debounced value holder.

Each `set()` supersedes the pending update, so only the latest value is ever
published, and only after it has been left alone for the full delay.
"""
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from apscheduler.jobstores.base import JobLookupError

from .scheduler import get_scheduler
from .utils import env_int, logger

DEFAULT_DELAY_MS = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Debouncer:
    def __init__(
        self,
        value: Any,
        delay_ms: int = DEFAULT_DELAY_MS,
        scheduler=None,
        clock: Optional[Callable[[], datetime]] = None,
        on_change: Optional[Callable[[Any], None]] = None,
    ):
        self.delay_ms = delay_ms
        self._value = value
        self._scheduler = scheduler
        self._clock = clock or _utcnow
        self._on_change = on_change
        self._job = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> Any:
        return self._value

    @property
    def pending(self) -> bool:
        return self._job is not None

    def set(self, value: Any) -> None:
        if self.delay_ms <= 0:
            with self._lock:
                self._generation += 1
                self._drop_job()
            self._apply(value, None)
            return
        with self._lock:
            self._generation += 1
            self._drop_job()
            sched = self._scheduler or get_scheduler()
            self._job = sched.add_job(
                self._apply,
                "date",
                run_date=self._clock() + timedelta(milliseconds=self.delay_ms),
                args=[value, self._generation],
            )

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            self._drop_job()

    close = cancel

    def reset(self, value: Any) -> None:
        """Drop any pending update and jump straight to `value`."""
        with self._lock:
            self._generation += 1
            self._drop_job()
            self._value = value

    def _drop_job(self) -> None:
        if self._job is None:
            return
        try:
            self._job.remove()
        except JobLookupError:
            # already fired or running; the generation check discards it
            pass
        self._job = None

    def _apply(self, value: Any, generation: Optional[int]) -> None:
        with self._lock:
            if generation is not None:
                if generation != self._generation:
                    return
                self._job = None
            changed = value != self._value
            self._value = value
        if changed and self._on_change is not None:
            try:
                self._on_change(value)
            except Exception:
                logger.exception("Debounce listener failed")


def use_debounced_value(value: Any, delay_ms: Optional[int] = None, **kwargs) -> Debouncer:
    if delay_ms is None:
        delay_ms = env_int("SEARCH_DEBOUNCE_MS", DEFAULT_DELAY_MS)
    return Debouncer(value, delay_ms, **kwargs)
