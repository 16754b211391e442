# autowheel/bus.py
"""Change notifications for the persisted inquiry queue.

Listeners get no payload: a notification only says "the queue changed", and
every listener re-reads the queue from storage. Two sources feed the same
listener list: explicit `publish()` calls after a local write, and the
storage port's own change feed for writes made through other handles.
"""
import threading
from typing import Callable, List, Optional

from .storage import KeyValueStore
from .utils import logger

INQUIRY_QUEUE_KEY = "autowheel_inquiries"

Listener = Callable[[], None]


class InquiryQueueBus:
    def __init__(self, store: Optional[KeyValueStore] = None, key: str = INQUIRY_QUEUE_KEY):
        self.key = key
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self._detach = None
        if store is not None:
            self._detach = store.subscribe(key, self._on_storage_change)

    def on_inquiry_queue_changed(self, callback: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)
        return unsubscribe

    def publish(self) -> int:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Inquiry queue listener failed")
        return len(listeners)

    def _on_storage_change(self, key, value) -> None:
        logger.debug("Inquiry queue changed in another context")
        self.publish()

    def close(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None
        with self._lock:
            self._listeners.clear()
