"""In-process queue for side effects of state changes (audit trail etc.).

Delivery contract: at-most-once.

* ``publish`` never blocks and never raises into the caller. When the queue
  is full the event is dropped and a warning is logged.
* An event is removed from the queue before its handler runs. If the
  handler raises, the error is logged and the event is not retried.
* Events still queued when the process exits are lost.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional

from ..core.constants import DEFAULT_EVENT_QUEUE_SIZE
from .model import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]

_POLL_SECONDS = 0.2


class EventQueue:
    def __init__(self, maxsize: int = DEFAULT_EVENT_QUEUE_SIZE):
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=int(maxsize))
        self._worker: Optional[threading.Thread] = None
        self._stopping = threading.Event()
        self._dropped = 0
        self._lock = threading.Lock()

    @property
    def dropped(self) -> int:
        return self._dropped

    def pending(self) -> int:
        return self._queue.qsize()

    def publish(self, event: DomainEvent) -> bool:
        """Enqueue ``event``; returns False when it had to be dropped."""
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            with self._lock:
                self._dropped += 1
            logger.warning("event queue full, dropping event", extra={"event_name": event.name})
            return False

    def drain(self, handler: EventHandler) -> int:
        """Deliver every queued event to ``handler`` on the calling thread."""
        delivered = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return delivered
            try:
                if self._deliver(handler, item):
                    delivered += 1
            finally:
                self._queue.task_done()

    def start(self, handler: EventHandler) -> None:
        if self._worker and self._worker.is_alive():
            return
        self._stopping.clear()
        self._worker = threading.Thread(
            target=self._run, args=(handler,), name="school-attendance-events", daemon=True
        )
        self._worker.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the worker after the event it is delivering; queued events stay queued."""
        if not self._worker:
            return
        self._stopping.set()
        self._worker.join(timeout)
        self._worker = None

    def _run(self, handler: EventHandler) -> None:
        while not self._stopping.is_set():
            try:
                item = self._queue.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                continue
            try:
                self._deliver(handler, item)
            finally:
                self._queue.task_done()

    @staticmethod
    def _deliver(handler: EventHandler, event) -> bool:
        try:
            handler(event)
            return True
        except Exception:
            logger.exception("event handler failed, event dropped", extra={"event_name": event.name})
            return False
