"""Background delivery of new listing notifications."""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from .models import MarketSnapshot


logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Delivers notifications on a bounded worker pool.

    Submitting blocks once ``max_pending`` deliveries are queued or running,
    so a slow mail server slows the poll loop down instead of piling up
    work. Delivery failures are logged and counted, never retried.
    """

    def __init__(
        self,
        notify: Callable[[MarketSnapshot], None],
        max_workers: int = 2,
        max_pending: int = 32
    ):
        """Initialize the dispatcher.

        Args:
            notify: Callable delivering one notification
            max_workers: Number of delivery threads
            max_pending: Deliveries allowed in flight before submit blocks
        """
        self.notify = notify
        self.executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="notify",
        )
        self._slots = threading.BoundedSemaphore(max_pending)
        self._lock = threading.Lock()
        self.delivered = 0
        self.failures = 0

    def submit(self, snapshot: MarketSnapshot) -> Future:
        """Queue a notification for delivery."""
        self._slots.acquire()
        try:
            return self.executor.submit(self._deliver, snapshot)
        except RuntimeError:
            self._slots.release()
            raise

    def _deliver(self, snapshot: MarketSnapshot) -> bool:
        try:
            self.notify(snapshot)
        except Exception:
            logger.exception(
                "Unable to notify new listing for %s (item %s)",
                snapshot.name, snapshot.id
            )
            with self._lock:
                self.failures += 1
            return False
        else:
            with self._lock:
                self.delivered += 1
            return True
        finally:
            self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting notifications, optionally waiting for pending ones."""
        self.executor.shutdown(wait=wait)

    def __enter__(self) -> "NotificationDispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)
