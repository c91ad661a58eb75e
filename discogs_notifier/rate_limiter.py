"""Request rate limiting for the Discogs API.

Requests are spaced evenly: with ``rate=60, per=60.0`` each call to
:meth:`RateLimiter.acquire` is released one second after the previous one.
A caller that has been idle gets its slot immediately, but idle time is not
banked, so there is never a burst of ``rate`` requests followed by a
silent window.

Example:
    >>> limiter = RateLimiter(rate=60, per=60.0)
    >>> limiter.acquire()  # returns immediately
    0.0
    >>> limiter.acquire()  # waits ~1s
"""
import logging
import threading
import time
from typing import Callable


logger = logging.getLogger(__name__)


class RateLimiter:
    """Thread-safe leaky-bucket rate limiter."""

    def __init__(
        self,
        rate: int = 60,
        per: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        """Initialize the rate limiter.

        Args:
            rate: Number of requests allowed per period
            per: Period length in seconds
            clock: Monotonic clock (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        if rate <= 0 or per <= 0:
            raise ValueError("rate and per must be positive")

        self.rate = rate
        self.per = per
        self.interval = per / rate
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_slot: float | None = None

    def acquire(self) -> float:
        """Block until another request may be issued.

        Returns:
            Seconds spent waiting
        """
        with self._lock:
            now = self._clock()
            if self._next_slot is None or self._next_slot < now:
                slot = now
            else:
                slot = self._next_slot
            self._next_slot = slot + self.interval

        delay = slot - now
        if delay > 0:
            logger.debug("Rate limiting: waiting %.2fs", delay)
            self._sleep(delay)
        return delay
