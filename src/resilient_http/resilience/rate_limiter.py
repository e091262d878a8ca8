"""Fixed-window rate limiter shared by all callers of a client.

Time is divided into consecutive periods of ``period`` seconds. Each period
grants at most ``permits_per_period`` permits; the counter refills when a
new period starts. A caller that finds no permit left waits for the next
period, but never longer than its acquire timeout:

    permits available        -> take one, return immediately
    next period within time  -> sleep until it starts, try again
    next period too far away -> reject without sleeping

Waiting happens outside the lock so other threads are never blocked by a
sleeping caller.
"""

import logging
import threading
import time
from collections.abc import Callable

from resilient_http.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

DEFAULT_PERMITS_PER_PERIOD = 5
DEFAULT_PERIOD_SECONDS = 1.0
DEFAULT_ACQUIRE_TIMEOUT_SECONDS = 1.0


class RateLimiter:
    """Thread-safe permit counter resetting at fixed period boundaries."""

    def __init__(
        self,
        permits_per_period: int = DEFAULT_PERMITS_PER_PERIOD,
        period: float = DEFAULT_PERIOD_SECONDS,
        acquire_timeout: float = DEFAULT_ACQUIRE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the rate limiter.

        Args:
            permits_per_period: Maximum permits granted within one period
            period: Period length in seconds
            acquire_timeout: Default seconds a caller may wait for a permit
            clock: Monotonic time source
            sleep: Function used to wait for the next period

        Raises:
            ValueError: If permits_per_period < 1, period <= 0 or
                acquire_timeout < 0
        """
        if permits_per_period < 1:
            raise ValueError(f"permits_per_period must be >= 1, got {permits_per_period}")
        if period <= 0:
            raise ValueError(f"period must be > 0, got {period}")
        if acquire_timeout < 0:
            raise ValueError(f"acquire_timeout must be >= 0, got {acquire_timeout}")

        self.permits_per_period = permits_per_period
        self.period = period
        self.acquire_timeout = acquire_timeout
        self._clock = clock
        self._sleep = sleep

        self._period_start = clock()
        self._available = permits_per_period
        self._granted_total = 0
        self._rejected_total = 0

        self._lock = threading.Lock()

        logger.info(
            f"RateLimiter initialized: {permits_per_period} permits / {period}s, "
            f"acquire_timeout={acquire_timeout}s"
        )

    def _refresh(self, now: float) -> None:
        """Start a new period if the current one has ended.

        NOTE: This method must be called with self._lock held.
        """
        elapsed = now - self._period_start
        if elapsed >= self.period:
            self._period_start += (elapsed // self.period) * self.period
            self._available = self.permits_per_period

    def try_acquire(self, timeout: float | None = None) -> bool:
        """Take one permit, waiting up to ``timeout`` seconds.

        Args:
            timeout: Seconds to wait; defaults to ``acquire_timeout``

        Returns:
            True if a permit was granted, False on timeout
        """
        timeout = self.acquire_timeout if timeout is None else timeout
        deadline = self._clock() + timeout

        while True:
            with self._lock:
                now = self._clock()
                self._refresh(now)

                if self._available > 0:
                    self._available -= 1
                    self._granted_total += 1
                    logger.debug(
                        f"Rate limit permit granted ({self._available}/"
                        f"{self.permits_per_period} left in period)"
                    )
                    return True

                wait_time = self._period_start + self.period - now
                if wait_time > deadline - now:
                    self._rejected_total += 1
                    return False

            logger.debug(f"Rate limit reached. Waiting {wait_time:.3f}s for next period.")
            self._sleep(wait_time)

    def acquire_permission(self, timeout: float | None = None) -> None:
        """Take one permit or fail.

        Raises:
            RateLimitExceeded: If no permit becomes available in time
        """
        timeout = self.acquire_timeout if timeout is None else timeout
        if not self.try_acquire(timeout):
            logger.warning(f"Rate limit exceeded: no permit within {timeout:.2f}s")
            raise RateLimitExceeded(timeout)

    def get_stats(self) -> dict:
        """Get rate limiter statistics for monitoring (thread-safe).

        Returns:
            Dict with fields:
                permits_per_period: Configured permits per period
                period: Period length in seconds
                acquire_timeout: Default acquire timeout in seconds
                available_permits: Permits left in the current period
                granted_total: Permits granted since construction
                rejected_total: Acquisitions that timed out
        """
        with self._lock:
            self._refresh(self._clock())
            return {
                "permits_per_period": self.permits_per_period,
                "period": self.period,
                "acquire_timeout": self.acquire_timeout,
                "available_permits": self._available,
                "granted_total": self._granted_total,
                "rejected_total": self._rejected_total,
            }
