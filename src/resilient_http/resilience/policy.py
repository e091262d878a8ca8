"""Rate limiting composed with retry around a single attempt.

The retry loop is the outer structure and the rate limiter gates every
attempt, retries included:

    for attempt in 1..max_attempts:
        acquire permit            (RateLimitExceeded ends the call, no retry)
        run attempt               (success returns immediately)
        last attempt?             -> RetryExhausted from the failure
        notify listeners, sleep fixed wait
"""

import functools
import logging
import threading
import time
import uuid
from collections.abc import Callable
from typing import ParamSpec, TypeVar

from resilient_http.exceptions import RetryExhausted
from resilient_http.resilience.rate_limiter import RateLimiter
from resilient_http.resilience.retry import RetryEvent, RetryPolicy

logger = logging.getLogger(__name__)

P = ParamSpec('P')
T = TypeVar('T')

RetryListener = Callable[[RetryEvent], None]


class ResiliencePolicy:
    """Applies a RetryPolicy and an optional RateLimiter to zero-argument attempts.

    One instance is shared by every call of a client. The retry policy is
    immutable and the rate limiter synchronizes itself, so ``execute`` may be
    called from many threads at once.
    """

    def __init__(
        self,
        retry_policy: RetryPolicy | None = None,
        rate_limiter: RateLimiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the policy.

        Args:
            retry_policy: Attempts and wait; defaults to RetryPolicy()
            rate_limiter: Limiter gating each attempt; None never limits
            sleep: Function used for the wait between attempts
        """
        self.retry_policy = retry_policy or RetryPolicy()
        self.rate_limiter = rate_limiter
        self._sleep = sleep
        self._listeners: list[RetryListener] = []
        self._listeners_lock = threading.Lock()

    @classmethod
    def disabled(cls) -> "ResiliencePolicy":
        """A single attempt with no rate limiting."""
        return cls(retry_policy=RetryPolicy.disabled(), rate_limiter=None)

    def add_retry_listener(self, listener: RetryListener) -> None:
        """Register a callback invoked with a RetryEvent before every retry."""
        with self._listeners_lock:
            self._listeners.append(listener)

    def _publish(self, event: RetryEvent, request_id: str) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(
                    f"[{request_id}] Retry listener {listener!r} raised {type(e).__name__}: {e}",
                    exc_info=True,
                )

    def execute(self, attempt: Callable[[], T], operation_name: str = "operation") -> T:
        """Run ``attempt`` under rate limiting and retry.

        Args:
            attempt: Zero-argument callable performing one attempt
            operation_name: Human-readable name for logs and events

        Returns:
            Result of the first successful attempt

        Raises:
            RateLimitExceeded: If a permit is not acquired in time
            RetryExhausted: If every attempt failed; chained from the last error
            Exception: Any error not listed in ``retry_on``, unchanged
        """
        request_id = str(uuid.uuid4())[:8]
        max_attempts = self.retry_policy.max_attempts
        wait = self.retry_policy.wait_between_attempts

        for attempt_number in range(1, max_attempts + 1):
            if self.rate_limiter is not None:
                self.rate_limiter.acquire_permission()

            try:
                result = attempt()
            except self.retry_policy.retry_on as e:
                if attempt_number == max_attempts:
                    logger.error(
                        f"[{request_id}] {operation_name} failed after "
                        f"{max_attempts} attempt(s): {e}"
                    )
                    raise RetryExhausted(operation_name, max_attempts, e) from e

                logger.info(
                    f"[{request_id}] {operation_name} attempt "
                    f"{attempt_number}/{max_attempts} failed: {e}. "
                    f"Retrying in {wait:.2f}s..."
                )
                self._publish(
                    RetryEvent(
                        operation=operation_name,
                        attempt_number=attempt_number,
                        max_attempts=max_attempts,
                        error=e,
                        wait=wait,
                    ),
                    request_id,
                )
                if wait > 0:
                    self._sleep(wait)
                continue

            if attempt_number > 1:
                logger.info(
                    f"[{request_id}] {operation_name} succeeded on attempt "
                    f"{attempt_number}/{max_attempts}"
                )
            else:
                logger.debug(f"[{request_id}] {operation_name} succeeded on first attempt")
            return result

        # max_attempts >= 1 guarantees the loop returns or raises
        raise RuntimeError(f"{operation_name} failed unexpectedly")

    def decorate(self, func: Callable[P, T]) -> Callable[P, T]:
        """Wrap ``func`` so every call goes through ``execute``."""
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return self.execute(lambda: func(*args, **kwargs), func.__name__)

        return wrapper
