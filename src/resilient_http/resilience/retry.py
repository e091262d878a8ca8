"""Retry configuration and retry notifications."""

from dataclasses import dataclass

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WAIT_SECONDS = 1.0


@dataclass(frozen=True)
class RetryPolicy:
    """How often a failed attempt is repeated and how long to wait in between.

    Attempt 1 is the initial call; attempts 2..max_attempts are retries. The
    wait is fixed: no backoff, no jitter.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    wait_between_attempts: float = DEFAULT_WAIT_SECONDS
    retry_on: tuple[type[Exception], ...] = (Exception,)

    def __post_init__(self):
        """Validate configuration."""
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.wait_between_attempts < 0:
            raise ValueError(
                f"wait_between_attempts must be >= 0, got {self.wait_between_attempts}"
            )
        if not self.retry_on:
            raise ValueError("retry_on must name at least one exception type")

    @classmethod
    def disabled(cls) -> "RetryPolicy":
        """A policy that makes exactly one attempt."""
        return cls(max_attempts=1, wait_between_attempts=0.0)


@dataclass(frozen=True)
class RetryEvent:
    """Published after a failed attempt that is about to be retried."""

    operation: str
    attempt_number: int
    max_attempts: int
    error: Exception
    wait: float
