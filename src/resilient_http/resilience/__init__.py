"""Resilience building blocks: rate limiting and retry.

ResiliencePolicy composes a RetryPolicy with an optional RateLimiter around
a single attempt so callers never deal with transient failures directly.
"""

from .policy import ResiliencePolicy, RetryListener
from .rate_limiter import RateLimiter
from .retry import RetryEvent, RetryPolicy

__all__ = [
    "RateLimiter",
    "ResiliencePolicy",
    "RetryEvent",
    "RetryListener",
    "RetryPolicy",
]
