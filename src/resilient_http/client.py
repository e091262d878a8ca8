"""Resilient JSON-over-HTTP client.

Every verb call follows the same path:

    build request  ->  [acquire permit -> attempt]*  ->  decode body

Building and decoding run exactly once; only the attempt (transport call
plus status check) is repeated by the resilience policy. Callers see one of
EncodingError, RateLimitExceeded, RetryExhausted or DecodingError, never the
transport's own exception types.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from resilient_http.codec import accepts_none, decode_json
from resilient_http.exceptions import DecodingError, HttpStatusError
from resilient_http.request_builder import build_request
from resilient_http.resilience import RateLimiter, ResiliencePolicy, RetryListener, RetryPolicy
from resilient_http.transport import HttpxTransport, Transport
from resilient_http.types import HttpMethod, RequestDescriptor, ResponseOutcome

if TYPE_CHECKING:
    from resilient_http.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class HttpClientConfig:
    """Configuration for the client, its transport and its resilience policy."""

    # Connection settings
    base_url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    follow_redirects: bool = True

    # Timeout settings (seconds)
    connect_timeout: float = 10.0
    request_timeout: float = 10.0

    # Retry configuration
    max_attempts: int = 5
    retry_wait: float = 1.0

    # Rate limiter configuration
    rate_limit_enabled: bool = True
    permits_per_period: int = 5
    rate_limit_period: float = 1.0
    acquire_timeout: float = 1.0

    def __post_init__(self):
        """Validate configuration."""
        self.base_url = self.base_url.rstrip("/")

        if self.connect_timeout <= 0:
            raise ValueError(f"connect_timeout must be > 0, got {self.connect_timeout}")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.retry_wait < 0:
            raise ValueError(f"retry_wait must be >= 0, got {self.retry_wait}")
        if self.permits_per_period < 1:
            raise ValueError(
                f"permits_per_period must be >= 1, got {self.permits_per_period}"
            )
        if self.rate_limit_period <= 0:
            raise ValueError(
                f"rate_limit_period must be > 0, got {self.rate_limit_period}"
            )
        if self.acquire_timeout < 0:
            raise ValueError(f"acquire_timeout must be >= 0, got {self.acquire_timeout}")

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_attempts, wait_between_attempts=self.retry_wait)

    def rate_limiter(self) -> RateLimiter | None:
        """Build the rate limiter, or None when rate limiting is disabled."""
        if not self.rate_limit_enabled:
            return None
        return RateLimiter(
            permits_per_period=self.permits_per_period,
            period=self.rate_limit_period,
            acquire_timeout=self.acquire_timeout,
        )


class ResilientHttpClient:
    """Thread-safe JSON HTTP client with rate limiting and retry.

    One instance may be shared by many threads; the rate limiter it owns is
    shared by all of them.

    Example:
        with ResilientHttpClient(HttpClientConfig(base_url="https://api.example.com")) as client:
            brands = client.get("/brands", response_type=list[Brand])
            client.delete("/brands/42")
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        transport: Transport | None = None,
        policy: ResiliencePolicy | None = None,
    ):
        """Initialize the client.

        Args:
            config: Client configuration; defaults to HttpClientConfig()
            transport: Transport to use; defaults to an HttpxTransport built
                from the configured timeouts and closed by ``close()``
            policy: Resilience policy; defaults to one built from ``config``
        """
        self.config = config or HttpClientConfig()

        self._owns_transport = transport is None
        self.transport = transport or HttpxTransport(
            connect_timeout=self.config.connect_timeout,
            request_timeout=self.config.request_timeout,
            follow_redirects=self.config.follow_redirects,
        )
        self.policy = policy or ResiliencePolicy(
            retry_policy=self.config.retry_policy(),
            rate_limiter=self.config.rate_limiter(),
        )

        logger.debug(
            f"Initialized ResilientHttpClient: base_url={self.config.base_url or '<none>'}, "
            f"max_attempts={self.policy.retry_policy.max_attempts}, "
            f"rate_limited={self.policy.rate_limiter is not None}"
        )

    @classmethod
    def from_settings(cls, settings: "Settings | None" = None, **kwargs) -> "ResilientHttpClient":
        """Build a client from environment-driven Settings."""
        if settings is None:
            from resilient_http.config import settings as default_settings
            settings = default_settings
        return cls(settings.to_client_config(), **kwargs)

    def add_retry_listener(self, listener: RetryListener) -> None:
        """Observe every retry of every call made through this client."""
        self.policy.add_retry_listener(listener)

    # Verb operations

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        response_type: type[T] | Any = Any,
    ) -> T | None:
        """GET ``url`` and decode the JSON response into ``response_type``."""
        return self.request(HttpMethod.GET, url, headers=headers, response_type=response_type)

    def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        response_type: type[T] | Any = Any,
    ) -> T | None:
        """POST ``body`` as JSON and decode the response into ``response_type``."""
        return self.request(
            HttpMethod.POST, url, headers=headers, body=body, response_type=response_type
        )

    def put(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        response_type: type[T] | Any = Any,
    ) -> T | None:
        """PUT ``body`` as JSON and decode the response into ``response_type``."""
        return self.request(
            HttpMethod.PUT, url, headers=headers, body=body, response_type=response_type
        )

    def patch(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        response_type: type[T] | Any = Any,
    ) -> T | None:
        """PATCH ``body`` as JSON and decode the response into ``response_type``."""
        return self.request(
            HttpMethod.PATCH, url, headers=headers, body=body, response_type=response_type
        )

    def delete(self, url: str, headers: Mapping[str, str] | None = None) -> None:
        """DELETE ``url``. The response body is never decoded."""
        self.request(HttpMethod.DELETE, url, headers=headers, expect_body=False)

    def request(
        self,
        method: HttpMethod | str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        response_type: type[T] | Any = Any,
        expect_body: bool = True,
    ) -> T | None:
        """Perform one logical call with rate limiting, retry and JSON decoding.

        Args:
            method: HTTP verb
            url: Absolute URL or a path relative to the configured base URL
            headers: Per-call headers overriding defaults
            body: Object serialized as the JSON request body, or None
            response_type: Shape the response body is decoded into
            expect_body: False to skip decoding entirely

        Returns:
            Decoded response, or None when ``expect_body`` is False or the
            body is empty and ``response_type`` admits None

        Raises:
            EncodingError: If the request cannot be built (unknown method,
                missing URL, unserializable ``body``)
            RateLimitExceeded: If a permit is not acquired in time
            RetryExhausted: If every attempt failed
            DecodingError: If a successful body cannot be decoded, including
                an empty body for a shape that does not admit None
        """
        request = build_request(
            method,
            url,
            headers,
            body,
            base_url=self.config.base_url,
            default_headers=self.config.headers,
        )
        operation_name = f"{request.method.value} {request.url}"

        outcome = self.policy.execute(lambda: self._attempt(request), operation_name)

        if not expect_body:
            return None
        # An empty body only satisfies shapes that admit None; others fail to decode
        if not outcome.body.strip() and accepts_none(response_type):
            return None

        logger.debug(f"{operation_name} -> {outcome.status_code} ({len(outcome.body)} bytes)")
        try:
            return decode_json(outcome.body, response_type)
        except DecodingError as e:
            e.status_code = outcome.status_code
            raise

    def _attempt(self, request: RequestDescriptor) -> ResponseOutcome:
        """One round trip; a non-2xx status counts as a failed attempt."""
        outcome = self.transport.execute(request)
        if not outcome.is_success:
            raise HttpStatusError(outcome.status_code, outcome.body)
        return outcome

    # Lifecycle

    def close(self):
        """Close the transport if this client created it."""
        if self._owns_transport and hasattr(self.transport, "close"):
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def get_stats(self) -> dict:
        """Get current client statistics.

        Returns:
            Dict with base URL, timeouts, retry settings and rate limiter stats
        """
        rate_limiter = self.policy.rate_limiter
        return {
            "base_url": self.config.base_url,
            "connect_timeout": self.config.connect_timeout,
            "request_timeout": self.config.request_timeout,
            "max_attempts": self.policy.retry_policy.max_attempts,
            "retry_wait": self.policy.retry_policy.wait_between_attempts,
            "rate_limiter": rate_limiter.get_stats() if rate_limiter else None,
        }
