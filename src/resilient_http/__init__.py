"""resilient_http - JSON over HTTP with rate limiting and retry.

Quick start:
    from resilient_http import HttpClientConfig, ResilientHttpClient

    with ResilientHttpClient(HttpClientConfig(base_url="https://api.example.com")) as client:
        prices = client.get("/prices", response_type=list[Price])
"""

from .client import HttpClientConfig, ResilientHttpClient
from .codec import accepts_none, decode_json, encode_json
from .exceptions import (
    AttemptError,
    DecodingError,
    EncodingError,
    HttpStatusError,
    RateLimitExceeded,
    ResilientHttpError,
    RetryExhausted,
    TransportError,
)
from .request_builder import build_request, merge_with_defaults
from .resilience import RateLimiter, ResiliencePolicy, RetryEvent, RetryPolicy
from .transport import HttpxTransport, Transport
from .types import HttpMethod, RequestDescriptor, ResponseOutcome

__version__ = "0.1.0"

__all__ = [
    "AttemptError",
    "DecodingError",
    "EncodingError",
    "HttpClientConfig",
    "HttpMethod",
    "HttpStatusError",
    "HttpxTransport",
    "RateLimitExceeded",
    "RateLimiter",
    "RequestDescriptor",
    "ResilientHttpClient",
    "ResilientHttpError",
    "ResiliencePolicy",
    "ResponseOutcome",
    "RetryEvent",
    "RetryExhausted",
    "RetryPolicy",
    "Transport",
    "TransportError",
    "build_request",
    "accepts_none",
    "decode_json",
    "encode_json",
    "merge_with_defaults",
]
