"""Exception hierarchy for resilient_http.

Callers only ever see four terminal errors from a verb call:

- EncodingError: the request body could not be serialized
- RateLimitExceeded: no rate-limit permit within the acquire timeout
- RetryExhausted: every attempt failed; ``__cause__`` is the last failure
- DecodingError: a successful response body could not be decoded

AttemptError and its subclasses describe a single failed attempt. They are
retried by the resilience policy and surface as the cause of RetryExhausted.
"""


class ResilientHttpError(Exception):
    """Base exception for all resilient_http errors."""
    pass


class EncodingError(ResilientHttpError):
    """Raised when a request cannot be built: unsupported method, missing URL
    or a body that cannot be serialized to JSON."""
    pass


class DecodingError(ResilientHttpError):
    """Raised when a successful response body cannot be decoded."""

    def __init__(self, message: str, status_code: int | None = None, body: bytes = b""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class RateLimitExceeded(ResilientHttpError):
    """Raised when a rate-limit permit is not acquired within the timeout."""

    def __init__(self, acquire_timeout: float, message: str | None = None):
        self.acquire_timeout = acquire_timeout
        super().__init__(
            message
            or f"Rate limit exceeded: no permit acquired within {acquire_timeout:.2f}s"
        )


class RetryExhausted(ResilientHttpError):
    """Raised when all attempts of an operation have failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{operation} failed after {attempts} attempt(s). Last error: {last_error}"
        )


class AttemptError(ResilientHttpError):
    """Base exception for a single failed attempt (retryable)."""
    pass


class HttpStatusError(AttemptError):
    """Raised when the server answers with a status outside [200, 300)."""

    def __init__(self, status_code: int, body: bytes = b""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP error: {status_code}")


class TransportError(AttemptError):
    """Raised when the HTTP round trip itself fails (connect, timeout, protocol)."""
    pass
