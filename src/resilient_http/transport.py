"""Transport adapter performing one HTTP round trip per call.

The transport knows nothing about retries or rate limits. It turns a
RequestDescriptor into a ResponseOutcome, or raises TransportError when the
round trip cannot complete. Status codes are not interpreted here.
"""

import logging
from typing import Protocol, runtime_checkable

import httpx

from resilient_http.exceptions import TransportError
from resilient_http.types import RequestDescriptor, ResponseOutcome

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Anything able to execute a single request."""

    def execute(self, request: RequestDescriptor) -> ResponseOutcome:
        ...


class HttpxTransport:
    """Transport backed by a pooled, thread-safe ``httpx.Client``."""

    def __init__(
        self,
        connect_timeout: float = 10.0,
        request_timeout: float = 10.0,
        follow_redirects: bool = True,
        client: httpx.Client | None = None,
    ):
        """Initialize the transport.

        Args:
            connect_timeout: Seconds allowed to establish a connection
            request_timeout: Seconds allowed for reading, writing and pool waits
            follow_redirects: Whether redirects are followed transparently
            client: Optional pre-built client; it is not closed by this transport
        """
        self.connect_timeout = connect_timeout
        self.request_timeout = request_timeout

        if client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(request_timeout, connect=connect_timeout),
                follow_redirects=follow_redirects,
            )
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

        logger.debug(
            f"Initialized HttpxTransport: connect_timeout={connect_timeout}s, "
            f"request_timeout={request_timeout}s"
        )

    def execute(self, request: RequestDescriptor) -> ResponseOutcome:
        """Send the request and return the status code and body.

        Raises:
            TransportError: On connection errors, timeouts, protocol errors
                or an invalid URL
        """
        logger.debug(f"{request.method.value} {request.url}")
        try:
            response = self._client.request(
                request.method.value,
                request.url,
                headers=dict(request.headers),
                content=request.body,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(
                f"{request.method.value} {request.url} failed: {type(e).__name__}: {e}"
            ) from e

        return ResponseOutcome(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    def close(self):
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()
            logger.debug("Closed httpx client")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
