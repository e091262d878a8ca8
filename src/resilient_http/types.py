"""Type definitions for requests and responses exchanged with the transport."""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class HttpMethod(str, Enum):
    """HTTP verbs supported by the client."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


@dataclass(frozen=True)
class RequestDescriptor:
    """A transport-ready request.

    ``body`` is ``None`` when the request carries no payload at all, which is
    not the same thing as an empty byte string.
    """

    method: HttpMethod
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def __post_init__(self):
        # Freeze the header mapping so the descriptor cannot change after build
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def has_body(self) -> bool:
        return self.body is not None


@dataclass(frozen=True)
class ResponseOutcome:
    """Status code and raw body of one completed HTTP round trip."""

    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
