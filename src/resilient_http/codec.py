"""JSON encoding and decoding built on pydantic.

Request bodies may be plain JSON-compatible values, dataclasses or pydantic
models. Response bodies are validated into whatever type the caller asks for
(anything ``pydantic.TypeAdapter`` accepts).
"""

import functools
import logging
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError
from pydantic_core import PydanticSerializationError, to_json

from resilient_http.exceptions import DecodingError, EncodingError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def encode_json(body: Any) -> bytes:
    """Serialize a request body to UTF-8 JSON bytes.

    Raises:
        EncodingError: If the value cannot be represented as JSON
    """
    try:
        return to_json(body)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodingError(
            f"Cannot serialize request body of type {type(body).__name__}: {e}"
        ) from e


@functools.lru_cache(maxsize=128)
def _cached_adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def _adapter_for(response_type: Any) -> TypeAdapter:
    try:
        return _cached_adapter(response_type)
    except TypeError:
        # Unhashable type expressions skip the cache
        return TypeAdapter(response_type)


def decode_json(data: bytes, response_type: type[T] | Any = Any) -> T:
    """Decode JSON bytes into ``response_type``.

    Args:
        data: Raw response body
        response_type: Target shape, e.g. a pydantic model, a dataclass,
            ``dict[str, int]`` or ``Any`` for plain JSON values

    Raises:
        DecodingError: If the bytes are not valid JSON for the target shape
    """
    try:
        adapter = _adapter_for(response_type)
        return adapter.validate_json(data)
    except (ValidationError, PydanticSchemaGenerationError) as e:
        logger.debug(f"Failed to decode {len(data)} bytes into {response_type!r}: {e}")
        raise DecodingError(f"Cannot decode response body into {response_type!r}: {e}", body=data) from e


def accepts_none(response_type: Any) -> bool:
    """Whether ``response_type`` admits ``None`` (``Any``, ``Optional[...]``)."""
    if response_type is Any or response_type is None:
        return True
    try:
        _adapter_for(response_type).validate_python(None)
    except (ValidationError, PydanticSchemaGenerationError):
        return False
    return True
