"""Build transport-ready requests: header defaults, URL joining, JSON bodies."""

from collections.abc import Mapping
from typing import Any

from resilient_http.codec import encode_json
from resilient_http.exceptions import EncodingError
from resilient_http.types import HttpMethod, RequestDescriptor

JSON_MEDIA_TYPE = "application/json"


def _merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header mappings, later layers winning on case-insensitive keys."""
    merged: dict[str, str] = {}
    keys_by_lower: dict[str, str] = {}

    for layer in layers:
        if not layer:
            continue
        for name, value in layer.items():
            existing = keys_by_lower.get(name.lower())
            if existing is not None:
                del merged[existing]
            merged[name] = value
            keys_by_lower[name.lower()] = name

    return merged


def merge_with_defaults(headers: Mapping[str, str] | None, has_body: bool) -> dict[str, str]:
    """Return ``headers`` layered over the JSON defaults.

    ``Content-Type`` is always set; ``Accept`` only when the request carries
    a body. Caller values override defaults.
    """
    defaults = {"Content-Type": JSON_MEDIA_TYPE}
    if has_body:
        defaults["Accept"] = JSON_MEDIA_TYPE
    return _merge_headers(defaults, headers)


def resolve_url(url: str, base_url: str = "") -> str:
    """Join a relative ``url`` onto ``base_url``; absolute URLs pass through.

    Raises:
        EncodingError: If ``url`` is empty and there is no ``base_url``
    """
    if url.startswith(("http://", "https://")):
        return url
    if not base_url:
        if not url:
            raise EncodingError("url must not be empty when no base_url is configured")
        return url
    if not url:
        return base_url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


def build_request(
    method: HttpMethod | str,
    url: str,
    headers: Mapping[str, str] | None = None,
    body: Any = None,
    *,
    base_url: str = "",
    default_headers: Mapping[str, str] | None = None,
) -> RequestDescriptor:
    """Build an immutable RequestDescriptor.

    Args:
        method: HTTP verb
        url: Absolute URL, or a path relative to ``base_url``
        headers: Per-call headers, highest precedence
        body: Object to serialize as JSON, or None for no body
        base_url: Prefix for relative URLs
        default_headers: Client-wide headers applied between the JSON
            defaults and the per-call headers

    Returns:
        RequestDescriptor ready for a transport

    Raises:
        EncodingError: If ``method`` is not a supported verb, the URL is
            empty with no base URL, or ``body`` cannot be serialized
    """
    try:
        method = HttpMethod(method.upper() if isinstance(method, str) else method)
    except ValueError as e:
        raise EncodingError(f"Unsupported HTTP method: {method!r}") from e
    has_body = body is not None
    payload = encode_json(body) if has_body else None

    merged = merge_with_defaults(_merge_headers(default_headers, headers), has_body)

    return RequestDescriptor(
        method=method,
        url=resolve_url(url, base_url),
        headers=merged,
        body=payload,
    )
