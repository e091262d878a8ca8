"""Test doubles for code built on resilient_http.

Usage:
    from resilient_http.testing import ScriptedTransport, json_response

    transport = ScriptedTransport([TransportError("boom"), json_response({"x": 1})])
    client = ResilientHttpClient(config, transport=transport)
"""

import threading
from collections.abc import Iterable
from typing import Any

from resilient_http.codec import encode_json
from resilient_http.types import RequestDescriptor, ResponseOutcome


def json_response(payload: Any, status_code: int = 200) -> ResponseOutcome:
    """Build a ResponseOutcome carrying ``payload`` as JSON."""
    return ResponseOutcome(
        status_code=status_code,
        body=encode_json(payload),
        headers={"content-type": "application/json"},
    )


class ScriptedTransport:
    """Transport replaying a fixed script of outcomes.

    Each entry is either a ResponseOutcome to return or an exception to
    raise. When ``repeat_last`` is set the final entry is replayed forever,
    which is handy for "always fails" scenarios. Every executed request is
    recorded in ``requests`` (thread-safe).
    """

    def __init__(self, script: Iterable[ResponseOutcome | Exception], repeat_last: bool = False):
        self._script = list(script)
        self._repeat_last = repeat_last
        self._lock = threading.Lock()
        self.requests: list[RequestDescriptor] = []

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.requests)

    def execute(self, request: RequestDescriptor) -> ResponseOutcome:
        with self._lock:
            self.requests.append(request)
            if not self._script:
                raise AssertionError(f"Unexpected request: {request.method.value} {request.url}")
            if self._repeat_last and len(self._script) == 1:
                entry = self._script[0]
            else:
                entry = self._script.pop(0)

        if isinstance(entry, Exception):
            raise entry
        return entry
