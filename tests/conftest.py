"""Pytest fixtures and configuration for resilient_http tests"""

import os

import pytest

from resilient_http import HttpClientConfig, ResilientHttpClient
from resilient_http.testing import ScriptedTransport

# Keep the developer's environment from leaking into Settings-based tests
for _name in list(os.environ):
    if _name.startswith("RESILIENT_HTTP_"):
        del os.environ[_name]


class FakeClock:
    """Monotonic clock advanced only by ``sleep`` calls."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fast_config():
    """Client config without waits and with a generous rate limit"""
    return HttpClientConfig(
        base_url="https://api.example.com",
        retry_wait=0.0,
        permits_per_period=100,
        rate_limit_period=1.0,
        acquire_timeout=0.0,
    )


@pytest.fixture
def make_client(fast_config):
    """Factory building a client around a ScriptedTransport"""
    clients = []

    def _make(script, config=None, repeat_last=False):
        transport = ScriptedTransport(script, repeat_last=repeat_last)
        client = ResilientHttpClient(config or fast_config, transport=transport)
        clients.append(client)
        return client, transport

    yield _make

    for client in clients:
        client.close()
