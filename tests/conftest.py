"""
tests/conftest.py: Shared fixtures and fake HTTP endpoints for the test suite.
"""

from collections import Counter

import httpx
import pytest

from url_status.config import Config


OK_URL = "https://ok.example/"
FLAKY_URL = "https://flaky.example/"
DEAD_URL = "https://dead.example/"
MISSING_URL = "https://missing.example/"


class FakeWeb:
    """Host-keyed behaviour table behind an ``httpx.MockTransport``.

    ``always``   host -> status code returned on every call
    ``flaky``    host -> (failures before success, final status code)
    anything else raises ``httpx.ConnectError``.
    """

    def __init__(self, always=None, flaky=None):
        self.always = dict(always or {})
        self.flaky = dict(flaky or {})
        self.calls = Counter()
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.calls[host] += 1
        self.requests.append(request)
        if host in self.always:
            return httpx.Response(self.always[host], request=request)
        if host in self.flaky:
            failures, status = self.flaky[host]
            if self.calls[host] <= failures:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(status, request=request)
        raise httpx.ConnectError(f"cannot resolve {host}", request=request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def scenario_web() -> FakeWeb:
    """ok always answers 200, flaky fails twice then answers 200, dead never answers."""
    return FakeWeb(
        always={"ok.example": 200, "missing.example": 404},
        flaky={"flaky.example": (2, 200)},
    )


@pytest.fixture
def fake_web():
    return scenario_web()


@pytest.fixture
def fast_config():
    """Two workers, two retries, no retry delay."""
    return Config(concurrency=2, timeout=1.0, retries=2, retry_sleep=0.0)
