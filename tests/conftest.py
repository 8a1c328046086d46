"""Shared pytest fixtures for the pastebin-agent test suite."""

from __future__ import annotations

import pytest
import requests


class FakeClock:
    """Controllable monotonic clock whose sleeper advances time instantly."""

    def __init__(self, start: float = 0.0) -> None:
        """Initialize clock time and wait history."""

        self.now = start
        self.waits: list[float] = []

    def __call__(self) -> float:
        """Return current fake time."""

        return self.now

    def advance(self, seconds: float) -> None:
        """Move fake time forward without recording a wait."""

        self.now += seconds

    def sleep(self, seconds: float) -> None:
        """Record requested wait and advance fake time by it."""

        self.waits.append(seconds)
        self.now += seconds


class MockResponse:
    """Minimal requests response mock for session patching."""

    def __init__(self, *, text: str = "", status_code: int = 200) -> None:
        """Initialize response with UTF-8 payload text and HTTP status."""

        self.content = text.encode("utf-8")
        self.status_code = status_code

    def raise_for_status(self) -> None:
        """Raise HTTPError when the status code indicates failure."""

        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class RecordingSession:
    """`requests.Session` stand-in that records prepared requests."""

    def __init__(self, *responses: MockResponse | Exception) -> None:
        """Queue responses; the last one is repeated once the queue drains."""

        self._responses = list(responses) or [MockResponse(text="ok")]
        self.sent: list[requests.PreparedRequest] = []
        self.timeouts: list[float | None] = []
        self.closed = False

    def send(self, request: requests.PreparedRequest, **kwargs: object) -> MockResponse:
        """Record the request and return (or raise) the next queued response."""

        self.sent.append(request)
        self.timeouts.append(kwargs.get("timeout"))  # type: ignore[arg-type]
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        """Mark the session closed."""

        self.closed = True


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a fake clock starting at zero."""

    return FakeClock()


@pytest.fixture
def make_session():
    """Provide a factory for recording sessions with queued responses."""

    def _make(*responses: MockResponse | Exception) -> RecordingSession:
        return RecordingSession(*responses)

    return _make


@pytest.fixture
def mock_response():
    """Provide the mock response type to tests without importing conftest."""

    return MockResponse
