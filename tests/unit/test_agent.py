"""Unit tests for `PastebinAgent` orchestration over a recording session."""

from __future__ import annotations

import io
import threading
from urllib.parse import parse_qs

import pytest

from pastebin_agent.agent.http_agent import API_URL, LOGIN_URL, PastebinAgent
from pastebin_agent.agent.rate_limiter import RateLimitMode
from pastebin_agent.errors import (
    InvalidUserKeyError,
    PastebinApiError,
    PastebinRateLimitError,
    UnsupportedRateLimitModeError,
)
from pastebin_agent.telemetry.logger import RequestLogger


def _body(request) -> dict[str, list[str]]:  # type: ignore[no-untyped-def]
    """Decode a prepared form body."""

    return parse_qs(str(request.body))


def test_authenticate_stores_user_key_for_later_calls(make_session, mock_response, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """The login body becomes the session key sent on every later call."""

    session = make_session(
        mock_response(text="user-key-123"),
        mock_response(text="https://pastebin.com/abc"),
    )
    agent = PastebinAgent("dev-key", session=session, clock=fake_clock, sleeper=fake_clock.sleep)

    assert agent.authenticated is False
    assert agent.authenticate("alice", "secret") == "user-key-123"
    assert agent.authenticated is True
    agent.post_option("paste", {"api_paste_code": "hello"})

    login_request, paste_request = session.sent
    assert login_request.url == LOGIN_URL
    assert _body(login_request) == {
        "api_user_name": ["alice"],
        "api_user_password": ["secret"],
        "api_dev_key": ["dev-key"],
    }
    assert paste_request.url == API_URL
    assert _body(paste_request)["api_user_key"] == ["user-key-123"]
    assert _body(paste_request)["api_option"] == ["paste"]


def test_unauthenticated_agent_never_sends_user_key(make_session, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Calls before login carry the developer key only."""

    session = make_session()
    agent = PastebinAgent("dev-key", session=session, clock=fake_clock, sleeper=fake_clock.sleep)

    agent.post({"api_option": "trends"})

    body = _body(session.sent[0])
    assert body["api_dev_key"] == ["dev-key"]
    assert "api_user_key" not in body


def test_preconfigured_user_key_is_sent(make_session, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """A stored session key should be usable without logging in again."""

    session = make_session()
    agent = PastebinAgent(
        "dev-key",
        user_key="stored-key",
        session=session,
        clock=fake_clock,
        sleeper=fake_clock.sleep,
    )

    agent.post_option("userdetails")

    assert agent.authenticated is True
    assert _body(session.sent[0])["api_user_key"] == ["stored-key"]


def test_none_mode_rejects_31st_call_without_sending(make_session, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Rejected calls must never reach the network."""

    session = make_session()
    agent = PastebinAgent(
        "dev-key", RateLimitMode.NONE, session=session, clock=fake_clock, sleeper=fake_clock.sleep
    )
    for _ in range(30):
        agent.post_option("trends")

    with pytest.raises(PastebinRateLimitError):
        agent.post_option("trends")

    assert len(session.sent) == 30
    assert fake_clock.waits == []


def test_burst_mode_waits_once_and_sends_every_call(make_session, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Burst mode should transparently delay the 31st call."""

    session = make_session()
    agent = PastebinAgent("dev-key", session=session, clock=fake_clock, sleeper=fake_clock.sleep)
    for _ in range(31):
        agent.post_option("trends")

    assert agent.mode is RateLimitMode.BURST
    assert len(session.sent) == 31
    assert fake_clock.waits == [60.0]


def test_pace_mode_spaces_calls(make_session, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Consecutive paced calls should wait out the interval."""

    session = make_session()
    agent = PastebinAgent(
        "dev-key", "pace", session=session, clock=fake_clock, sleeper=fake_clock.sleep
    )
    agent.post_option("trends")
    agent.post_option("trends")

    assert fake_clock.waits == [2.0]


def test_provider_errors_are_raised_as_typed_exceptions(make_session, mock_response, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Sentinel bodies map to typed errors after the request was sent."""

    session = make_session(mock_response(text="Bad API request, invalid api_user_key"))
    agent = PastebinAgent(
        "dev-key", user_key="stale", session=session, clock=fake_clock, sleeper=fake_clock.sleep
    )

    with pytest.raises(InvalidUserKeyError):
        agent.post_option("list")

    assert len(session.sent) == 1


def test_post_option_does_not_mutate_caller_parameters(make_session, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Adding the option must copy the caller's mapping."""

    session = make_session()
    agent = PastebinAgent("dev-key", session=session, clock=fake_clock, sleeper=fake_clock.sleep)
    parameters = {"api_paste_key": "abc"}

    agent.post_option("delete", parameters)

    assert parameters == {"api_paste_key": "abc"}
    assert _body(session.sent[0])["api_option"] == ["delete"]


def test_get_sends_query_parameters(make_session, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """GET wrappers should target the given URL with a query string."""

    session = make_session()
    agent = PastebinAgent("dev-key", session=session, clock=fake_clock, sleeper=fake_clock.sleep)

    assert agent.get("https://pastebin.example/raw", {"i": "abc"}) == "ok"

    request = session.sent[0]
    assert request.method == "GET"
    assert str(request.url).startswith("https://pastebin.example/raw?")
    assert "i=abc" in str(request.url)


def test_post_and_return_xml_wraps_sibling_fragments(make_session, mock_response, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Multiple top-level items should parse under a synthetic root."""

    payload = (
        "<paste><paste_key>a1</paste_key></paste>\n"
        "<paste><paste_key>b2</paste_key></paste>\n"
    )
    session = make_session(mock_response(text=payload))
    agent = PastebinAgent(
        "dev-key", user_key="u", session=session, clock=fake_clock, sleeper=fake_clock.sleep
    )

    result = agent.post_and_return_xml("list", {"api_results_limit": 10})

    assert result.tag == "result"
    assert [paste.findtext("paste_key") for paste in result.findall("paste")] == ["a1", "b2"]
    assert _body(session.sent[0])["api_results_limit"] == ["10"]


def test_post_and_return_xml_reports_malformed_body(make_session, mock_response, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Unparseable bodies should become provider errors."""

    session = make_session(mock_response(text="<paste><unclosed>"))
    agent = PastebinAgent("dev-key", session=session, clock=fake_clock, sleeper=fake_clock.sleep)

    with pytest.raises(PastebinApiError, match="malformed XML"):
        agent.post_and_return_xml("list")


def test_unsupported_mode_fails_before_any_send(make_session) -> None:  # type: ignore[no-untyped-def]
    """Configuration faults surface at construction."""

    session = make_session()

    with pytest.raises(UnsupportedRateLimitModeError):
        PastebinAgent("dev-key", "turbo", session=session)

    assert session.sent == []


@pytest.mark.parametrize("api_key", ["", "   "])
def test_blank_api_key_is_rejected(api_key: str) -> None:
    """A developer key is required."""

    with pytest.raises(ValueError, match="API key"):
        PastebinAgent(api_key)


def test_request_logging_never_contains_credentials(make_session, mock_response, fake_clock) -> None:  # type: ignore[no-untyped-def]
    """Logged events describe calls without leaking keys or bodies."""

    sink = io.StringIO()
    request_logger = RequestLogger(sink=sink, level="DEBUG")
    session = make_session(
        mock_response(text="user-key-123"),
        mock_response(text="Bad API request, invalid api_dev_key"),
    )
    agent = PastebinAgent(
        "secret-dev-key",
        session=session,
        clock=fake_clock,
        sleeper=fake_clock.sleep,
        request_logger=request_logger,
    )
    try:
        agent.authenticate("alice", "hunter2")
        with pytest.raises(PastebinApiError):
            agent.post_option("paste", {"api_paste_code": "top secret body"})
    finally:
        request_logger.close()

    output = sink.getvalue()
    assert "event=dispatch" in output
    assert "event=authenticated" in output
    assert "event=failure" in output
    assert "error_type=InvalidApiKeyError" in output
    for secret in ("secret-dev-key", "user-key-123", "hunter2", "top secret body"):
        assert secret not in output


def test_close_releases_executor_session(make_session) -> None:  # type: ignore[no-untyped-def]
    """Closing the agent closes its transport."""

    session = make_session()
    agent = PastebinAgent("dev-key", session=session)
    agent.close()

    assert session.closed is True


def test_concurrent_none_mode_callers_share_one_budget(make_session) -> None:  # type: ignore[no-untyped-def]
    """Threads sharing an agent can never overrun the window together."""

    session = make_session()
    agent = PastebinAgent(
        "dev-key", RateLimitMode.NONE, session=session, clock=lambda: 0.0, sleeper=lambda _: None
    )
    successes: list[str] = []
    rejections: list[PastebinRateLimitError] = []
    results_lock = threading.Lock()

    def _call() -> None:
        try:
            result = agent.post_option("trends")
        except PastebinRateLimitError as exc:
            with results_lock:
                rejections.append(exc)
        else:
            with results_lock:
                successes.append(result)

    threads = [threading.Thread(target=_call) for _ in range(40)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(successes) == 30
    assert len(rejections) == 10
    assert len(session.sent) == 30
