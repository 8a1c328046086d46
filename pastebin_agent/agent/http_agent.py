"""Rate-limited Pastebin HTTP agent.

Responsibilities:
- Compose rate limiting, request building, execution and response
  classification for every outbound call.
- Hold the developer key and the session user key obtained by `authenticate`.
- Offer thin wrappers for the API and login endpoints.

Key types:
- `PastebinAgent`: per-call orchestration over one `RateLimiter`.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping
from xml.etree import ElementTree

import requests

from ..errors import PastebinApiError, PastebinRateLimitError
from ..telemetry.logger import RequestLogger
from .classifier import classify_response
from .executor import RequestExecutor
from .rate_limiter import DecisionKind, RateLimitMode, RateLimiter
from .request_builder import DEFAULT_USER_AGENT, RequestBuilder


API_URL = "https://pastebin.com/api/api_post.php"
LOGIN_URL = "https://pastebin.com/api/api_login.php"


class PastebinAgent:
    """Send rate-limited requests to the Pastebin API.

    One agent owns its rate-tracking state. Calls from several threads are
    serialized at the rate-limit gate; the network exchange itself runs
    outside that lock.
    """

    def __init__(
        self,
        api_key: str,
        mode: RateLimitMode | str = RateLimitMode.BURST,
        *,
        api_url: str = API_URL,
        login_url: str = LOGIN_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float | None = None,
        user_key: str | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], None] | None = None,
        request_logger: RequestLogger | None = None,
    ) -> None:
        """Initialize agent credentials, endpoints and rate-limit policy.

        Raises:
            UnsupportedRateLimitModeError: When `mode` is not a known mode.
            ValueError: When `api_key` is blank.
        """

        normalized_key = api_key.strip() if isinstance(api_key, str) else ""
        if not normalized_key:
            raise ValueError("Pastebin API key must be a non-empty string.")

        limiter_options: dict[str, Any] = {"mode": RateLimitMode.parse(mode)}
        if clock is not None:
            limiter_options["clock"] = clock
        if sleeper is not None:
            limiter_options["sleeper"] = sleeper

        self.api_key = normalized_key
        self.api_url = api_url
        self.login_url = login_url
        self.user_key = user_key
        self.rate_limiter = RateLimiter(**limiter_options)
        self.request_builder = RequestBuilder(
            api_key=normalized_key,
            user_key_provider=lambda: self.user_key,
            user_agent=user_agent,
        )
        self.executor = RequestExecutor(session=session, timeout_seconds=timeout_seconds)
        self._request_logger = request_logger

    @property
    def mode(self) -> RateLimitMode:
        return self.rate_limiter.mode

    @property
    def authenticated(self) -> bool:
        """Return whether a session user key is held."""

        return self.user_key is not None

    def authenticate(self, username: str, password: str) -> str:
        """Log in and keep the returned user key for subsequent calls."""

        parameters = {"api_user_name": username, "api_user_password": password}
        user_key = self.create_and_execute(self.login_url, "POST", parameters)
        self.user_key = user_key
        if self._request_logger is not None:
            self._request_logger.log_authenticated()
        return user_key

    def get(self, url: str, parameters: Mapping[str, Any] | None = None) -> str:
        return self.create_and_execute(url, "GET", parameters)

    def post(self, parameters: Mapping[str, Any] | None = None) -> str:
        """POST `parameters` to the API endpoint."""

        return self.create_and_execute(self.api_url, "POST", parameters)

    def post_option(self, option: str, parameters: Mapping[str, Any] | None = None) -> str:
        """POST an `api_option` call with extra parameters to the API endpoint."""

        payload = dict(parameters or {})
        payload["api_option"] = option
        return self.post(payload)

    def post_and_return_xml(
        self,
        option: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> ElementTree.Element:
        """Run an `api_option` call and parse the body under a `<result>` root.

        Pastebin returns sibling XML fragments (e.g. several `<paste>` items)
        without a single root element.

        Raises:
            PastebinApiError: When the body is not well-formed XML.
        """

        body = self.post_option(option, parameters)
        try:
            return ElementTree.fromstring(f"<result>{body}</result>")
        except ElementTree.ParseError as exc:
            raise PastebinApiError(
                body.strip(),
                message=f"Pastebin returned malformed XML for `{option}`: {exc}",
            ) from exc

    def create_and_execute(
        self,
        url: str,
        method: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> str:
        """Gate, build, send and classify one request.

        Raises:
            PastebinRateLimitError: In `none` mode when the window is full;
                nothing is sent.
            PastebinApiError: When the body carries a provider error.
            requests.RequestException: Transport faults, unchanged.
        """

        self._enforce_rate_limit()
        request = self.request_builder.build(url, method, parameters)
        normalized_method = request.method or method
        if self._request_logger is not None:
            self._request_logger.log_dispatch(normalized_method, url)
        try:
            text = self.executor.execute(request)
            result = classify_response(text)
        except Exception as exc:
            if self._request_logger is not None:
                self._request_logger.log_failure(normalized_method, url, type(exc).__name__)
            raise
        if self._request_logger is not None:
            self._request_logger.log_complete(normalized_method, url, len(result))
        return result

    def close(self) -> None:
        self.executor.close()

    def _enforce_rate_limit(self) -> None:
        """Wait or fail according to the configured rate-limit mode."""

        try:
            decision = self.rate_limiter.acquire()
        except PastebinRateLimitError as exc:
            if self._request_logger is not None:
                self._request_logger.log_rate_limit_reject(
                    self.mode.value, exc.time_left_seconds
                )
            raise
        if decision.kind is DecisionKind.DELAY and self._request_logger is not None:
            self._request_logger.log_rate_limit_delay(self.mode.value, decision.seconds)
