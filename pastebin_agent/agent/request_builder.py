"""Request assembly for Pastebin API calls.

Responsibilities:
- Inject the developer key and, when authenticated, the session user key.
- Encode parameters as a form body for `POST` and a query string otherwise.
- Stamp the fixed client identity header on every request.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

import requests


DEFAULT_USER_AGENT = "pastebin-agent/0.1"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

API_DEV_KEY_PARAM = "api_dev_key"
API_USER_KEY_PARAM = "api_user_key"


class RequestBuilder:
    """Build prepared `requests` objects carrying agent credentials."""

    def __init__(
        self,
        *,
        api_key: str,
        user_key_provider: Callable[[], str | None],
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize builder credentials and client identity.

        Args:
            api_key: Developer key sent as `api_dev_key`.
            user_key_provider: Returns the current session key, or `None`
                when the agent is not authenticated.
            user_agent: Value of the outbound `User-Agent` header.
        """

        self.api_key = api_key
        self.user_agent = user_agent
        self._user_key_provider = user_key_provider

    def credential_parameters(self) -> dict[str, str]:
        """Return credential parameters for the agent's current state."""

        parameters = {API_DEV_KEY_PARAM: self.api_key}
        user_key = self._user_key_provider()
        if user_key is not None:
            parameters[API_USER_KEY_PARAM] = user_key
        return parameters

    def build(
        self,
        endpoint: str,
        method: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> requests.PreparedRequest:
        """Return a prepared request with credentials merged into `parameters`.

        The caller's mapping is never modified. `None` values are omitted.
        """

        normalized_method = method.strip().upper()
        merged = _stringify_parameters(parameters)
        merged.update(self.credential_parameters())

        headers = {"User-Agent": self.user_agent}
        if normalized_method == "POST":
            headers["Content-Type"] = FORM_CONTENT_TYPE
            request = requests.Request(
                method=normalized_method,
                url=endpoint,
                headers=headers,
                data=merged,
            )
        else:
            request = requests.Request(
                method=normalized_method,
                url=endpoint,
                headers=headers,
                params=merged,
            )
        return request.prepare()


def _stringify_parameters(parameters: Mapping[str, Any] | None) -> dict[str, str]:
    """Copy parameters into a string mapping ready for form encoding."""

    if not parameters:
        return {}
    return {
        str(key): str(value)
        for key, value in parameters.items()
        if value is not None
    }
