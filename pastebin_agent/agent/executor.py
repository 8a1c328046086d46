"""Network exchange for prepared Pastebin requests.

Transport faults (`requests.ConnectionError`, `requests.Timeout`,
`requests.HTTPError`, ...) propagate unchanged. Provider errors embedded in a
successful body are the classifier's concern, not this module's.
"""

from __future__ import annotations

import requests


class RequestExecutor:
    """Send prepared requests through one `requests.Session`."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the executor with an optional shared session and timeout."""

        self.session = session if session is not None else requests.Session()
        self.timeout_seconds = timeout_seconds

    def execute(self, request: requests.PreparedRequest) -> str:
        """Send `request` and return the full response body decoded as UTF-8."""

        response = self.session.send(request, timeout=self.timeout_seconds)
        response.raise_for_status()
        return bytes(response.content).decode("utf-8")

    def close(self) -> None:
        """Release pooled connections held by the session."""

        self.session.close()
