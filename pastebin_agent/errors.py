"""Domain exceptions for agent calls and CLI diagnostics.

Transport faults are deliberately absent here: `requests` exceptions raised by
the executor reach callers unchanged.
"""

from __future__ import annotations


class UnsupportedRateLimitModeError(ValueError):
    """Raised when an agent is configured with an unknown rate-limit mode."""

    def __init__(self, mode: object) -> None:
        """Initialize a configuration fault for the rejected mode value."""

        super().__init__(
            f"Unsupported rate-limit mode `{mode}`; supported: burst, none, pace."
        )
        self.mode = mode


class PastebinError(RuntimeError):
    """Base class for failures reported by the agent or the Pastebin API."""

    failure_kind = "unknown"

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        """Initialize a failure with an optional user-actionable hint."""

        super().__init__(message)
        self.message = message
        self.hint = hint


class PastebinRateLimitError(PastebinError):
    """Raised when the request budget of the current window is exhausted.

    Only the `none` rate-limit mode raises this; `burst` waits instead.
    """

    failure_kind = "rate_limited"

    def __init__(self, time_left_seconds: float) -> None:
        """Initialize a rejection carrying the remaining window time."""

        super().__init__(
            f"Rate limit reached; the current window reopens in {time_left_seconds:.1f}s.",
            hint="Retry later or configure the `burst` rate-limit mode to wait automatically.",
        )
        self.time_left_seconds = time_left_seconds


class PastebinApiError(PastebinError):
    """Raised when Pastebin answers with a `Bad API request` message."""

    failure_kind = "provider_error"

    def __init__(
        self,
        provider_message: str,
        *,
        message: str | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize a provider error from the raw provider message."""

        super().__init__(message or provider_message, hint=hint)
        self.provider_message = provider_message


class InvalidUserKeyError(PastebinApiError):
    """Raised when Pastebin rejects the session `api_user_key`."""

    failure_kind = "invalid_user_key"


class InvalidApiKeyError(PastebinApiError):
    """Raised when Pastebin rejects the `api_dev_key`."""

    failure_kind = "invalid_api_key"


class CommandError(RuntimeError):
    """Raised when a specific CLI command stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
