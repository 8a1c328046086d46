"""Detection of provider errors in transport-successful Pastebin responses.

Pastebin reports business failures as a plain-text body starting with
`Bad API request,` followed by a short reason. Known reasons map to dedicated
exception types through a closed table; everything else is a generic
provider error.
"""

from __future__ import annotations

from ..errors import InvalidApiKeyError, InvalidUserKeyError, PastebinApiError


ERROR_SENTINEL = "Bad API request,"

_KNOWN_ERRORS: dict[str, tuple[type[PastebinApiError], str, str | None]] = {
    "invalid api_user_key": (
        InvalidUserKeyError,
        "Invalid user key.",
        "Log in again or refresh your user key.",
    ),
    "invalid api_dev_key": (
        InvalidApiKeyError,
        "Invalid API dev key.",
        "Check the configured Pastebin developer API key.",
    ),
}


def extract_provider_error(text: str) -> str | None:
    """Return the reason following the error sentinel, or `None` for data."""

    if not text.startswith(ERROR_SENTINEL):
        return None
    return text[len(ERROR_SENTINEL):].strip()


def classify_response(text: str) -> str:
    """Return `text` unchanged unless it carries a provider error.

    Raises:
        InvalidUserKeyError: Pastebin rejected the session user key.
        InvalidApiKeyError: Pastebin rejected the developer key.
        PastebinApiError: Any other `Bad API request` reason.
    """

    reason = extract_provider_error(text)
    if reason is None:
        return text

    known = _KNOWN_ERRORS.get(reason)
    if known is None:
        raise PastebinApiError(reason)
    error_type, message, hint = known
    raise error_type(reason, message=message, hint=hint)
