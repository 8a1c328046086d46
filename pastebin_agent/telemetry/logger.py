"""Structured request logging utilities.

Responsibilities:
- Emit concise, deterministic event lines for agent activity via `loguru`.
- Never include credential values or response bodies in log output.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


_CHANNEL = "pastebin_agent"


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RequestLogger:
    """Emit deterministic event logs for agent requests and rate limiting."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Replace `loguru` handlers with one that only receives agent events."""

        self._sink = sink or sys.stderr
        _loguru_logger.remove()
        self._logger = _loguru_logger.bind(channel=_CHANNEL)
        self._handler_id = _loguru_logger.add(
            self._sink,
            format="{message}",
            level=level,
            colorize=False,
            filter=lambda record: record["extra"].get("channel") == _CHANNEL,
        )

    def close(self) -> None:
        """Detach this logger's handler."""

        _loguru_logger.remove(self._handler_id)

    def _emit(self, level: str, event: str, **context: object) -> None:
        """Emit one structured agent log line."""

        line = f"[agent] level={level} event={event}{_format_context(context)}"
        self._logger.log(level, line)

    def log_dispatch(self, method: str, endpoint: str) -> None:
        """Emit a request-dispatch event."""

        self._emit("INFO", "dispatch", method=method, endpoint=endpoint)

    def log_complete(self, method: str, endpoint: str, response_chars: int) -> None:
        """Emit a request-complete event with the body size only."""

        self._emit(
            "INFO",
            "complete",
            method=method,
            endpoint=endpoint,
            response_chars=response_chars,
        )

    def log_failure(self, method: str, endpoint: str, error_type: str) -> None:
        """Emit a request-failure event without sensitive payload details."""

        self._emit("ERROR", "failure", method=method, endpoint=endpoint, error_type=error_type)

    def log_rate_limit_delay(self, mode: str, seconds: float) -> None:
        """Emit an event for a scheduled rate-limit wait."""

        self._emit("WARNING", "rate_limit_delay", mode=mode, seconds=f"{seconds:.3f}")

    def log_rate_limit_reject(self, mode: str, seconds: float) -> None:
        """Emit an event for a rejected call."""

        self._emit("WARNING", "rate_limit_reject", mode=mode, seconds=f"{seconds:.3f}")

    def log_authenticated(self) -> None:
        self._emit("INFO", "authenticated")
