"""Rate-limited request agent for the Pastebin API.

This package holds the rate limiter, request builder, executor, response
classifier and the `PastebinAgent` that composes them per call.
"""

from .classifier import ERROR_SENTINEL, classify_response
from .executor import RequestExecutor
from .http_agent import API_URL, LOGIN_URL, PastebinAgent
from .rate_limiter import (
    BurstWindow,
    DecisionKind,
    PaceMark,
    RateLimitDecision,
    RateLimitMode,
    RateLimiter,
)
from .request_builder import DEFAULT_USER_AGENT, RequestBuilder

__all__ = [
    "API_URL",
    "LOGIN_URL",
    "DEFAULT_USER_AGENT",
    "ERROR_SENTINEL",
    "BurstWindow",
    "DecisionKind",
    "PaceMark",
    "PastebinAgent",
    "RateLimitDecision",
    "RateLimitMode",
    "RateLimiter",
    "RequestBuilder",
    "RequestExecutor",
    "classify_response",
]
