"""Top-level package for pastebin-agent.

This package provides a rate-limited client for the Pastebin API. The main
entry point is `PastebinAgent`.
"""

from .agent import PastebinAgent, RateLimitMode

__all__ = ["PastebinAgent", "RateLimitMode", "__version__"]

__version__ = "0.1.0"
