"""Telemetry helpers.

This package emits deterministic request and rate-limit events.
"""

from .logger import RequestLogger

__all__ = ["RequestLogger"]
