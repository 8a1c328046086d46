"""Client-side enforcement of the Pastebin request-rate policy.

Responsibilities:
- Track the current burst window and the last dispatch mark for one agent.
- Decide per call whether to proceed, wait for a computed delay, or reject.
- Serialize check-and-update so threads sharing an agent cannot both pass
  the same check.

Key types:
- `RateLimitMode`: `none` counts and rejects, `burst` counts and waits,
  `pace` enforces a minimum interval between dispatches.
- `RateLimitDecision`: outcome of one `RateLimiter.check` call.
- `RateLimiter`: the state machine itself, with injectable clock and sleeper.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import threading
from time import monotonic, sleep
from typing import Callable

from ..errors import PastebinRateLimitError, UnsupportedRateLimitModeError


BURST_WINDOW_SECONDS = 60.0
MAX_REQUESTS_PER_WINDOW = 30
PACE_INTERVAL_SECONDS = 2.0


class RateLimitMode(str, Enum):
    """Supported rate-limit disciplines."""

    NONE = "none"
    BURST = "burst"
    PACE = "pace"

    @classmethod
    def parse(cls, value: object) -> RateLimitMode:
        """Return the mode for an enum member or a case-insensitive name."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedRateLimitModeError(value)


class DecisionKind(str, Enum):
    """What the caller must do before dispatching."""

    PROCEED = "proceed"
    DELAY = "delay"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Result of a rate-limit check.

    Attributes:
        kind: Required action before dispatch.
        seconds: Delay to wait (`DELAY`) or time left in the window (`REJECT`).
    """

    kind: DecisionKind
    seconds: float = 0.0

    @classmethod
    def proceed(cls) -> RateLimitDecision:
        return cls(DecisionKind.PROCEED)

    @classmethod
    def delay(cls, seconds: float) -> RateLimitDecision:
        return cls(DecisionKind.DELAY, seconds)

    @classmethod
    def reject(cls, seconds: float) -> RateLimitDecision:
        return cls(DecisionKind.REJECT, seconds)


@dataclass(slots=True)
class BurstWindow:
    """Accounting for the current fixed-length request window."""

    window_start: float | None = None
    requests_in_window: int = 0


@dataclass(slots=True)
class PaceMark:
    """Time of the most recent dispatch."""

    last_request_at: float | None = None


@dataclass(slots=True)
class RateLimiter:
    """Rate-limit state machine owned by exactly one agent.

    Both tracking states start absent and are initialised by the first call,
    which always proceeds. Only the state selected by `mode` is consulted;
    the pace mark is still stamped on every dispatch.
    """

    mode: RateLimitMode = RateLimitMode.BURST
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    window_seconds: float = BURST_WINDOW_SECONDS
    max_requests_per_window: int = MAX_REQUESTS_PER_WINDOW
    pace_interval_seconds: float = PACE_INTERVAL_SECONDS
    burst: BurstWindow = field(default_factory=BurstWindow)
    pace: PaceMark = field(default_factory=PaceMark)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        """Fail fast on unsupported modes and non-positive limits."""

        self.mode = RateLimitMode.parse(self.mode)
        if self.window_seconds <= 0.0:
            raise ValueError("`window_seconds` must be positive.")
        if self.max_requests_per_window <= 0:
            raise ValueError("`max_requests_per_window` must be a positive integer.")
        if self.pace_interval_seconds <= 0.0:
            raise ValueError("`pace_interval_seconds` must be positive.")

    def check(self, now: float) -> RateLimitDecision:
        """Evaluate the policy at `now` and update tracking state.

        Callers must hold off dispatch for `DELAY` decisions and must not
        dispatch at all for `REJECT` decisions. Use `acquire` for the locked
        check-wait-mark sequence.
        """

        if self.burst.window_start is None and self.pace.last_request_at is None:
            self.burst.window_start = now
            self.burst.requests_in_window = 1
            self.pace.last_request_at = now
            return RateLimitDecision.proceed()

        if self.mode in (RateLimitMode.NONE, RateLimitMode.BURST):
            return self._check_window(now)
        if self.mode is RateLimitMode.PACE:
            return self._check_pace(now)
        raise UnsupportedRateLimitModeError(self.mode)

    def acquire(self) -> RateLimitDecision:
        """Block the calling thread until dispatch is allowed.

        The limiter is not re-checked after a delay; one computed wait is
        trusted to be sufficient.

        Raises:
            PastebinRateLimitError: In `none` mode when the window is full.
        """

        with self._lock:
            decision = self.check(self.clock())
            if decision.kind is DecisionKind.REJECT:
                raise PastebinRateLimitError(decision.seconds)
            if decision.kind is DecisionKind.DELAY:
                self.sleeper(decision.seconds)
                self._mark_delayed_dispatch(self.clock())
            self.pace.last_request_at = self.clock()
            return decision

    def _mark_delayed_dispatch(self, now: float) -> None:
        """Account a call released after a wait in the window it lands in."""

        if self.mode is RateLimitMode.BURST:
            self.burst.window_start = now
            self.burst.requests_in_window = 1

    def _check_window(self, now: float) -> RateLimitDecision:
        """Apply fixed-window accounting shared by `none` and `burst` modes."""

        window = self.burst
        if window.window_start is None:
            window.window_start = now
            window.requests_in_window = 1
            return RateLimitDecision.proceed()

        elapsed = now - window.window_start
        if elapsed >= self.window_seconds:
            # The resetting call is the first request of the new window.
            window.window_start = now
            window.requests_in_window = 1
            return RateLimitDecision.proceed()

        if window.requests_in_window >= self.max_requests_per_window:
            time_left = self.window_seconds - elapsed
            if self.mode is RateLimitMode.BURST:
                return RateLimitDecision.delay(time_left)
            return RateLimitDecision.reject(time_left)

        window.requests_in_window += 1
        return RateLimitDecision.proceed()

    def _check_pace(self, now: float) -> RateLimitDecision:
        """Apply minimum-interval pacing between dispatches."""

        last = self.pace.last_request_at
        if last is None:
            self.pace.last_request_at = now
            return RateLimitDecision.proceed()

        elapsed = now - last
        if elapsed < self.pace_interval_seconds:
            # Mark is stamped at dispatch time, after the wait.
            return RateLimitDecision.delay(self.pace_interval_seconds - elapsed)

        self.pace.last_request_at = now
        return RateLimitDecision.proceed()
