from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Game logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class DeltaTimer:
    """Turns a monotonic clock into whole-millisecond deltas between calls.

    Deltas are measured against a fixed origin and rounded to the nearest
    millisecond, so their running sum never drifts from the clock.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._origin_s: float | None = None
        self._reported_ms = 0

    def reset(self) -> None:
        self._origin_s = self._clock.now()
        self._reported_ms = 0

    def elapsed_ms(self) -> int:
        if self._origin_s is None:
            self.reset()
            return 0
        total_ms = int(round((self._clock.now() - self._origin_s) * 1000.0))
        delta = max(0, total_ms - self._reported_ms)
        self._reported_ms += delta
        return delta
