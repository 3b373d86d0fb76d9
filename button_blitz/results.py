from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .blitz_core import Mode
from .scoring import accuracy

if TYPE_CHECKING:
    from .session import Session


@dataclass(frozen=True, slots=True)
class SessionResult:
    """Frozen outcome of one finished session, ready to hand to a score store."""

    mode: Mode
    score: int
    accuracy: int
    level: int
    correct: int
    missed: int
    duration_ms: int

    @property
    def attempts(self) -> int:
        return self.correct + self.missed


@dataclass(frozen=True, slots=True)
class HighScoreEntry:
    mode: Mode
    score: int
    accuracy: int
    level: int
    created_at: str


def session_result(session: Session) -> SessionResult:
    """Build a SessionResult from a session's final counters."""

    return SessionResult(
        mode=session.mode,
        score=int(session.correct_count),
        accuracy=accuracy(session.correct_count, session.missed_count),
        level=int(session.level),
        correct=int(session.correct_count),
        missed=int(session.missed_count),
        duration_ms=int(session.total_duration_ms),
    )


def seconds_left(ms: int) -> int:
    return int(math.ceil(max(0, ms) / 1000.0))


def format_time_left(ms: int) -> str:
    # 0.1 s precision, rounded up so "0.0s" only shows at expiry.
    tenths = int(math.ceil(max(0, ms) / 100.0))
    return f"{tenths / 10.0:.1f}s"
