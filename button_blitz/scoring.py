from __future__ import annotations

from dataclasses import dataclass

from .blitz_core import CORRECTS_PER_LEVEL, round_half_up


@dataclass(frozen=True, slots=True)
class Tally:
    correct: int = 0
    missed: int = 0
    streak: int = 0
    level: int = 1


def accuracy(correct: int, missed: int) -> int:
    """Whole-number percentage of correct attempts (0 when nothing was attempted)."""

    attempts = correct + missed
    if attempts <= 0:
        return 0
    return round_half_up(100.0 * correct / attempts)


def level_for(correct: int) -> int:
    return correct // CORRECTS_PER_LEVEL + 1


def score_correct(tally: Tally, *, leveling: bool = True) -> Tally:
    correct = tally.correct + 1
    # Level comes from the post-increment total and never drops.
    level = max(tally.level, level_for(correct)) if leveling else tally.level
    return Tally(correct=correct, missed=tally.missed, streak=tally.streak + 1, level=level)


def score_miss(tally: Tally) -> Tally:
    return Tally(correct=tally.correct, missed=tally.missed + 1, streak=0, level=tally.level)
