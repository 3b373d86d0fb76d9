from __future__ import annotations

import math
import random
from collections.abc import MutableSequence
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

T = TypeVar("T")


class Screen(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    RESULTS = "results"


class Mode(str, Enum):
    CLASSIC = "classic"
    GRID_HUNT = "grid"

    @property
    def label(self) -> str:
        return "Classic" if self is Mode.CLASSIC else "Grid Hunt"


MIN_DURATION_MS = 30_000
MAX_DURATION_MS = 180_000
DURATION_STEP_MS = 10_000
DEFAULT_DURATION_MS = 60_000

CORRECTS_PER_LEVEL = 5
TOP_SCORES_LIMIT = 10


@dataclass(frozen=True, slots=True)
class ClassicRound:
    prompt: str
    answer: int
    options: tuple[int, ...]
    a: int
    b: int
    op: str
    deadline_ms: int = 0  # on the session play clock


@dataclass(frozen=True, slots=True)
class GridRound:
    base: int
    factor: int
    product: int
    grid: tuple[int, ...]

    @property
    def prompt(self) -> str:
        return f"{self.base} × {self.factor}"


class SeededRng:
    """Seeded RNG wrapper so every generator stream is reproducible."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def shuffle(self, items: MutableSequence[T]) -> None:
        # random.Random.shuffle is Fisher-Yates.
        self._rng.shuffle(items)


def clamp(value: int, lo: int, hi: int) -> int:
    return lo if value < lo else hi if value > hi else value


def clamp_duration_ms(ms: float) -> int:
    """Clamp to the playable range and snap to the nearest 10 s step."""

    steps = round_half_up((float(ms) - MIN_DURATION_MS) / DURATION_STEP_MS)
    snapped = MIN_DURATION_MS + steps * DURATION_STEP_MS
    return clamp(snapped, MIN_DURATION_MS, MAX_DURATION_MS)


def round_half_up(x: float) -> int:
    # Matches Math.round for display percentages.
    return int(math.floor(x + 0.5))
