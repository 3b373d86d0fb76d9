from __future__ import annotations

from .blitz_core import GridRound, SeededRng

GRID_BASE_MIN = 2
GRID_BASE_MAX = 12
GRID_SIZE = 12


def generate_grid_round(*, rng: SeededRng) -> GridRound:
    """One times-table challenge: ``base × factor`` hidden among the base's 12 multiples."""

    base = rng.randint(GRID_BASE_MIN, GRID_BASE_MAX)
    factor = rng.randint(1, GRID_SIZE)
    grid = [base * (i + 1) for i in range(GRID_SIZE)]
    rng.shuffle(grid)
    return GridRound(base=base, factor=factor, product=base * factor, grid=tuple(grid))
