"""Classic mode: four-option arithmetic questions and per-question pacing.

Everything here is a pure function of the level and an injected ``SeededRng``.
The operand range widens with the level, subtraction and then multiplication
unlock at levels 3 and 6, and the time allowed per question shrinks by 200 ms
per level down to a 1.2 s floor.
"""

from __future__ import annotations

from .blitz_core import ClassicRound, SeededRng, clamp

STARTING_Q_TIME_MS = 3500
MIN_Q_TIME_MS = 1200
Q_TIME_STEP_MS = 200

OPTION_COUNT = 4
VALUE_MIN = -999
VALUE_MAX = 999
RANDOM_CANDIDATES = 6
MAX_PICK_ATTEMPTS = 500


def operand_range(level: int) -> int:
    return 10 + level * 6


def distractor_spread(level: int) -> int:
    return max(3, (level * 3) // 2)


def per_question_time_ms(level: int) -> int:
    ms = STARTING_Q_TIME_MS - (level - 1) * Q_TIME_STEP_MS
    return clamp(ms, MIN_Q_TIME_MS, STARTING_Q_TIME_MS)


def generate_question(level: int, *, rng: SeededRng) -> ClassicRound:
    """Deal one Classic question at ``level`` (deadline left at 0 for the caller)."""

    if level < 1:
        raise ValueError("level must be >= 1")

    rng_range = operand_range(level)
    a = rng.randint(0, rng_range)
    b = rng.randint(0, rng_range)

    if level < 3:
        op_roll = 0
    elif level < 6:
        op_roll = rng.randint(0, 1)
    else:
        op_roll = rng.randint(0, 2)

    if op_roll == 0:
        op = "+"
        answer = a + b
    elif op_roll == 1:
        op = "-"
        a, b = max(a, b), min(a, b)
        answer = a - b
    else:
        op = "×"
        mul_max = min(12, rng_range // 2)
        a = rng.randint(0, mul_max)
        b = rng.randint(0, mul_max)
        answer = a * b

    distractors = pick_distractors(answer, level=level, rng=rng)
    options = [answer, *distractors]
    rng.shuffle(options)

    return ClassicRound(
        prompt=f"{a} {op} {b}",
        answer=answer,
        options=tuple(options),
        a=a,
        b=b,
        op=op,
    )


def pick_distractors(answer: int, *, level: int, rng: SeededRng) -> list[int]:
    """Return ``OPTION_COUNT - 1`` distinct wrong values near ``answer``."""

    rng_range = operand_range(level)
    spread = distractor_spread(level)

    pool = [answer + d for d in range(-spread, spread + 1)]
    for _ in range(RANDOM_CANDIDATES):
        pool.append(answer + rng.randint(-rng_range * 2, rng_range * 2))
    pool = [clamp(v, VALUE_MIN, VALUE_MAX) for v in pool]

    need = OPTION_COUNT - 1
    taken = {answer}
    out: list[int] = []
    for _ in range(MAX_PICK_ATTEMPTS):
        if len(out) >= need:
            break
        v = pool[rng.randint(0, len(pool) - 1)]
        if v not in taken:
            taken.add(v)
            out.append(v)

    # Clamping can collapse the pool; walk outward from the answer instead.
    offset = 1
    while len(out) < need:
        for v in (answer + offset, answer - offset):
            v = clamp(v, VALUE_MIN, VALUE_MAX)
            if v not in taken and len(out) < need:
                taken.add(v)
                out.append(v)
        offset += 1

    return out
