from __future__ import annotations

import pytest

from button_blitz.scoring import Tally, accuracy, level_for, score_correct, score_miss


@pytest.mark.parametrize(
    ("correct", "missed", "expected"),
    [
        (0, 0, 0),
        (0, 5, 0),
        (5, 0, 100),
        (1, 2, 33),
        (2, 1, 67),
        (1, 7, 13),  # 12.5 rounds half up
        (7, 1, 88),
    ],
)
def test_accuracy_is_rounded_percentage(correct: int, missed: int, expected: int) -> None:
    assert accuracy(correct, missed) == expected


def test_accuracy_stays_in_range() -> None:
    for correct in range(0, 30):
        for missed in range(0, 30):
            assert 0 <= accuracy(correct, missed) <= 100


def test_level_steps_every_five_correct() -> None:
    assert [level_for(c) for c in (0, 4, 5, 9, 10, 14, 15)] == [1, 1, 2, 2, 3, 3, 4]


def test_fifth_correct_answer_reaches_level_two() -> None:
    t = Tally()
    levels = []
    for _ in range(5):
        t = score_correct(t)
        levels.append(t.level)

    assert levels == [1, 1, 1, 1, 2]
    assert t.streak == 5


def test_miss_resets_streak_but_keeps_level() -> None:
    t = Tally(correct=12, missed=0, streak=4, level=3)
    t = score_miss(t)

    assert t == Tally(correct=12, missed=1, streak=0, level=3)


def test_level_never_drops_below_current() -> None:
    t = score_correct(Tally(correct=0, level=4))
    assert t.level == 4


def test_grid_scoring_does_not_level() -> None:
    t = Tally()
    for _ in range(10):
        t = score_correct(t, leveling=False)
    assert t.level == 1
    assert t.correct == 10
