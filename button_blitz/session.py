"""Session state machine.

A ``Session`` is an immutable value and ``apply`` is the only way to move it
forward::

    MENU --Start--> PLAYING --Tick (time out)--> RESULTS --Restart--> MENU
                                                 RESULTS --Start--> PLAYING

Every input the game reacts to (timer ticks, question timeouts, answers, pause
toggles, menu actions) is one of the event dataclasses below, so the whole
lifecycle can be replayed in a test without a clock or a window.

Time is tracked on the session's own play clock (``play_clock_ms``), which only
advances through unpaused ticks. Classic question deadlines live on that clock,
so a paused session freezes both the session countdown and the question
countdown.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .blitz_core import (
    DEFAULT_DURATION_MS,
    ClassicRound,
    GridRound,
    Mode,
    Screen,
    SeededRng,
    clamp_duration_ms,
)
from .classic import generate_question, per_question_time_ms
from .grid_hunt import generate_grid_round
from .results import SessionResult, session_result
from .scoring import Tally, accuracy, score_correct, score_miss


@dataclass(frozen=True, slots=True)
class Session:
    screen: Screen = Screen.MENU
    mode: Mode = Mode.CLASSIC
    total_duration_ms: int = DEFAULT_DURATION_MS
    remaining_ms: int = DEFAULT_DURATION_MS
    paused: bool = False
    level: int = 1
    correct_count: int = 0
    missed_count: int = 0
    streak: int = 0
    play_clock_ms: int = 0
    round_seq: int = 0
    classic_round: ClassicRound | None = None
    grid_round: GridRound | None = None
    result: SessionResult | None = None

    @property
    def accuracy(self) -> int:
        return accuracy(self.correct_count, self.missed_count)

    @property
    def is_active(self) -> bool:
        return self.screen is Screen.PLAYING and not self.paused

    def question_time_left_ms(self) -> int | None:
        if self.screen is not Screen.PLAYING or self.classic_round is None:
            return None
        return max(0, self.classic_round.deadline_ms - self.play_clock_ms)

    def question_expired(self) -> bool:
        left = self.question_time_left_ms()
        return left is not None and left <= 0


def new_session(*, duration_ms: float = DEFAULT_DURATION_MS) -> Session:
    total = clamp_duration_ms(duration_ms)
    return Session(total_duration_ms=total, remaining_ms=total)


@dataclass(frozen=True, slots=True)
class Start:
    mode: Mode


@dataclass(frozen=True, slots=True)
class Tick:
    elapsed_ms: int


@dataclass(frozen=True, slots=True)
class QuestionTimeout:
    round_seq: int


@dataclass(frozen=True, slots=True)
class Answer:
    value: int


@dataclass(frozen=True, slots=True)
class TogglePause:
    pass


@dataclass(frozen=True, slots=True)
class Restart:
    pass


@dataclass(frozen=True, slots=True)
class Configure:
    duration_ms: int


Event = Start | Tick | QuestionTimeout | Answer | TogglePause | Restart | Configure


def apply(session: Session, event: Event, *, rng: SeededRng) -> Session:
    """Return the session that results from ``event``; invalid events are no-ops."""

    if isinstance(event, Configure):
        return _configure(session, event.duration_ms)
    if isinstance(event, Start):
        return _start(session, event.mode, rng)
    if isinstance(event, Restart):
        if session.screen is not Screen.RESULTS:
            return session
        return replace(
            session,
            screen=Screen.MENU,
            remaining_ms=session.total_duration_ms,
            classic_round=None,
            grid_round=None,
            result=None,
        )

    if session.screen is not Screen.PLAYING:
        return session

    if isinstance(event, TogglePause):
        return replace(session, paused=not session.paused)
    if session.paused:
        return session

    if isinstance(event, Tick):
        return _tick(session, event.elapsed_ms)
    if isinstance(event, QuestionTimeout):
        return _question_timeout(session, event.round_seq, rng)
    if isinstance(event, Answer):
        if session.mode is Mode.CLASSIC:
            return _answer_classic(session, event.value, rng)
        return _answer_grid(session, event.value, rng)
    raise TypeError(f"unknown event: {event!r}")


def _configure(session: Session, duration_ms: int) -> Session:
    if session.screen is Screen.PLAYING:
        return session
    total = clamp_duration_ms(duration_ms)
    if session.screen is Screen.MENU:
        return replace(session, total_duration_ms=total, remaining_ms=total)
    return replace(session, total_duration_ms=total)


def _start(session: Session, mode: Mode, rng: SeededRng) -> Session:
    if session.screen is Screen.PLAYING:
        return session
    fresh = Session(
        screen=Screen.PLAYING,
        mode=mode,
        total_duration_ms=session.total_duration_ms,
        remaining_ms=session.total_duration_ms,
        round_seq=session.round_seq,
    )
    return _deal(fresh, rng)


def _tick(session: Session, elapsed_ms: int) -> Session:
    dt = int(elapsed_ms)
    if dt <= 0:
        return session
    remaining = max(0, session.remaining_ms - dt)
    ticked = replace(session, remaining_ms=remaining, play_clock_ms=session.play_clock_ms + dt)
    if remaining == 0:
        return _finish(ticked)
    return ticked


def _finish(session: Session) -> Session:
    return replace(
        session,
        screen=Screen.RESULTS,
        paused=False,
        classic_round=None,
        grid_round=None,
        result=session_result(session),
    )


def _question_timeout(session: Session, round_seq: int, rng: SeededRng) -> Session:
    if session.mode is not Mode.CLASSIC or round_seq != session.round_seq:
        return session
    if not session.question_expired():
        return session
    return _deal(_with_tally(session, score_miss(_tally(session))), rng)


def _answer_classic(session: Session, value: int, rng: SeededRng) -> Session:
    current = session.classic_round
    if current is None:
        return session
    tally = _tally(session)
    if value == current.answer:
        tally = score_correct(tally)
    else:
        tally = score_miss(tally)
    return _deal(_with_tally(session, tally), rng)


def _answer_grid(session: Session, value: int, rng: SeededRng) -> Session:
    current = session.grid_round
    if current is None:
        return session
    tally = _tally(session)
    if value == current.product:
        tally = score_correct(tally, leveling=False)
    else:
        tally = score_miss(tally)
    return _deal(_with_tally(session, tally), rng)


def _deal(session: Session, rng: SeededRng) -> Session:
    seq = session.round_seq + 1
    if session.mode is Mode.CLASSIC:
        q = generate_question(session.level, rng=rng)
        deadline = session.play_clock_ms + per_question_time_ms(session.level)
        return replace(session, round_seq=seq, classic_round=replace(q, deadline_ms=deadline), grid_round=None)
    return replace(session, round_seq=seq, classic_round=None, grid_round=generate_grid_round(rng=rng))


def _tally(session: Session) -> Tally:
    return Tally(
        correct=session.correct_count,
        missed=session.missed_count,
        streak=session.streak,
        level=session.level,
    )


def _with_tally(session: Session, tally: Tally) -> Session:
    return replace(
        session,
        correct_count=tally.correct,
        missed_count=tally.missed,
        streak=tally.streak,
        level=tally.level,
    )
