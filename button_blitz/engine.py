"""Single-writer driver for a Button Blitz session.

``BlitzEngine`` owns the one live ``Session`` and is the only thing that calls
``session.apply``. The UI loop calls ``update()`` every frame and forwards
player intents (start, answer, pause, restart); the engine turns real elapsed
time from the injected ``Clock`` into ``Tick`` events, raises
``QuestionTimeout`` when a Classic deadline passes, and hands the finished
session's result to the score service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .blitz_core import (
    DEFAULT_DURATION_MS,
    ClassicRound,
    GridRound,
    Mode,
    Screen,
    SeededRng,
)
from .classic import per_question_time_ms
from .clock import Clock, DeltaTimer
from .identity import IdentityProvider, NullIdentity
from .results import HighScoreEntry, SessionResult
from .score_service import ScoreService
from .session import (
    Answer,
    Configure,
    Event,
    QuestionTimeout,
    Restart,
    Session,
    Start,
    Tick,
    TogglePause,
    apply,
    new_session,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BlitzSnapshot:
    """View model for the UI (pure data)."""

    screen: Screen
    mode: Mode
    paused: bool
    level: int
    correct: int
    missed: int
    streak: int
    accuracy: int
    total_ms: int
    remaining_ms: int
    classic_round: ClassicRound | None
    grid_round: GridRound | None
    question_time_left_ms: int | None
    question_time_total_ms: int | None
    user_name: str | None
    accounts_enabled: bool
    top_scores: tuple[HighScoreEntry, ...] = ()


class BlitzEngine:
    def __init__(
        self,
        *,
        clock: Clock,
        seed: int | None = None,
        identity: IdentityProvider | None = None,
        scores: ScoreService | None = None,
        duration_ms: int = DEFAULT_DURATION_MS,
    ) -> None:
        self._rng = SeededRng(seed)
        self._seed = seed
        self._timer = DeltaTimer(clock)
        self._identity: IdentityProvider = identity if identity is not None else NullIdentity()
        self._scores = scores
        self._session = new_session(duration_ms=duration_ms)
        self._results: list[SessionResult] = []

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def session(self) -> Session:
        return self._session

    @property
    def screen(self) -> Screen:
        return self._session.screen

    @property
    def identity(self) -> IdentityProvider:
        return self._identity

    @property
    def last_result(self) -> SessionResult | None:
        return self._results[-1] if self._results else None

    def results(self) -> list[SessionResult]:
        return list(self._results)

    def can_exit(self) -> bool:
        return self._session.screen is not Screen.PLAYING

    # -- intents --------------------------------------------------------------
    def set_duration_s(self, seconds: float) -> None:
        self._dispatch(Configure(duration_ms=int(round(float(seconds) * 1000.0))))

    def start(self, mode: Mode) -> None:
        self._dispatch(Start(mode=mode))

    def play_again(self) -> None:
        self._dispatch(Start(mode=self._session.mode))

    def restart(self) -> None:
        self._dispatch(Restart())
        self.refresh_top_scores(self._session.mode)

    def toggle_pause(self) -> None:
        if self._session.screen is not Screen.PLAYING:
            return
        # Credit the time played up to the key press before freezing.
        self._advance()
        if self._session.screen is not Screen.PLAYING:
            return
        self._dispatch(TogglePause())
        if not self._session.paused:
            self._timer.reset()

    def answer(self, value: int) -> None:
        if not self._session.is_active:
            return
        self._advance()
        self._dispatch(Answer(value=int(value)))

    def answer_option(self, index: int) -> None:
        """Answer with the Classic option at ``index`` (0-3) in display order."""

        current = self._session.classic_round
        if current is None or not 0 <= index < len(current.options):
            return
        self.answer(current.options[index])

    def update(self) -> None:
        if not self._session.is_active:
            return
        self._advance()
        s = self._session
        if s.is_active and s.mode is Mode.CLASSIC and s.question_expired():
            self._dispatch(QuestionTimeout(round_seq=s.round_seq))

    def refresh_top_scores(self, mode: Mode) -> None:
        if self._scores is not None:
            self._scores.request_top_scores(self._identity.current_user(), mode)

    def top_scores(self, mode: Mode) -> tuple[HighScoreEntry, ...]:
        if self._scores is None:
            return ()
        return self._scores.top_scores(self._identity.current_user(), mode)

    def snapshot(self) -> BlitzSnapshot:
        s = self._session
        user = self._identity.current_user()
        q_total = None
        if s.screen is Screen.PLAYING and s.classic_round is not None:
            q_total = per_question_time_ms(s.level)
        return BlitzSnapshot(
            screen=s.screen,
            mode=s.mode,
            paused=s.paused,
            level=s.level,
            correct=s.correct_count,
            missed=s.missed_count,
            streak=s.streak,
            accuracy=s.accuracy,
            total_ms=s.total_duration_ms,
            remaining_ms=s.remaining_ms,
            classic_round=s.classic_round,
            grid_round=s.grid_round,
            question_time_left_ms=s.question_time_left_ms(),
            question_time_total_ms=q_total,
            user_name=None if user is None else user.display_name,
            accounts_enabled=self._identity.enabled,
            top_scores=self.top_scores(s.mode),
        )

    # -- internals ------------------------------------------------------------
    def _advance(self) -> None:
        dt = self._timer.elapsed_ms()
        if dt > 0:
            self._dispatch(Tick(elapsed_ms=dt))

    def _dispatch(self, event: Event) -> None:
        before = self._session
        after = apply(before, event, rng=self._rng)
        self._session = after

        if before.screen is not Screen.PLAYING and after.screen is Screen.PLAYING:
            self._timer.reset()
            logger.info("Started %s session (%d s)", after.mode.value, after.total_duration_ms // 1000)
        elif before.screen is Screen.PLAYING and after.screen is Screen.RESULTS:
            assert after.result is not None
            self._on_finished(after.result)

    def _on_finished(self, result: SessionResult) -> None:
        self._results.append(result)
        logger.info(
            "Finished %s session: score=%d accuracy=%d%% level=%d",
            result.mode.value,
            result.score,
            result.accuracy,
            result.level,
        )
        user = self._identity.current_user()
        if self._scores is not None and user is not None:
            self._scores.submit_result(user, result)
