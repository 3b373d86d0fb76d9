"""Pygame UI shell for Button Blitz.

Screens:
- Menu: session length, mode pick, your top scores
- Play: Classic (4 options, keys 1-4) or Grid Hunt (12-cell grid, mouse)
- Results: final stats, play again / back to menu
- Account: register, sign in, sign out

All timing, scoring, RNG and state lives in ``engine``/``session``; this module
only renders snapshots and forwards intents.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .blitz_core import MAX_DURATION_MS, MIN_DURATION_MS, DURATION_STEP_MS, Mode, Screen
from .clock import RealClock
from .config import BlitzConfig, build_adapters, load_config
from .engine import BlitzEngine, BlitzSnapshot
from .identity import IdentityError
from .results import HighScoreEntry, format_time_left, seconds_left
from .score_service import ScoreService

logger = logging.getLogger(__name__)

TARGET_FPS = 60

BG = (9, 13, 27)
PANEL = (24, 32, 52)
PANEL_EDGE = (58, 70, 98)
TEXT = (235, 240, 250)
MUTED = (150, 162, 186)
INDIGO = (99, 102, 241)
EMERALD = (16, 185, 129)
AMBER = (217, 119, 6)
BAR_BG = (51, 65, 85)

OPTION_KEYS = {
    pygame.K_1: 0,
    pygame.K_2: 1,
    pygame.K_3: 2,
    pygame.K_4: 3,
    pygame.K_KP1: 0,
    pygame.K_KP2: 1,
    pygame.K_KP3: 2,
    pygame.K_KP4: 3,
}


class UiScreen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class Button:
    rect: pygame.Rect
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[UiScreen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: UiScreen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the root screen; it handles its own quit.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def _blit(surface: pygame.Surface, font: pygame.font.Font, text: str, pos: tuple[int, int], color=TEXT, *, center: bool = False) -> pygame.Rect:
    img = font.render(text, True, color)
    rect = img.get_rect(center=pos) if center else img.get_rect(topleft=pos)
    surface.blit(img, rect)
    return rect


def _bar(surface: pygame.Surface, rect: pygame.Rect, fraction: float, color: tuple[int, int, int]) -> None:
    pygame.draw.rect(surface, BAR_BG, rect, border_radius=rect.h // 2)
    frac = 0.0 if fraction <= 0.0 else 1.0 if fraction >= 1.0 else fraction
    if frac > 0.0:
        fill = pygame.Rect(rect.x, rect.y, max(1, int(rect.w * frac)), rect.h)
        pygame.draw.rect(surface, color, fill, border_radius=rect.h // 2)


class BlitzScreen:
    """Root screen: draws whichever of menu / play / results the engine is on."""

    def __init__(self, app: App, engine: BlitzEngine) -> None:
        self._app = app
        self._engine = engine
        self._pending_s = engine.session.total_duration_ms // 1000
        self._selected = Mode.CLASSIC
        self._buttons: list[Button] = []
        self._title_font = pygame.font.Font(None, 44)
        self._big_font = pygame.font.Font(None, 96)
        self._mid_font = pygame.font.Font(None, 40)
        self._small_font = pygame.font.Font(None, 24)
        self._engine.refresh_top_scores(self._selected)

    # -- input ----------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for button in self._buttons:
                if button.rect.collidepoint(event.pos):
                    button.action()
                    return
            return
        if event.type != pygame.KEYDOWN:
            return

        screen = self._engine.screen
        if screen is Screen.MENU:
            self._menu_key(event.key)
        elif screen is Screen.PLAYING:
            self._play_key(event.key)
        else:
            self._results_key(event.key)

    def _menu_key(self, key: int) -> None:
        if key == pygame.K_LEFT:
            self._nudge_seconds(-1)
        elif key == pygame.K_RIGHT:
            self._nudge_seconds(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._engine.set_duration_s(self._pending_s)
        elif key in (pygame.K_UP, pygame.K_DOWN):
            self._select(Mode.GRID_HUNT if self._selected is Mode.CLASSIC else Mode.CLASSIC)
        elif key in (pygame.K_c, pygame.K_1):
            self._engine.start(Mode.CLASSIC)
        elif key in (pygame.K_g, pygame.K_2):
            self._engine.start(Mode.GRID_HUNT)
        elif key == pygame.K_SPACE:
            self._engine.start(self._selected)
        elif key == pygame.K_a:
            self._open_account()
        elif key == pygame.K_ESCAPE:
            self._app.quit()

    def _play_key(self, key: int) -> None:
        if key == pygame.K_SPACE:
            self._engine.toggle_pause()
            return
        if self._engine.session.mode is Mode.CLASSIC and key in OPTION_KEYS:
            self._engine.answer_option(OPTION_KEYS[key])

    def _results_key(self, key: int) -> None:
        if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._engine.play_again()
        elif key in (pygame.K_SPACE, pygame.K_ESCAPE, pygame.K_m):
            self._engine.restart()

    def _nudge_seconds(self, steps: int) -> None:
        lo = MIN_DURATION_MS // 1000
        hi = MAX_DURATION_MS // 1000
        step = DURATION_STEP_MS // 1000
        self._pending_s = max(lo, min(hi, self._pending_s + steps * step))

    def _select(self, mode: Mode) -> None:
        self._selected = mode
        self._engine.refresh_top_scores(mode)

    def _open_account(self) -> None:
        if self._engine.identity.enabled:
            self._app.push(AccountScreen(self._app, self._engine, on_change=lambda: self._select(self._selected)))

    # -- render ---------------------------------------------------------------
    def render(self, surface: pygame.Surface) -> None:
        self._engine.update()
        snap = self._engine.snapshot()
        self._buttons = []
        surface.fill(BG)

        w, _ = surface.get_size()
        _blit(surface, self._title_font, "Button Blitz", (32, 24))
        who = snap.user_name if snap.user_name else ("Signed out" if snap.accounts_enabled else "Accounts disabled")
        _blit(surface, self._small_font, who, (w - 32 - self._small_font.size(who)[0], 34), MUTED)

        if snap.screen is Screen.MENU:
            self._render_menu(surface, snap)
        elif snap.screen is Screen.PLAYING:
            self._render_play(surface, snap)
        else:
            self._render_results(surface, snap)

    def _button(self, surface: pygame.Surface, rect: pygame.Rect, label: str, color, action: Callable[[], None], font=None) -> None:
        pygame.draw.rect(surface, color, rect, border_radius=10)
        pygame.draw.rect(surface, PANEL_EDGE, rect, 1, border_radius=10)
        _blit(surface, font or self._mid_font, label, rect.center, center=True)
        self._buttons.append(Button(rect=rect, action=action))

    def _render_scores(self, surface: pygame.Surface, rect: pygame.Rect, rows: tuple[HighScoreEntry, ...], accounts: bool) -> None:
        pygame.draw.rect(surface, PANEL, rect, border_radius=12)
        _blit(surface, self._small_font, "YOUR TOP SCORES", (rect.x + 14, rect.y + 12), MUTED)
        if not rows:
            hint = "Sign in and play to record scores." if accounts else "Score saving needs accounts."
            _blit(surface, self._small_font, hint, (rect.x + 14, rect.y + 44), MUTED)
            return
        y = rect.y + 40
        for i, row in enumerate(rows):
            _blit(surface, self._small_font, f"#{i + 1}", (rect.x + 14, y), MUTED)
            _blit(surface, self._small_font, f"{row.score} correct", (rect.x + 60, y))
            _blit(surface, self._small_font, f"{row.accuracy}% acc", (rect.right - 90, y), MUTED)
            y += 24

    def _render_menu(self, surface: pygame.Surface, snap: BlitzSnapshot) -> None:
        w, h = surface.get_size()
        settings = pygame.Rect(32, 80, w * 3 // 5 - 48, 130)
        pygame.draw.rect(surface, PANEL, settings, border_radius=12)
        _blit(surface, self._small_font, "SESSION SETTINGS", (settings.x + 14, settings.y + 12), MUTED)
        _blit(surface, self._mid_font, f"Total time: {self._pending_s}s", (settings.x + 14, settings.y + 44))
        applied = snap.total_ms // 1000
        note = "applied" if applied == self._pending_s else f"Enter to apply (now {applied}s)"
        _blit(surface, self._small_font, f"Left/Right to change, {note}", (settings.x + 14, settings.y + 90), MUTED)

        scores = pygame.Rect(settings.right + 16, 80, w - settings.right - 48, h - 200)
        self._render_scores(surface, scores, self._engine.top_scores(self._selected), snap.accounts_enabled)

        y = settings.bottom + 24
        for mode, color, blurb in (
            (Mode.CLASSIC, INDIGO, "4 options, speeds up as you level"),
            (Mode.GRID_HUNT, AMBER, "find the product in a 12-button grid"),
        ):
            card = pygame.Rect(32, y, settings.w, 92)
            edge = TEXT if mode is self._selected else PANEL_EDGE
            pygame.draw.rect(surface, PANEL, card, border_radius=12)
            pygame.draw.rect(surface, edge, card, 2, border_radius=12)
            _blit(surface, self._mid_font, mode.label, (card.x + 14, card.y + 12))
            _blit(surface, self._small_font, blurb, (card.x + 14, card.y + 52), MUTED)
            play = pygame.Rect(card.right - 130, card.y + 24, 112, 44)
            self._button(surface, play, "Play", color, lambda m=mode: self._engine.start(m))
            y = card.bottom + 12

        hint = "Space: play selected  |  C/G: play mode  |  Up/Down: select  |  A: account  |  Esc: quit"
        _blit(surface, self._small_font, hint, (w // 2, h - 24), MUTED, center=True)

    def _render_hud(self, surface: pygame.Surface, snap: BlitzSnapshot) -> None:
        w, _ = surface.get_size()
        stats = [("Mode", snap.mode.label)]
        if snap.mode is Mode.CLASSIC:
            stats.append(("Level", str(snap.level)))
        stats += [("Correct", str(snap.correct)), ("Missed", str(snap.missed)), ("Streak", str(snap.streak))]
        x = 32
        for label, value in stats:
            _blit(surface, self._mid_font, value, (x, 80))
            _blit(surface, self._small_font, label.upper(), (x, 112), MUTED)
            x += max(110, self._mid_font.size(value)[0] + 30)

        secs = f"{seconds_left(snap.remaining_ms)}s"
        _blit(surface, self._mid_font, secs, (w - 32 - self._mid_font.size(secs)[0], 80))
        _blit(surface, self._small_font, "TIME LEFT", (w - 122, 112), MUTED)
        total = max(1, snap.total_ms)
        _bar(surface, pygame.Rect(32, 140, w - 64, 8), snap.remaining_ms / total, INDIGO)

    def _render_play(self, surface: pygame.Surface, snap: BlitzSnapshot) -> None:
        w, h = surface.get_size()
        self._render_hud(surface, snap)

        card = pygame.Rect(32, 164, w - 64, 140)
        pygame.draw.rect(surface, PANEL, card, border_radius=12)

        if snap.classic_round is not None:
            q = snap.classic_round
            _blit(surface, self._small_font, "QUESTION", (card.x + 16, card.y + 12), MUTED)
            _blit(surface, self._big_font, q.prompt, (card.x + 16, card.y + 44))
            left = snap.question_time_left_ms or 0
            total_q = snap.question_time_total_ms or 1
            bar = pygame.Rect(card.right - 200, card.y + 70, 180, 8)
            _bar(surface, bar, left / total_q, EMERALD)
            _blit(surface, self._small_font, f"{format_time_left(left)} left", (bar.x, bar.bottom + 8), MUTED)

            gap = 16
            bw = (w - 64 - gap * 3) // 4
            for i, opt in enumerate(q.options):
                rect = pygame.Rect(32 + i * (bw + gap), card.bottom + 24, bw, 100)
                self._button(surface, rect, str(opt), PANEL, lambda v=opt: self._engine.answer(v))
                _blit(surface, self._small_font, f"[{i + 1}]", (rect.x + 8, rect.y + 6), MUTED)
        elif snap.grid_round is not None:
            g = snap.grid_round
            _blit(surface, self._small_font, "FIND THE PRODUCT", (card.x + 16, card.y + 12), MUTED)
            _blit(surface, self._big_font, g.prompt, card.center, center=True)

            cols = 6
            gap = 12
            bw = (w - 64 - gap * (cols - 1)) // cols
            for i, value in enumerate(g.grid):
                r, c = divmod(i, cols)
                rect = pygame.Rect(32 + c * (bw + gap), card.bottom + 20 + r * 76, bw, 64)
                self._button(surface, rect, str(value), PANEL, lambda v=value: self._engine.answer(v))

        pause = pygame.Rect(32, h - 64, 140, 40)
        self._button(surface, pause, "Resume" if snap.paused else "Pause", BAR_BG, self._engine.toggle_pause, self._small_font)
        if snap.paused:
            overlay = pygame.Rect(w // 2 - 180, h // 2 - 50, 360, 100)
            pygame.draw.rect(surface, PANEL, overlay, border_radius=12)
            pygame.draw.rect(surface, TEXT, overlay, 2, border_radius=12)
            _blit(surface, self._mid_font, "Paused", (overlay.centerx, overlay.y + 32), center=True)
            _blit(surface, self._small_font, "Press Space or click Resume", (overlay.centerx, overlay.y + 70), MUTED, center=True)

    def _render_results(self, surface: pygame.Surface, snap: BlitzSnapshot) -> None:
        w, h = surface.get_size()
        result = self._engine.last_result
        if result is None:
            return
        stats = [
            ("Mode", result.mode.label, ""),
            ("Correct", str(result.correct), ""),
            ("Missed", str(result.missed), ""),
            ("Accuracy", f"{result.accuracy}%", f"{result.correct}/{result.attempts}"),
        ]
        if result.mode is Mode.CLASSIC:
            stats.append(("Level", str(result.level), ""))
        cw = (w - 64 - 12 * (len(stats) - 1)) // len(stats)
        for i, (label, value, sub) in enumerate(stats):
            cell = pygame.Rect(32 + i * (cw + 12), 80, cw, 96)
            pygame.draw.rect(surface, PANEL, cell, border_radius=12)
            _blit(surface, self._mid_font, value, (cell.x + 14, cell.y + 14))
            _blit(surface, self._small_font, label.upper(), (cell.x + 14, cell.y + 50), MUTED)
            if sub:
                _blit(surface, self._small_font, sub, (cell.x + 14, cell.y + 70), MUTED)

        scores = pygame.Rect(32, 192, w - 64, h - 300)
        self._render_scores(surface, scores, snap.top_scores, snap.accounts_enabled)

        self._button(surface, pygame.Rect(32, h - 88, 180, 52), "Play Again", INDIGO, self._engine.play_again)
        self._button(surface, pygame.Rect(228, h - 88, 200, 52), "Back to Menu", BAR_BG, self._engine.restart)
        _blit(surface, self._small_font, "Enter: play again  |  Space / Esc: menu", (444, h - 70), MUTED)


class AccountScreen:
    _fields = ("email", "password", "name")

    def __init__(self, app: App, engine: BlitzEngine, *, on_change: Callable[[], None]) -> None:
        self._app = app
        self._engine = engine
        self._on_change = on_change
        self._register = False
        self._focus = 0
        self._values = {name: "" for name in self._fields}
        self._message = ""
        self._font = pygame.font.Font(None, 32)
        self._small_font = pygame.font.Font(None, 24)

    def _active_fields(self) -> tuple[str, ...]:
        return self._fields if self._register else self._fields[:2]

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        identity = self._engine.identity
        if event.key == pygame.K_ESCAPE:
            self._app.pop()
            return
        if identity.current_user() is not None:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                identity.sign_out()
                self._message = "Signed out."
                self._on_change()
            return

        fields = self._active_fields()
        self._focus = min(self._focus, len(fields) - 1)
        name = fields[self._focus]
        if event.key == pygame.K_TAB:
            self._focus = (self._focus + 1) % len(fields)
        elif event.key == pygame.K_F2:
            self._register = not self._register
            self._message = ""
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._submit()
        elif event.key == pygame.K_BACKSPACE:
            self._values[name] = self._values[name][:-1]
        elif event.unicode and event.unicode.isprintable():
            self._values[name] += event.unicode

    def _submit(self) -> None:
        identity = self._engine.identity
        email = self._values["email"]
        password = self._values["password"]
        try:
            if self._register:
                user = identity.register(email, password, self._values["name"] or None)
                self._message = f"Account created. Signed in as {user.display_name}."
            else:
                user = identity.sign_in(email, password)
                self._message = f"Signed in as {user.display_name}."
        except IdentityError as exc:
            self._message = str(exc)
            return
        self._values["password"] = ""
        self._on_change()

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(BG)
        w, h = surface.get_size()
        user = self._engine.identity.current_user()
        if user is not None:
            _blit(surface, self._font, f"Signed in as {user.display_name}", (40, 60))
            _blit(surface, self._small_font, "Enter: sign out  |  Esc: back", (40, 110), MUTED)
        else:
            title = "Register" if self._register else "Sign in"
            _blit(surface, self._font, title, (40, 40))
            y = 96
            for i, name in enumerate(self._active_fields()):
                value = self._values[name]
                shown = "*" * len(value) if name == "password" else value
                box = pygame.Rect(40, y, min(520, w - 80), 40)
                pygame.draw.rect(surface, PANEL, box, border_radius=8)
                pygame.draw.rect(surface, TEXT if i == self._focus else PANEL_EDGE, box, 2, border_radius=8)
                _blit(surface, self._small_font, name.upper(), (box.x, box.y - 20), MUTED)
                _blit(surface, self._font, shown, (box.x + 10, box.y + 8))
                y += 72
            hint = "Tab: next field  |  Enter: submit  |  F2: sign in / register  |  Esc: back"
            _blit(surface, self._small_font, hint, (40, h - 40), MUTED)
        if self._message:
            _blit(surface, self._small_font, self._message, (40, h - 80), EMERALD)


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: BlitzConfig | None = None,
) -> int:
    cfg = config if config is not None else load_config()
    identity, store = build_adapters(cfg)
    logger.info("Starting Button Blitz (accounts=%s, scores=%s)", cfg.accounts_enabled, cfg.scores_enabled)
    scores = ScoreService(store)
    engine = BlitzEngine(
        clock=RealClock(),
        seed=_new_seed(),
        identity=identity,
        scores=scores,
        duration_ms=cfg.session_ms,
    )

    pygame.init()
    pygame.display.set_caption("Button Blitz")
    surface = pygame.display.set_mode(cfg.window_size, pygame.RESIZABLE)
    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    app.push(BlitzScreen(app, engine))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()
            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()
        scores.close()

    return 0
