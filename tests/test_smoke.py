"""Smoke tests for the pygame UI.

These tests verify that the main loop can initialise and run a handful of
frames without crashing when the SDL dummy drivers are used. They do not
check rendering correctness.
"""

from __future__ import annotations

import os
from pathlib import Path

# Use the dummy drivers before importing pygame or the application
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


def test_app_runs_headless(tmp_path: Path) -> None:
    """Ensure the application can start and run a few frames headlessly."""
    # Import inside the test so that environment variables take effect
    from button_blitz.app import run
    from button_blitz.config import BlitzConfig

    exit_code = run(max_frames=3, config=BlitzConfig(data_path=tmp_path / "blitz.sqlite3"))
    assert exit_code == 0
