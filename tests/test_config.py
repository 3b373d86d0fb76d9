from __future__ import annotations

import json
from pathlib import Path

import pytest

from button_blitz.config import BlitzConfig, build_adapters, clamp_session_seconds, load_config
from button_blitz.identity import LocalIdentity, NullIdentity
from button_blitz.persistence import NullScoreStore, SqliteScoreStore

ENV_VARS = (
    "BLITZ_CONFIG_PATH",
    "BLITZ_DATA_PATH",
    "BLITZ_SESSION_SECONDS",
    "BLITZ_DISABLE_ACCOUNTS",
    "BLITZ_DISABLE_SCORES",
    "BLITZ_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_no_file(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "absent.json")
    assert cfg == BlitzConfig()
    assert cfg.session_ms == 60_000


def test_json_file_is_read_and_clamped(tmp_path: Path) -> None:
    path = tmp_path / "blitz.json"
    path.write_text(
        json.dumps(
            {
                "session_seconds": 500,
                "data_path": str(tmp_path / "data.sqlite3"),
                "accounts_enabled": False,
                "log_level": "debug",
                "window_size": [1280, 720],
            }
        ),
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.session_seconds == 180
    assert cfg.data_path == tmp_path / "data.sqlite3"
    assert cfg.accounts_enabled is False
    assert cfg.scores_enabled is True
    assert cfg.log_level == "DEBUG"
    assert cfg.window_size == (1280, 720)


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "blitz.json"
    path.write_text(json.dumps({"session_seconds": 90}), encoding="utf-8")
    monkeypatch.setenv("BLITZ_CONFIG_PATH", str(path))
    monkeypatch.setenv("BLITZ_SESSION_SECONDS", "44")
    monkeypatch.setenv("BLITZ_DISABLE_SCORES", "1")
    monkeypatch.setenv("BLITZ_DATA_PATH", str(tmp_path / "env.sqlite3"))

    cfg = load_config()

    assert cfg.session_seconds == 40
    assert cfg.scores_enabled is False
    assert cfg.resolved_data_path() == tmp_path / "env.sqlite3"


def test_malformed_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "blitz.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_config(path) == BlitzConfig()


@pytest.mark.parametrize(("seconds", "expected"), [(0, 30), (30, 30), (64, 60), (65, 70), (180, 180), (1000, 180)])
def test_session_seconds_snap_to_ten_second_steps(seconds: int, expected: int) -> None:
    assert clamp_session_seconds(seconds) == expected


def test_build_adapters_respects_switches(tmp_path: Path) -> None:
    identity, store = build_adapters(BlitzConfig(data_path=tmp_path / "d.sqlite3"))
    assert isinstance(identity, LocalIdentity)
    assert isinstance(store, SqliteScoreStore)

    identity, store = build_adapters(
        BlitzConfig(data_path=tmp_path / "d.sqlite3", accounts_enabled=False, scores_enabled=False)
    )
    assert isinstance(identity, NullIdentity)
    assert isinstance(store, NullScoreStore)
