from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from .blitz_core import DEFAULT_DURATION_MS, clamp_duration_ms
from .identity import IdentityProvider, LocalIdentity, NullIdentity
from .persistence import NullScoreStore, ScoreStore, SqliteScoreStore

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "BLITZ_CONFIG_PATH"
DATA_PATH_ENV = "BLITZ_DATA_PATH"
SESSION_SECONDS_ENV = "BLITZ_SESSION_SECONDS"
DISABLE_ACCOUNTS_ENV = "BLITZ_DISABLE_ACCOUNTS"
DISABLE_SCORES_ENV = "BLITZ_DISABLE_SCORES"
LOG_LEVEL_ENV = "BLITZ_LOG_LEVEL"


def default_config_path() -> Path:
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".button_blitz.json"


def default_data_path() -> Path:
    return Path.home() / ".button_blitz" / "blitz.sqlite3"


def clamp_session_seconds(seconds: float) -> int:
    return clamp_duration_ms(float(seconds) * 1000.0) // 1000


@dataclass(frozen=True, slots=True)
class BlitzConfig:
    session_seconds: int = DEFAULT_DURATION_MS // 1000
    data_path: Path | None = None
    accounts_enabled: bool = True
    scores_enabled: bool = True
    log_level: str = "INFO"
    window_size: tuple[int, int] = (960, 540)

    @property
    def session_ms(self) -> int:
        return self.session_seconds * 1000

    def resolved_data_path(self) -> Path:
        return self.data_path if self.data_path is not None else default_data_path()


def _as_bool(value: object, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return fallback


def _from_mapping(payload: dict, base: BlitzConfig) -> BlitzConfig:
    cfg = base
    if "session_seconds" in payload:
        try:
            cfg = replace(cfg, session_seconds=int(payload["session_seconds"]))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid session_seconds: %r", payload["session_seconds"])
    if payload.get("data_path"):
        cfg = replace(cfg, data_path=Path(str(payload["data_path"])).expanduser())
    if "accounts_enabled" in payload:
        cfg = replace(cfg, accounts_enabled=_as_bool(payload["accounts_enabled"], cfg.accounts_enabled))
    if "scores_enabled" in payload:
        cfg = replace(cfg, scores_enabled=_as_bool(payload["scores_enabled"], cfg.scores_enabled))
    if payload.get("log_level"):
        cfg = replace(cfg, log_level=str(payload["log_level"]).upper())
    size = payload.get("window_size")
    if isinstance(size, list) and len(size) == 2:
        try:
            cfg = replace(cfg, window_size=(int(size[0]), int(size[1])))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid window_size: %r", size)
    return cfg


def load_config(path: Path | None = None) -> BlitzConfig:
    """Read the JSON config file (if any), then apply environment overrides."""

    cfg = BlitzConfig()
    cfg_path = path if path is not None else default_config_path()
    if cfg_path.exists():
        try:
            payload = json.loads(cfg_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Could not read config %s; using defaults", cfg_path)
            payload = None
        if isinstance(payload, dict):
            cfg = _from_mapping(payload, cfg)

    env = os.environ
    overrides: dict[str, object] = {}
    if env.get(DATA_PATH_ENV):
        overrides["data_path"] = env[DATA_PATH_ENV]
    if env.get(SESSION_SECONDS_ENV):
        overrides["session_seconds"] = env[SESSION_SECONDS_ENV]
    if env.get(DISABLE_ACCOUNTS_ENV, "0") == "1":
        overrides["accounts_enabled"] = False
    if env.get(DISABLE_SCORES_ENV, "0") == "1":
        overrides["scores_enabled"] = False
    if env.get(LOG_LEVEL_ENV):
        overrides["log_level"] = env[LOG_LEVEL_ENV]
    cfg = _from_mapping(overrides, cfg)

    return replace(cfg, session_seconds=clamp_session_seconds(cfg.session_seconds))


def build_adapters(config: BlitzConfig) -> tuple[IdentityProvider, ScoreStore]:
    data_path = config.resolved_data_path()
    identity: IdentityProvider
    store: ScoreStore
    if config.accounts_enabled:
        identity = LocalIdentity(data_path)
    else:
        logger.info("Accounts disabled; playing signed out")
        identity = NullIdentity()
    if config.scores_enabled:
        store = SqliteScoreStore(data_path)
    else:
        logger.info("Score saving disabled")
        store = NullScoreStore()
    return identity, store
