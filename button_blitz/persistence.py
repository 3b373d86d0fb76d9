from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path
from typing import Protocol

from .blitz_core import TOP_SCORES_LIMIT, Mode
from .results import HighScoreEntry, SessionResult

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class ScoreStore(Protocol):
    def save_result(self, user_id: str, result: SessionResult) -> int: ...
    def top_scores(self, user_id: str, mode: Mode, limit: int = TOP_SCORES_LIMIT) -> list[HighScoreEntry]: ...


def open_db(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    try:
        conn.execute("PRAGMA foreign_keys=ON;")
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        _migrate(conn)
    except Exception:
        conn.close()
        raise
    return conn


def utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_account (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                display_name TEXT NOT NULL,
                password_hash TEXT NOT NULL,
                created_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS high_score (
                id INTEGER PRIMARY KEY,
                user_id TEXT NOT NULL,
                mode TEXT NOT NULL,
                score INTEGER NOT NULL,
                accuracy INTEGER NOT NULL,
                level INTEGER NOT NULL,
                created_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_high_score_user_mode ON high_score(user_id, mode, score DESC);"
        )
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")
    logger.info("Score database migrated from schema v%d to v%d", ver, SCHEMA_VERSION)


class NullScoreStore:
    """Store used when score saving is not configured: keeps nothing."""

    def save_result(self, user_id: str, result: SessionResult) -> int:
        return 0

    def top_scores(self, user_id: str, mode: Mode, limit: int = TOP_SCORES_LIMIT) -> list[HighScoreEntry]:
        return []


class SqliteScoreStore:
    """Per-user high scores in a local sqlite file.

    Each call opens its own connection, so a store may be shared with a
    background worker thread.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def save_result(self, user_id: str, result: SessionResult) -> int:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = open_db(self._db_path)
        try:
            with conn:
                cur = conn.execute(
                    """
                    INSERT INTO high_score(user_id, mode, score, accuracy, level, created_at_utc)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(user_id),
                        str(result.mode.value),
                        int(result.score),
                        int(result.accuracy),
                        int(result.level),
                        utc_now_iso(),
                    ),
                )
                return int(cur.lastrowid)
        finally:
            conn.close()

    def top_scores(self, user_id: str, mode: Mode, limit: int = TOP_SCORES_LIMIT) -> list[HighScoreEntry]:
        if not self._db_path.exists():
            return []
        conn = open_db(self._db_path)
        try:
            rows = conn.execute(
                """
                SELECT mode, score, accuracy, level, created_at_utc
                FROM high_score
                WHERE user_id = ? AND mode = ?
                ORDER BY score DESC, id ASC
                LIMIT ?
                """,
                (str(user_id), str(mode.value), int(max(0, limit))),
            ).fetchall()
        finally:
            conn.close()

        return [
            HighScoreEntry(
                mode=Mode(row[0]),
                score=int(row[1]),
                accuracy=int(row[2]),
                level=int(row[3]),
                created_at=str(row[4]),
            )
            for row in rows
        ]
