from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait

from .blitz_core import TOP_SCORES_LIMIT, Mode
from .identity import User
from .persistence import ScoreStore
from .results import HighScoreEntry, SessionResult

logger = logging.getLogger(__name__)


class ScoreService:
    """Fire-and-forget front for a ScoreStore.

    Saves and top-score queries run on one background worker, in submission
    order. Failures are logged and dropped. The game loop only ever reads the
    last fetched top scores from a cache, so a slow or broken store never
    stalls play.
    """

    def __init__(self, store: ScoreStore, *, limit: int = TOP_SCORES_LIMIT) -> None:
        self._store = store
        self._limit = int(limit)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scores")
        self._lock = threading.Lock()
        self._cache: dict[tuple[str, Mode], tuple[HighScoreEntry, ...]] = {}
        self._pending: list[Future[None]] = []

    def submit_result(self, user: User | None, result: SessionResult) -> Future[None] | None:
        if user is None:
            return None
        fut = self._submit(self._save, user.id, result)
        self.request_top_scores(user, result.mode)
        return fut

    def request_top_scores(self, user: User | None, mode: Mode) -> Future[None] | None:
        if user is None:
            return None
        return self._submit(self._refresh, user.id, mode)

    def top_scores(self, user: User | None, mode: Mode) -> tuple[HighScoreEntry, ...]:
        if user is None:
            return ()
        with self._lock:
            return self._cache.get((user.id, mode), ())

    def flush(self, timeout: float | None = None) -> None:
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _submit(self, fn: Callable[..., None], *args: object) -> Future[None]:
        fut = self._executor.submit(fn, *args)
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(fut)
        return fut

    def _save(self, user_id: str, result: SessionResult) -> None:
        try:
            self._store.save_result(user_id, result)
        except Exception:
            logger.exception("Saving %s score for %s failed", result.mode.value, user_id)

    def _refresh(self, user_id: str, mode: Mode) -> None:
        try:
            rows = tuple(self._store.top_scores(user_id, mode, self._limit))
        except Exception:
            logger.exception("Loading %s top scores for %s failed", mode.value, user_id)
            return
        with self._lock:
            self._cache[(user_id, mode)] = rows
