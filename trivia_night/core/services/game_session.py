"""Service that owns the live game state and keeps storage in step with it."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
import logging
from threading import Lock
from typing import Callable

from trivia_night.core.actions import EndGame, GameAction
from trivia_night.core.errors import PersistenceError
from trivia_night.core.models import GameState, Language
from trivia_night.core.persistence import GameStateStore
from trivia_night.core.state_machine import initial_state, transition

logger = logging.getLogger(__name__)


class GameSession:
    """Applies actions one at a time and queues each result for storage.

    Storage writes run on a single background worker in dispatch order, so a
    slow or failing store never holds up the next transition.
    """

    def __init__(
        self,
        store: GameStateStore,
        state: GameState | None = None,
        reducer: Callable[[GameState, GameAction], GameState] = transition,
    ) -> None:
        self._store = store
        self._reducer = reducer
        self._state = state if state is not None else initial_state()
        self._lock = Lock()
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="GameStateWriter")

    @property
    def state(self) -> GameState:
        with self._lock:
            return self._state

    def restore(self, default_language: Language = Language.TR) -> GameState:
        """Replace the in-memory state with the saved game, or a fresh one."""
        try:
            saved = self._store.load()
        except PersistenceError as exc:
            logger.warning("Starting from a fresh game, saved state unavailable: %s", exc)
            saved = None
        with self._lock:
            self._state = saved if saved is not None else initial_state(language=default_language)
            if saved is not None:
                logger.info(
                    "Restored saved game with %d group(s) in phase %s",
                    len(saved.groups),
                    saved.phase.value,
                )
            return self._state

    def dispatch(self, action: GameAction) -> GameState:
        with self._lock:
            previous = self._state
            self._state = self._reducer(previous, action)
            if isinstance(action, EndGame):
                self._submit(self._store.clear, "clear")
            elif self._state is not previous:
                self._submit(lambda state=self._state: self._store.save(state), "save")
            return self._state

    def flush(self, timeout: float | None = None) -> None:
        """Block until every queued storage write has finished."""
        self._writer.submit(lambda: None).result(timeout=timeout)

    def close(self) -> None:
        self._writer.shutdown(wait=True)

    def _submit(self, operation: Callable[[], None], label: str) -> None:
        future = self._writer.submit(operation)
        future.add_done_callback(lambda done: self._log_failure(done, label))

    @staticmethod
    def _log_failure(future: Future, label: str) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("Game state %s failed, continuing in memory: %s", label, exc)
