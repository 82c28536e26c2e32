"""Answer countdown bound to a single question.

Each question gets its own :class:`CountdownHandle`. Starting a countdown for
a new question cancels the previous handle, and a cancelled handle never
reports another tick, so a late tick cannot touch the clock of a question
that has already been replaced or answered.
"""

from __future__ import annotations

import itertools
import logging
from threading import Event, Lock, Thread
from typing import Callable

logger = logging.getLogger(__name__)

TickCallback = Callable[["CountdownHandle", int], None]


class CountdownHandle:
    """Owned countdown for one question instance."""

    def __init__(
        self,
        question_id: str | int,
        generation: int,
        seconds: int,
        on_tick: TickCallback,
        interval: float,
    ) -> None:
        self.question_id = question_id
        self.generation = generation
        self._remaining = seconds
        self._on_tick = on_tick
        self._interval = interval
        self._cancelled = Event()
        self._lock = Lock()
        self._thread: Thread | None = None

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def is_active(self) -> bool:
        return not self._cancelled.is_set()

    def start(self) -> None:
        self._thread = Thread(
            target=self._run,
            name=f"AnswerCountdown-{self.generation}",
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def tick(self) -> int | None:
        """Advance one step; returns the new remaining time or None if cancelled."""
        with self._lock:
            if self._cancelled.is_set():
                return None
            self._remaining = max(0, self._remaining - 1)
            remaining = self._remaining
        self._on_tick(self, remaining)
        if remaining == 0:
            self.cancel()
        return remaining

    def _run(self) -> None:
        while not self._cancelled.wait(self._interval):
            try:
                self.tick()
            except Exception:
                logger.exception("Countdown tick failed for question %s", self.question_id)
                self.cancel()


class AnswerCountdown:
    """Issues countdown handles, keeping at most one active."""

    def __init__(self, interval: float = 1.0, autostart: bool = True) -> None:
        self._interval = interval
        self._autostart = autostart
        self._generations = itertools.count(1)
        self._current: CountdownHandle | None = None

    @property
    def current(self) -> CountdownHandle | None:
        return self._current

    def start(self, question_id: str | int, seconds: int, on_tick: TickCallback) -> CountdownHandle:
        self.cancel()
        handle = CountdownHandle(
            question_id=question_id,
            generation=next(self._generations),
            seconds=seconds,
            on_tick=on_tick,
            interval=self._interval,
        )
        self._current = handle
        if self._autostart:
            handle.start()
        return handle

    def cancel(self) -> None:
        if self._current is not None:
            self._current.cancel()
            self._current = None

    def is_current(self, handle: CountdownHandle) -> bool:
        return handle is self._current and handle.is_active
