"""Deadline-based polling timers driven by the main loop.

Timers never fire on their own: the loop asks for the next deadline, sleeps
in ``select`` until then, and calls ``run_due``. Pausing clears deadlines
outright so nothing can fire while the input line is being edited.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from loguru import logger


class PollingTimer:
    """Fixed-interval callback with a cancellable deadline."""

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        callback: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.interval_seconds = max(0.01, interval_seconds)
        self.callback = callback
        self._clock = clock
        self.deadline: float | None = None

    @property
    def armed(self) -> bool:
        return self.deadline is not None

    def arm(self, now: float | None = None) -> None:
        current = self._clock() if now is None else now
        self.deadline = current + self.interval_seconds

    def cancel(self) -> None:
        self.deadline = None

    def fire_if_due(self, now: float) -> bool:
        if self.deadline is None or now < self.deadline:
            return False
        # Re-armed from now; missed ticks are not replayed.
        self.deadline = now + self.interval_seconds
        logger.debug("timer {} tick", self.name)
        self.callback()
        return True


class PollingScheduler:
    """Owns the data-refresh and completion-check timers."""

    def __init__(self, timers: list[PollingTimer], clock: Callable[[], float] = time.monotonic) -> None:
        self.timers = list(timers)
        self._clock = clock
        self.paused = False

    def start(self) -> None:
        now = self._clock()
        for timer in self.timers:
            timer.arm(now)
        self.paused = False

    def pause(self) -> None:
        for timer in self.timers:
            timer.cancel()
        self.paused = True

    def resume(self) -> None:
        self.start()

    def stop(self) -> None:
        self.pause()

    def next_deadline(self) -> float | None:
        deadlines = [timer.deadline for timer in self.timers if timer.deadline is not None]
        return min(deadlines) if deadlines else None

    def seconds_until_next(self, now: float | None = None) -> float | None:
        deadline = self.next_deadline()
        if deadline is None:
            return None
        current = self._clock() if now is None else now
        return max(0.0, deadline - current)

    def run_due(self, now: float | None = None) -> int:
        """Fire every due timer; stop early if a callback paused the scheduler."""
        current = self._clock() if now is None else now
        fired = 0
        for timer in self.timers:
            if self.paused:
                break
            if timer.fire_if_due(current):
                fired += 1
        return fired
