"""Tick-driven countdown timer."""
from __future__ import annotations

from typing import Callable, List


class CountdownTimer:
    """
    Counts down a fixed interval as the host loop ticks it.

    Example:
        >>> timer = CountdownTimer(2.0)
        >>> timer.on_timer_stop.append(lambda: print("done"))
        >>> timer.start()
        >>> timer.tick(2.5)
        done
    """

    def __init__(self, interval: float):
        if interval < 0:
            raise ValueError(f"Timer interval must be non-negative, got {interval}")
        self.interval = interval
        self._remaining = interval
        self._running = False

        self.on_timer_start: List[Callable[[], None]] = []
        self.on_timer_stop: List[Callable[[], None]] = []

    @property
    def remaining(self) -> float:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Restart the countdown from the full interval. No-op while running."""
        if self._running:
            return
        self._remaining = self.interval
        self._running = True
        for callback in list(self.on_timer_start):
            callback()

    def stop(self) -> None:
        self._running = False

    def reset(self) -> None:
        self._remaining = self.interval

    def tick(self, delta_time: float) -> None:
        if not self._running:
            return

        self._remaining -= delta_time
        if self._remaining <= 0.0:
            self._remaining = 0.0
            self._running = False
            for callback in list(self.on_timer_stop):
                callback()
