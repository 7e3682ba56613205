"""
Target sensor.

Perception itself is the host's job: the host calls observe() with
whatever target it currently detects (or None). The sensor keeps the
last known target and notifies subscribers when it changes, which is how
an agent learns it must drop its plan.
"""
from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional

from .navigation import Point
from .timers import CountdownTimer

logger = logging.getLogger(__name__)


class Sensor:
    """
    Detects a single target within a radius of the owner.

    The target position is re-checked every `timer_interval` seconds of
    tick time while a target is held, so a target moving inside the radius
    also counts as a change.
    """

    def __init__(
        self,
        detection_radius: float = 3.0,
        timer_interval: float = 1.0,
        position: Optional[Callable[[], Point]] = None,
    ):
        self.detection_radius = detection_radius
        self._position = position
        self._target: Optional[Callable[[], Point]] = None
        self._last_position: Optional[Point] = None
        self.on_target_changed: List[Callable[[], None]] = []

        self._timer = CountdownTimer(timer_interval)
        self._timer.on_timer_stop.append(self._refresh)
        self._timer.start()

    @property
    def target_position(self) -> Optional[Point]:
        return self._target() if self._target is not None else None

    @property
    def is_target_in_range(self) -> bool:
        target = self.target_position
        if target is None:
            return False
        if self._position is None:
            return True
        return math.dist(self._position(), target) <= self.detection_radius

    def observe(self, target: Optional[Callable[[], Point]]) -> None:
        """
        Report what the host currently detects.

        Args:
            target: Callable returning the target's position, or None when
                nothing is detected
        """
        self._target = target
        self._update_target()

    def tick(self, delta_time: float) -> None:
        self._timer.tick(delta_time)

    def _refresh(self) -> None:
        if self._target is not None:
            self._update_target()
        self._timer.start()

    def _update_target(self) -> None:
        current = self.target_position if self.is_target_in_range else None
        if current == self._last_position:
            return

        self._last_position = current
        logger.debug(f"Sensor target changed to {current}")
        for callback in list(self.on_target_changed):
            callback()
