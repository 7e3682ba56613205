"""
Execution strategies: how an action actually gets carried out.

The planner only reasons about preconditions, effects and cost. Once an
action is chosen, the agent drives its strategy one tick at a time and
reacts to nothing but `complete`.

Variants:
- IdleStrategy: wait out a fixed duration
- MoveStrategy: travel to a (possibly moving) target, then fire a callback
- WanderStrategy: pick a reachable random point nearby and walk there
"""
from __future__ import annotations

import logging
import math
import random
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .navigation import Navigator, Point
from .timers import CountdownTimer

logger = logging.getLogger(__name__)


class ActionStrategy(ABC):
    """Capability interface every execution strategy implements."""

    @property
    @abstractmethod
    def can_perform(self) -> bool:
        """Whether update() should be called this tick."""

    @property
    @abstractmethod
    def complete(self) -> bool:
        """Whether the action has finished."""

    def start(self) -> None:
        pass

    def update(self, delta_time: float) -> None:
        pass

    def stop(self) -> None:
        pass


class IdleStrategy(ActionStrategy):
    """Do nothing for `duration` seconds of tick time."""

    def __init__(self, duration: float):
        self.duration = duration
        self._complete = False
        self._timer = CountdownTimer(duration)
        self._timer.on_timer_start.append(self._mark_running)
        self._timer.on_timer_stop.append(self._mark_complete)

    def _mark_running(self) -> None:
        self._complete = False

    def _mark_complete(self) -> None:
        self._complete = True

    @property
    def can_perform(self) -> bool:
        return True

    @property
    def complete(self) -> bool:
        return self._complete

    def start(self) -> None:
        self._timer.start()

    def update(self, delta_time: float) -> None:
        self._timer.tick(delta_time)

    def stop(self) -> None:
        self._timer.stop()


class MoveStrategy(ActionStrategy):
    """
    Move to a target and fire `on_arrival` once when it is reached.

    The target is re-read on start(), so a strategy pointed at "nearest
    food" follows the world as it changes between runs.
    """

    def __init__(
        self,
        navigator: Navigator,
        target: Callable[[], Point],
        on_arrival: Optional[Callable[[], object]] = None,
    ):
        self.navigator = navigator
        self.target = target
        self.on_arrival = on_arrival
        self._arrived = False

    @property
    def can_perform(self) -> bool:
        return not self._arrived

    @property
    def complete(self) -> bool:
        return self._arrived

    def start(self) -> None:
        self._arrived = False
        destination = self.target()
        if not self.navigator.has_path(destination):
            logger.warning(f"No path to {destination}, moving anyway")
        self.navigator.set_destination(destination)

    def update(self, delta_time: float) -> None:
        if self._arrived or not self.navigator.is_at_destination():
            return
        self._arrived = True
        self.navigator.stop_movement()
        if self.on_arrival is not None:
            self.on_arrival()

    def stop(self) -> None:
        self.navigator.stop_movement()


class WanderStrategy(ActionStrategy):
    """Walk to a random reachable point within `radius`."""

    def __init__(
        self,
        navigator: Navigator,
        radius: float,
        rng: Optional[random.Random] = None,
        attempts: int = 5,
    ):
        self.navigator = navigator
        self.radius = radius
        self.rng = rng or random.Random()
        self.attempts = attempts

    @property
    def can_perform(self) -> bool:
        return not self.complete

    @property
    def complete(self) -> bool:
        return self.navigator.is_at_destination()

    def _random_point(self) -> Point:
        angle = self.rng.uniform(0.0, 2 * math.pi)
        r = self.radius * math.sqrt(self.rng.random())
        origin = self.navigator.position
        return (origin[0] + r * math.cos(angle), origin[1] + r * math.sin(angle)) + tuple(origin[2:])

    def start(self) -> None:
        for _ in range(self.attempts):
            candidate = self._random_point()
            if self.navigator.has_path(candidate):
                self.navigator.set_destination(candidate)
                return

        logger.debug(f"No reachable wander point after {self.attempts} attempts")
        self.navigator.stop_movement()

    def stop(self) -> None:
        self.navigator.stop_movement()
