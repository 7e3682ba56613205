"""
Movement collaborator interface.

The planner never moves anything itself. Strategies that need movement
talk to a Navigator supplied by the host (a game engine's nav agent, a
simulation, a test double).

StraightLineNavigator is a minimal reference navigator that slides a point
toward its destination on every tick. It exists for the CLI demo and tests.
"""
from __future__ import annotations

import math
from typing import Optional, Protocol, Sequence, Tuple

Point = Tuple[float, ...]


class Navigator(Protocol):
    """What movement strategies need from the host's movement layer."""

    @property
    def position(self) -> Point: ...

    def set_destination(self, destination: Point) -> None: ...

    def stop_movement(self) -> None: ...

    def is_at_destination(self) -> bool: ...

    def has_path(self, destination: Point) -> bool: ...


class StraightLineNavigator:
    """
    Moves directly toward the destination at a fixed speed.

    Attributes:
        speed: Units moved per second of tick time
        stopping_distance: Distance at which the destination counts as reached
        bounds: Optional (min, max) applied to every coordinate by has_path
    """

    def __init__(
        self,
        position: Sequence[float] = (0.0, 0.0),
        speed: float = 3.0,
        stopping_distance: float = 0.2,
        bounds: Optional[Tuple[float, float]] = None,
    ):
        self._position: Point = tuple(float(c) for c in position)
        self._destination: Optional[Point] = None
        self.speed = speed
        self.stopping_distance = stopping_distance
        self.bounds = bounds

    @property
    def position(self) -> Point:
        return self._position

    @property
    def destination(self) -> Optional[Point]:
        return self._destination

    @property
    def is_moving(self) -> bool:
        return self._destination is not None and not self.is_at_destination()

    def set_destination(self, destination: Point) -> None:
        self._destination = tuple(float(c) for c in destination)

    def stop_movement(self) -> None:
        self._destination = None

    def is_at_destination(self) -> bool:
        if self._destination is None:
            return True
        return math.dist(self._position, self._destination) <= self.stopping_distance

    def has_path(self, destination: Point) -> bool:
        if self.bounds is None:
            return True
        lo, hi = self.bounds
        return all(lo <= c <= hi for c in destination)

    def tick(self, delta_time: float) -> None:
        """Advance toward the destination."""
        if self._destination is None or self.is_at_destination():
            return

        remaining = math.dist(self._position, self._destination)
        step = min(self.speed * delta_time, remaining)
        self._position = tuple(
            p + (d - p) * step / remaining
            for p, d in zip(self._position, self._destination)
        )
