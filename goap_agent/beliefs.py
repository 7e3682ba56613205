"""
Beliefs: named boolean facts about the world.

A belief is evaluated lazily every time the planner or the agent asks
for it. Beliefs are shared by reference between actions and goals and
compare by name, so two beliefs named "FoodAvailable" are the same fact
for every set operation.

The BeliefRegistry interns beliefs by name so a name can only ever map
to one predicate.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .validation import ConfigurationError, validate_name

if TYPE_CHECKING:
    from .sensors import Sensor

logger = logging.getLogger(__name__)

Point = Tuple[float, ...]
Condition = Callable[[], bool]


@dataclass(frozen=True)
class Belief:
    """
    A named boolean predicate over world state.

    Attributes:
        name: Unique fact name; equality and hashing use only this
        condition: Zero-argument callable answering the fact right now
    """
    name: str
    condition: Condition = field(compare=False, repr=False, default=lambda: False)

    def evaluate(self) -> bool:
        """
        Evaluate the fact against current world state.

        Evaluation never raises. If the underlying source fails, the fact
        is reported as not satisfied.
        """
        try:
            return bool(self.condition())
        except Exception as e:
            logger.warning(f"Belief '{self.name}' evaluation failed, assuming False: {e}")
            return False


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two points of equal dimension."""
    return math.dist(a, b)


class BeliefRegistry:
    """
    Interned name -> Belief registry for one agent.

    Example:
        >>> beliefs = BeliefRegistry(position=lambda: navigator.position)
        >>> beliefs.add_belief("Nothing", lambda: False)
        >>> beliefs.add_location_belief("AgentAtWell", 2.0, (4.0, 1.0))
        >>> beliefs["Nothing"].evaluate()
        False
    """

    def __init__(self, position: Optional[Callable[[], Point]] = None):
        """
        Args:
            position: Callable returning the agent's current position;
                required only for location beliefs
        """
        self._position = position
        self._beliefs: Dict[str, Belief] = {}

    def add_belief(self, name: str, condition: Condition) -> Belief:
        """Register a belief backed by an arbitrary condition."""
        validate_name(name, "belief.name").raise_if_invalid(f"Belief '{name}'")
        if name in self._beliefs:
            raise ConfigurationError(f"Belief '{name}' is already registered")

        belief = Belief(name, condition)
        self._beliefs[name] = belief
        return belief

    def add_location_belief(
        self,
        name: str,
        within: float,
        location: Union[Point, Callable[[], Point]],
    ) -> Belief:
        """
        Register a belief that holds while the agent is near a location.

        Args:
            name: Belief name
            within: Maximum distance to count as "at" the location
            location: Fixed point, or a callable returning one
        """
        if self._position is None:
            raise ConfigurationError(
                f"Location belief '{name}' needs a registry with an agent position"
            )
        position = self._position
        target = location if callable(location) else (lambda: location)

        return self.add_belief(name, lambda: distance(position(), target()) < within)

    def add_sensor_belief(self, name: str, sensor: "Sensor") -> Belief:
        """Register a belief that holds while the sensor sees a target."""
        return self.add_belief(name, lambda: sensor.is_target_in_range)

    def get(self, name: str) -> Optional[Belief]:
        return self._beliefs.get(name)

    def __getitem__(self, name: str) -> Belief:
        try:
            return self._beliefs[name]
        except KeyError:
            raise KeyError(f"Unknown belief: {name}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._beliefs

    def __len__(self) -> int:
        return len(self._beliefs)

    def __iter__(self) -> Iterator[Belief]:
        return iter(self._beliefs.values())

    def names(self) -> List[str]:
        """Registered belief names in registration order."""
        return list(self._beliefs.keys())

    def snapshot(self) -> Dict[str, bool]:
        """Evaluate every belief once; useful for logging and debugging."""
        return {name: belief.evaluate() for name, belief in self._beliefs.items()}
