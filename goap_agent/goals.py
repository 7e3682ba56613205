"""Goals: prioritized sets of facts an agent wants to be true."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Set

from .beliefs import Belief
from .validation import validate_goal


@dataclass(frozen=True, eq=False)
class AgentGoal:
    """
    A desired world state with a priority.

    Goals compare by identity, so two goals sharing a name and priority are
    still distinct for hysteresis.

    Attributes:
        name: Display name
        priority: Higher wins
        desired_effects: Facts the goal wants true
    """
    name: str
    priority: float
    desired_effects: FrozenSet[Belief]

    def is_satisfied(self) -> bool:
        return all(b.evaluate() for b in self.desired_effects)

    def is_pending(self) -> bool:
        """True while at least one desired effect is still false."""
        return not self.is_satisfied()


class GoalBuilder:
    """Fluent builder for AgentGoal."""

    def __init__(self, name: str):
        self._name = name
        self._priority: float = 0.0
        self._desired: Set[Belief] = set()

    def with_priority(self, priority: float) -> "GoalBuilder":
        self._priority = priority
        return self

    def with_desired_effect(self, effect: Belief) -> "GoalBuilder":
        self._desired.add(effect)
        return self

    def build(self) -> AgentGoal:
        validate_goal(self._name, self._priority, self._desired).raise_if_invalid(
            f"Goal '{self._name}'"
        )
        return AgentGoal(self._name, float(self._priority), frozenset(self._desired))
