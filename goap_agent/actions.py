"""
Actions: costed operations with preconditions and guaranteed effects.

Actions are assembled once with ActionBuilder and treated as immutable
afterwards. The only runtime state they carry lives in their strategy.
"""
from __future__ import annotations

import logging
from typing import FrozenSet, Optional, Set

from .beliefs import Belief
from .strategies import ActionStrategy
from .validation import validate_action

logger = logging.getLogger(__name__)


class AgentAction:
    """
    A named operation the planner can chain.

    Equality is identity: two actions with the same name are still two
    different entries in an action pool.

    Attributes:
        name: Display name
        cost: Non-negative weight used to rank alternatives
        preconditions: Facts that must hold before the action runs
        effects: Facts the action makes true on completion
        strategy: How the action is executed tick by tick
    """

    __slots__ = ("name", "cost", "preconditions", "effects", "strategy")

    def __init__(
        self,
        name: str,
        cost: float,
        preconditions: FrozenSet[Belief],
        effects: FrozenSet[Belief],
        strategy: ActionStrategy,
    ):
        self.name = name
        self.cost = float(cost)
        self.preconditions = preconditions
        self.effects = effects
        self.strategy = strategy

    def __repr__(self) -> str:
        return f"AgentAction({self.name!r}, cost={self.cost})"

    @property
    def complete(self) -> bool:
        return self.strategy.complete

    def preconditions_met(self) -> bool:
        return all(b.evaluate() for b in self.preconditions)

    def start(self) -> None:
        logger.debug(f"Starting action {self.name}")
        self.strategy.start()

    def update(self, delta_time: float) -> None:
        if self.strategy.can_perform:
            self.strategy.update(delta_time)

    def stop(self) -> None:
        self.strategy.stop()


class ActionBuilder:
    """
    Fluent builder for AgentAction.

    Example:
        >>> action = (ActionBuilder("CollectWood")
        ...     .with_cost(2)
        ...     .with_strategy(IdleStrategy(1.0))
        ...     .add_precondition(beliefs["WoodAvailable"])
        ...     .add_effect(beliefs["HasWood"])
        ...     .build())
    """

    def __init__(self, name: str):
        self._name = name
        self._cost: float = 1.0
        self._strategy: Optional[ActionStrategy] = None
        self._preconditions: Set[Belief] = set()
        self._effects: Set[Belief] = set()

    def with_cost(self, cost: float) -> "ActionBuilder":
        self._cost = cost
        return self

    def with_strategy(self, strategy: ActionStrategy) -> "ActionBuilder":
        self._strategy = strategy
        return self

    def add_precondition(self, precondition: Belief) -> "ActionBuilder":
        self._preconditions.add(precondition)
        return self

    def add_effect(self, effect: Belief) -> "ActionBuilder":
        self._effects.add(effect)
        return self

    def build(self) -> AgentAction:
        """Validate and create the action; raises ConfigurationError."""
        validate_action(
            self._name,
            self._cost,
            self._preconditions,
            self._effects,
            self._strategy,
        ).raise_if_invalid(f"Action '{self._name}'")

        return AgentAction(
            self._name,
            self._cost,
            frozenset(self._preconditions),
            frozenset(self._effects),
            self._strategy,
        )
