"""
Host-owned world state.

Beliefs never reach for global state. Instead the host creates a
WorldState, registers beliefs that read from it, and passes it to the
agent so completed actions can mark their effects as true.

Holds:
- Boolean flags (one per flag-backed belief)
- Resource counts (stock that actions can draw from)
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from .beliefs import Belief, BeliefRegistry

logger = logging.getLogger(__name__)


class WorldState:
    """
    Mutable world facts shared between the host loop and belief closures.

    Example:
        >>> world = WorldState(resources={"Wood": 3})
        >>> has_wood = world.flag_belief(beliefs, "HasWood")
        >>> wood_available = world.resource_belief(beliefs, "Wood")
        >>> world.request_resource("Wood")
        True
        >>> world.apply_effects([has_wood])
        >>> has_wood.evaluate()
        True
    """

    def __init__(
        self,
        flags: Optional[Dict[str, bool]] = None,
        resources: Optional[Dict[str, int]] = None,
    ):
        self._flags: Dict[str, bool] = dict(flags or {})
        self._resources: Dict[str, int] = dict(resources or {})

    # Flags

    def set_flag(self, name: str, value: bool = True) -> None:
        self._flags[name] = bool(value)

    def flag(self, name: str) -> bool:
        """Current flag value; unknown flags are False."""
        return self._flags.get(name, False)

    @property
    def flags(self) -> Dict[str, bool]:
        return dict(self._flags)

    def flag_belief(self, registry: BeliefRegistry, name: str, initial: Optional[bool] = None) -> Belief:
        """Register a belief that reads the flag of the same name."""
        if initial is not None:
            self.set_flag(name, initial)
        else:
            self._flags.setdefault(name, False)
        return registry.add_belief(name, lambda: self.flag(name))

    def apply_effects(self, effects: Iterable[Belief]) -> None:
        """Mark every flag-backed effect as true; other effects are left alone."""
        for effect in effects:
            if effect.name in self._flags:
                self._flags[effect.name] = True

    # Resources

    def add_resource(self, resource_type: str, amount: int) -> int:
        self._resources[resource_type] = self._resources.get(resource_type, 0) + amount
        return self._resources[resource_type]

    def resource(self, resource_type: str) -> int:
        return self._resources.get(resource_type, 0)

    @property
    def resources(self) -> Dict[str, int]:
        return dict(self._resources)

    def is_resource_available(self, resource_type: str, amount: int = 1) -> bool:
        return self.resource(resource_type) >= amount

    def request_resource(self, resource_type: str) -> bool:
        """Take one unit of a resource. Returns False if unknown or depleted."""
        if resource_type not in self._resources:
            logger.warning(f"Resource type '{resource_type}' does not exist")
            return False

        if self._resources[resource_type] <= 0:
            logger.warning(f"Resource '{resource_type}' is depleted")
            return False

        self._resources[resource_type] -= 1
        logger.debug(f"Resource '{resource_type}' decremented, remaining {self._resources[resource_type]}")
        return True

    def resource_belief(self, registry: BeliefRegistry, resource_type: str, amount: int = 1) -> Belief:
        """Register "<Type>Available", true while at least `amount` remains."""
        self._resources.setdefault(resource_type, 0)
        return registry.add_belief(
            f"{resource_type}Available",
            lambda: self.is_resource_available(resource_type, amount),
        )
