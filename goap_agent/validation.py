"""
Configuration validation for GOAP building blocks.

Validates:
- Belief, action and goal names
- Action costs
- Action precondition/effect overlap (circular actions)
- Goal desired effects

Malformed configuration fails fast at setup time so the planner never
runs against an action pool it cannot terminate on.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, List


class ConfigurationError(ValueError):
    """Raised when a belief, action, goal or blueprint is malformed."""


@dataclass
class ValidationError:
    """A validation error."""
    field: str
    message: str
    value: str = ""


class ValidationResult:
    """Result of validation check."""

    def __init__(self):
        self.errors: List[ValidationError] = []

    def add_error(self, field: str, message: str, value: str = "") -> None:
        self.errors.append(ValidationError(field, message, value))

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self, context: str = "Validation") -> None:
        if not self.is_valid:
            msgs = [f"{e.field}: {e.message}" for e in self.errors]
            raise ConfigurationError(f"{context} failed:\n" + "\n".join(msgs))


_NAME_PATTERN = re.compile(r"^[\w\s.:'-]+$")


def validate_name(name: Any, field: str = "name") -> ValidationResult:
    """Validate a belief, action or goal name."""
    result = ValidationResult()

    if not isinstance(name, str) or not name.strip():
        result.add_error(field, "Name cannot be empty", str(name))
    elif len(name) > 128:
        result.add_error(field, "Name too long (max 128 chars)", name[:20])
    elif not _NAME_PATTERN.match(name):
        result.add_error(field, "Name has invalid characters", name)

    return result


def validate_cost(cost: Any) -> ValidationResult:
    """Validate an action cost is a finite, non-negative number."""
    result = ValidationResult()

    if isinstance(cost, bool) or not isinstance(cost, (int, float)):
        result.add_error("cost", "Must be a number", str(cost))
    elif math.isnan(cost) or math.isinf(cost):
        result.add_error("cost", "Must be finite", str(cost))
    elif cost < 0:
        result.add_error("cost", "Must be non-negative", str(cost))

    return result


def validate_priority(priority: Any) -> ValidationResult:
    """Validate a goal priority."""
    result = ValidationResult()

    if isinstance(priority, bool) or not isinstance(priority, (int, float)):
        result.add_error("priority", "Must be a number", str(priority))
    elif math.isnan(priority):
        result.add_error("priority", "Must not be NaN", str(priority))

    return result


def validate_action(
    name: str,
    cost: Any,
    preconditions: Iterable[Any],
    effects: Iterable[Any],
    strategy: Any,
) -> ValidationResult:
    """
    Validate the parts of an action before it is built.

    An action whose effects include one of its own preconditions can only
    ever be planned by requiring the very fact it produces, which is a
    configuration mistake rather than something to search around.
    """
    result = validate_name(name, "action.name")
    result.extend(validate_cost(cost))

    if strategy is None:
        result.add_error("action.strategy", "Action needs an execution strategy", name)

    effect_names = {e.name for e in effects}
    if not effect_names:
        result.add_error("action.effects", "Action must declare at least one effect", name)

    circular = sorted(effect_names & {p.name for p in preconditions})
    if circular:
        result.add_error(
            "action.effects",
            f"Effects overlap preconditions: {', '.join(circular)}",
            name,
        )

    return result


def validate_goal(name: str, priority: Any, desired_effects: Iterable[Any]) -> ValidationResult:
    """Validate the parts of a goal before it is built."""
    result = validate_name(name, "goal.name")
    result.extend(validate_priority(priority))

    if not list(desired_effects):
        result.add_error("goal.desired_effects", "Goal must desire at least one effect", name)

    return result
