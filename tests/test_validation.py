"""
Tests for validation module and builder fail-fast behavior.
"""
import pytest

from goap_agent.actions import ActionBuilder
from goap_agent.beliefs import Belief
from goap_agent.goals import GoalBuilder
from goap_agent.strategies import IdleStrategy
from goap_agent.validation import (
    ConfigurationError,
    ValidationResult,
    validate_action,
    validate_cost,
    validate_goal,
    validate_name,
    validate_priority,
)

HAS_AXE = Belief("HasAxe")
HAS_WOOD = Belief("HasWood")


class TestValidateName:
    """Test name validation."""

    def test_valid_name(self):
        assert validate_name("ChopWood").is_valid

    def test_name_with_punctuation_valid(self):
        assert validate_name("Guard's Post-2").is_valid
        assert validate_name("Move: Well").is_valid

    def test_empty_name_invalid(self):
        result = validate_name("")
        assert not result.is_valid
        assert "empty" in result.errors[0].message.lower()

    def test_non_string_invalid(self):
        assert not validate_name(None).is_valid

    def test_long_name_invalid(self):
        result = validate_name("A" * 200)
        assert not result.is_valid
        assert "too long" in result.errors[0].message.lower()

    def test_invalid_characters(self):
        assert not validate_name("Chop<Wood>").is_valid


class TestValidateCost:
    """Test action cost validation."""

    def test_valid_costs(self):
        assert validate_cost(0).is_valid
        assert validate_cost(2.5).is_valid

    def test_negative_invalid(self):
        assert not validate_cost(-1).is_valid

    def test_non_numeric_invalid(self):
        assert not validate_cost("cheap").is_valid
        assert not validate_cost(True).is_valid

    def test_non_finite_invalid(self):
        assert not validate_cost(float("nan")).is_valid
        assert not validate_cost(float("inf")).is_valid


class TestValidatePriority:
    """Test goal priority validation."""

    def test_negative_priority_allowed(self):
        assert validate_priority(-3).is_valid

    def test_nan_invalid(self):
        assert not validate_priority(float("nan")).is_valid

    def test_string_invalid(self):
        assert not validate_priority("high").is_valid


class TestValidateAction:
    """Test whole-action validation."""

    def test_valid_action(self):
        result = validate_action("ChopWood", 2, [HAS_AXE], [HAS_WOOD], IdleStrategy(1))
        assert result.is_valid

    def test_missing_strategy(self):
        result = validate_action("ChopWood", 2, [], [HAS_WOOD], None)
        assert not result.is_valid
        assert result.errors[0].field == "action.strategy"

    def test_no_effects(self):
        assert not validate_action("Noop", 1, [], [], IdleStrategy(1)).is_valid

    def test_circular_effects(self):
        """An action must not produce its own precondition."""
        result = validate_action("Loop", 1, [HAS_WOOD], [HAS_WOOD], IdleStrategy(1))
        assert not result.is_valid
        assert "HasWood" in result.errors[0].message

    def test_errors_accumulate(self):
        result = validate_action("", -1, [], [], None)
        assert len(result.errors) == 4


class TestValidateGoal:
    """Test goal validation."""

    def test_valid_goal(self):
        assert validate_goal("StockWood", 3, [HAS_WOOD]).is_valid

    def test_empty_desired_effects(self):
        assert not validate_goal("Nothing", 1, []).is_valid


class TestValidationResult:
    """Test result accumulation."""

    def test_raise_if_invalid(self):
        result = ValidationResult()
        result.raise_if_invalid()

        result.add_error("cost", "Must be non-negative", "-1")
        with pytest.raises(ConfigurationError, match="cost: Must be non-negative"):
            result.raise_if_invalid("Action 'X'")

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)


class TestBuilders:
    """Builders fail fast on malformed input."""

    def test_action_builder_defaults(self):
        action = ActionBuilder("Chop").with_strategy(IdleStrategy(1)).add_effect(HAS_WOOD).build()

        assert action.cost == 1.0
        assert action.preconditions == frozenset()
        assert action.effects == frozenset({HAS_WOOD})

    def test_action_builder_rejects_negative_cost(self):
        builder = (ActionBuilder("Chop").with_cost(-2)
                   .with_strategy(IdleStrategy(1)).add_effect(HAS_WOOD))
        with pytest.raises(ConfigurationError):
            builder.build()

    def test_action_builder_rejects_missing_strategy(self):
        with pytest.raises(ConfigurationError):
            ActionBuilder("Chop").add_effect(HAS_WOOD).build()

    def test_action_builder_rejects_circular_action(self):
        builder = (ActionBuilder("Loop").with_strategy(IdleStrategy(1))
                   .add_precondition(HAS_WOOD).add_effect(HAS_WOOD))
        with pytest.raises(ConfigurationError):
            builder.build()

    def test_goal_builder(self):
        goal = GoalBuilder("StockWood").with_priority(3).with_desired_effect(HAS_WOOD).build()

        assert goal.priority == 3.0
        assert goal.desired_effects == frozenset({HAS_WOOD})
        assert goal.is_pending()

    def test_goal_builder_rejects_empty_goal(self):
        with pytest.raises(ConfigurationError):
            GoalBuilder("Nothing").with_priority(1).build()
