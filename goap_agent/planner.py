"""
Backward-chaining GOAP planner.

Given an action pool and a set of competing goals, the planner picks the
highest-priority goal that is not yet satisfied and searches backward from
its desired effects: every action that produces an outstanding fact is
tried (cheapest first), its own preconditions become new outstanding
facts, and the chain stops once everything outstanding already holds in
the current world state.

Search properties:
- Goals with every desired effect already true are never considered
- The most recently completed goal loses `hysteresis_epsilon` priority
  so two equal goals alternate instead of one winning forever
- An action is used at most once per path, which bounds recursion depth
  by the pool size and guarantees termination
- Each branch works on its own frozensets; siblings never share state
- Extraction follows the cheapest child at each level, which is greedy:
  the result is locally cheap, not guaranteed globally minimal
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .actions import AgentAction
from .beliefs import Belief
from .goals import AgentGoal
from .logging_config import get_logger
from .metrics import MetricsCollector

logger = get_logger(__name__)

DEFAULT_HYSTERESIS_EPSILON = 0.01


@dataclass(eq=False)
class Node:
    """
    One step of a candidate chain, built and discarded within a single
    plan() call.

    Attributes:
        parent: Node closer to the goal (None for the goal node)
        action: Action taken at this step (None for the goal node)
        required_effects: Facts still needed once this action is taken
        cost: Cumulative cost from the goal node down to here
        leaves: Successful continuations, in discovery order
    """
    parent: Optional["Node"]
    action: Optional[AgentAction]
    required_effects: FrozenSet[Belief]
    cost: float
    leaves: List["Node"] = field(default_factory=list)

    @property
    def is_leaf_dead(self) -> bool:
        return not self.leaves and self.action is None


class ActionPlan:
    """
    An ordered, costed sequence of actions achieving a goal.

    `actions` is a stack: the last element is executed next. Popping
    therefore yields the deepest action of the search chain first, the one
    whose preconditions already hold.
    """

    def __init__(self, goal: AgentGoal, actions: List[AgentAction], total_cost: float):
        self.goal = goal
        self.actions = actions
        self.total_cost = total_cost

    def __repr__(self) -> str:
        names = [a.name for a in self.execution_order]
        return f"ActionPlan(goal={self.goal.name!r}, actions={names}, total_cost={self.total_cost})"

    def __len__(self) -> int:
        return len(self.actions)

    @property
    def is_empty(self) -> bool:
        return not self.actions

    @property
    def execution_order(self) -> List[AgentAction]:
        """Remaining actions, next-to-execute first."""
        return list(reversed(self.actions))

    def peek(self) -> Optional[AgentAction]:
        return self.actions[-1] if self.actions else None

    def pop_next(self) -> AgentAction:
        """Remove and return the next action; IndexError when exhausted."""
        return self.actions.pop()


def _unsatisfied(facts: Iterable[Belief]) -> FrozenSet[Belief]:
    return frozenset(b for b in facts if not b.evaluate())


class GOAPPlanner:
    """
    Plans for one agent at a time.

    Example:
        >>> planner = GOAPPlanner()
        >>> plan = planner.plan(actions, goals, most_recent_goal=last_goal)
        >>> if plan is not None:
        ...     first = plan.pop_next()
    """

    def __init__(
        self,
        hysteresis_epsilon: float = DEFAULT_HYSTERESIS_EPSILON,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Args:
            hysteresis_epsilon: Priority penalty for the most recent goal
            metrics: Collector for latency and plan counters
        """
        if hysteresis_epsilon < 0:
            raise ValueError(f"hysteresis_epsilon must be non-negative, got {hysteresis_epsilon}")
        self.hysteresis_epsilon = hysteresis_epsilon
        self.metrics = metrics or MetricsCollector()

    def order_goals(
        self,
        goals: Iterable[AgentGoal],
        most_recent_goal: Optional[AgentGoal] = None,
    ) -> List[AgentGoal]:
        """
        Pending goals, highest effective priority first.

        Equal effective priorities keep their input order.
        """
        def effective_priority(goal: AgentGoal) -> float:
            if goal is most_recent_goal:
                return goal.priority - self.hysteresis_epsilon
            return goal.priority

        pending = [g for g in goals if g.is_pending()]
        return sorted(pending, key=effective_priority, reverse=True)

    def plan(
        self,
        actions: Iterable[AgentAction],
        goals: Iterable[AgentGoal],
        most_recent_goal: Optional[AgentGoal] = None,
        agent_id: Optional[str] = None,
    ) -> Optional[ActionPlan]:
        """
        Find a plan for the best achievable goal.

        Args:
            actions: Action pool; never modified
            goals: Candidate goals
            most_recent_goal: Goal completed last, penalised for hysteresis
            agent_id: Included in log records

        Returns:
            The plan, or None when no pending goal is achievable
        """
        # Cost order once; the sort is stable so equal costs keep pool order
        pool: Tuple[AgentAction, ...] = tuple(sorted(actions, key=lambda a: a.cost))

        with self.metrics.time_operation("planner.plan") as timing:
            result = None
            for goal in self.order_goals(goals, most_recent_goal):
                result = self.plan_for_goal(goal, pool)
                if result is not None:
                    break

        if result is None:
            self.metrics.increment("plans_failed")
            logger.debug("No plan found", extra={"subsystem": "planner", "agent_id": agent_id})
            return None

        self.metrics.increment("plans_found")
        self.metrics.record_plan(result.goal.name, len(result), result.total_cost)
        logger.latency(
            "planner.plan",
            timing.elapsed_ms,
            subsystem="planner",
            agent_id=agent_id,
            goal=result.goal.name,
            steps=len(result),
            total_cost=result.total_cost,
        )
        return result

    def plan_for_goal(
        self,
        goal: AgentGoal,
        actions: Sequence[AgentAction],
    ) -> Optional[ActionPlan]:
        """Search for a plan achieving one goal, or None."""
        pool = tuple(sorted(actions, key=lambda a: a.cost))
        goal_node = Node(None, None, goal.desired_effects, 0.0)

        if not self._find_path(goal_node, pool) or goal_node.is_leaf_dead:
            return None

        stack: List[AgentAction] = []
        node = goal_node
        while node.leaves:
            # min() keeps the first of equal-cost leaves
            node = min(node.leaves, key=lambda leaf: leaf.cost)
            stack.append(node.action)

        return ActionPlan(goal, stack, node.cost)

    def _find_path(self, parent: Node, actions: Tuple[AgentAction, ...]) -> bool:
        """
        Expand `parent` with every action that makes progress.

        A node succeeds when nothing it requires is still false, or when at
        least one child chain succeeds. A chain only bottoms out once the
        deepest action's preconditions hold right now.
        """
        outstanding = _unsatisfied(parent.required_effects)
        if not outstanding:
            return True

        for action in actions:
            if not action.effects & outstanding:
                continue

            required = (outstanding - action.effects) | action.preconditions
            remaining = tuple(a for a in actions if a is not action)
            child = Node(parent, action, required, parent.cost + action.cost)

            if self._find_path(child, remaining):
                parent.leaves.append(child)

        return bool(parent.leaves)
