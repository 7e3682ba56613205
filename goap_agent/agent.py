"""
GOAP agent: the execution cursor that turns plans into behavior.

Each host-loop tick:
1. A pending interrupt (e.g. sensor target change) clears the current
   action, goal and plan unconditionally.
2. With no action running, the agent plans. Only goals more important
   than the one it holds are considered, so a running plan is only
   replaced by something strictly better; when there are none, no search
   runs at all. The state reads PLANNING only while a search is running.
   The next action of the (new or retained) plan is popped and started.
3. The running action is updated. On completion it is stopped, its
   effects are applied to the world, and when the plan runs dry the goal
   is recorded as the most recent one for hysteresis.

A failed search is not an error: the agent simply stays idle and tries
again on the next tick.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional

from .actions import AgentAction
from .beliefs import BeliefRegistry
from .goals import AgentGoal
from .logging_config import get_logger
from .planner import ActionPlan, GOAPPlanner
from .sensors import Sensor
from .world import WorldState

logger = get_logger(__name__)


class AgentState(str, Enum):
    """Execution cursor states."""
    IDLE = "idle"
    PLANNING = "planning"
    EXECUTING = "executing"


class GOAPAgent:
    """
    Drives one action at a time toward the best achievable goal.

    Example:
        >>> agent = GOAPAgent("villager", beliefs, actions, goals, world=world)
        >>> agent.bind_sensor(chase_sensor)
        >>> while running:
        ...     agent.tick(dt)
    """

    def __init__(
        self,
        name: str,
        beliefs: BeliefRegistry,
        actions: Iterable[AgentAction],
        goals: Iterable[AgentGoal],
        planner: Optional[GOAPPlanner] = None,
        world: Optional[WorldState] = None,
        verify_preconditions: bool = True,
    ):
        """
        Args:
            name: Agent identifier used in logs
            beliefs: The agent's belief registry
            actions: Action pool handed to the planner on every search
            goals: Goals the agent may pursue
            planner: Search engine (a default GOAPPlanner if omitted)
            world: World state that receives completed actions' effects
            verify_preconditions: Re-check an action's preconditions
                before starting it and drop the plan if they no longer hold
        """
        self.name = name
        self.beliefs = beliefs
        self.actions: List[AgentAction] = list(actions)
        self.goals: List[AgentGoal] = list(goals)
        self.planner = planner or GOAPPlanner()
        self.world = world
        self.verify_preconditions = verify_preconditions

        self._state = AgentState.IDLE
        self._current_goal: Optional[AgentGoal] = None
        self._current_action: Optional[AgentAction] = None
        self._action_plan: Optional[ActionPlan] = None
        self._last_goal: Optional[AgentGoal] = None
        self._interrupt_reason: Optional[str] = None
        self._tick = 0

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def current_goal(self) -> Optional[AgentGoal]:
        return self._current_goal

    @property
    def current_action(self) -> Optional[AgentAction]:
        return self._current_action

    @property
    def action_plan(self) -> Optional[ActionPlan]:
        return self._action_plan

    @property
    def last_goal(self) -> Optional[AgentGoal]:
        """Most recently completed goal (penalised by hysteresis)."""
        return self._last_goal

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def metrics(self):
        return self.planner.metrics

    def bind_sensor(self, sensor: Sensor) -> None:
        """Replan whenever the sensor's target changes."""
        sensor.on_target_changed.append(self.handle_target_changed)

    def handle_target_changed(self) -> None:
        self.interrupt("target changed")

    def interrupt(self, reason: str = "interrupted") -> None:
        """Discard the current action, goal and plan at the start of the next tick."""
        self._interrupt_reason = reason

    def tick(self, delta_time: float) -> None:
        """Run one host-loop tick."""
        self._tick += 1
        self._apply_interrupt()

        if self._current_action is None:
            self._calculate_plan()

            if self._action_plan is not None and not self._action_plan.is_empty:
                self._current_goal = self._action_plan.goal
                self._start_next_action()

        if self._current_action is None:
            self._state = AgentState.IDLE
            return

        self._state = AgentState.EXECUTING
        self._current_action.update(delta_time)

        if self._current_action.complete:
            self._finish_current_action()

    def _log_fields(self) -> dict:
        return {
            "subsystem": "agent",
            "agent_id": self.name,
            "tick": self._tick,
            "goal": self._current_goal.name if self._current_goal else None,
            "action": self._current_action.name if self._current_action else None,
        }

    def _apply_interrupt(self) -> None:
        if self._interrupt_reason is None:
            return

        reason, self._interrupt_reason = self._interrupt_reason, None
        logger.event("interrupt", f"Clearing plan: {reason}", **self._log_fields())
        self.metrics.increment("interrupts")

        if self._current_action is not None:
            self._current_action.stop()
        self._current_action = None
        self._current_goal = None
        self._action_plan = None

    def _calculate_plan(self) -> None:
        goals_to_check = self.goals
        if self._current_goal is not None:
            priority_level = self._current_goal.priority
            goals_to_check = [g for g in self.goals if g.priority > priority_level]

        # Nothing could preempt the held goal; keep the retained plan
        if not goals_to_check:
            return

        self._state = AgentState.PLANNING
        potential_plan = self.planner.plan(
            self.actions,
            goals_to_check,
            most_recent_goal=self._last_goal,
            agent_id=self.name,
        )
        if potential_plan is None:
            return

        if potential_plan.goal is not self._current_goal:
            logger.event(
                "goal_selected",
                f"Goal {potential_plan.goal.name} with {len(potential_plan)} action(s)",
                total_cost=potential_plan.total_cost,
                **dict(self._log_fields(), goal=potential_plan.goal.name),
            )
        self._action_plan = potential_plan

    def _start_next_action(self) -> None:
        action = self._action_plan.pop_next()

        if self.verify_preconditions and not action.preconditions_met():
            logger.event(
                "preconditions_failed",
                f"Preconditions of {action.name} no longer hold, dropping plan",
                **self._log_fields(),
            )
            self._current_goal = None
            self._action_plan = None
            return

        self._current_action = action
        logger.debug(f"Popped action {action.name}", extra=self._log_fields())
        action.start()

    def _finish_current_action(self) -> None:
        action = self._current_action
        logger.event("action_complete", f"{action.name} complete", **self._log_fields())
        self.metrics.increment("actions_completed")

        action.stop()
        if self.world is not None:
            self.world.apply_effects(action.effects)
        self._current_action = None

        if self._action_plan is None or self._action_plan.is_empty:
            logger.event("plan_complete", "Plan complete", **self._log_fields())
            self.metrics.increment("plans_completed")
            self._last_goal = self._current_goal
            self._current_goal = None
            self._action_plan = None
            self._state = AgentState.IDLE
