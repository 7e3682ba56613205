"""
Configuration system for GOAP agent blueprints.

An AgentConfig declares an agent's beliefs, resources, actions and goals
as plain data, so behaviors can be tuned from JSON/YAML files without
touching code. build_agent() turns a config into a wired GOAPAgent.
build_sensors() creates the declared sensors so a host can tick them.

Blueprint sections:
    beliefs:   [{"name": "HasWood", "type": "flag"},
                {"name": "Nothing", "type": "constant", "value": false},
                {"name": "AtPost", "type": "location", "within": 0.5, "location": [0, 0]},
                {"name": "AgentMoving", "type": "moving"},
                {"name": "PlayerNear", "type": "sensor", "sensor": "chase"}]
    sensors:   {"chase": {"radius": 3, "interval": 1, "target": [5, 0]}}
    resources: {"Wood": 20}            (registers "WoodAvailable")
    actions:   [{"name": "ChopWood", "cost": 2,
                 "preconditions": ["HasAxe"], "effects": ["HasWood"],
                 "strategy": {"type": "move", "target": [8, 0], "consume": "Wood"}}]
    goals:     [{"name": "StockWood", "priority": 3, "desired_effects": ["HasWood"]}]
"""
from __future__ import annotations

import json
import logging
import os
import random
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml

from .actions import ActionBuilder, AgentAction
from .agent import GOAPAgent
from .beliefs import Belief, BeliefRegistry
from .goals import AgentGoal, GoalBuilder
from .metrics import MetricsCollector
from .navigation import Navigator, StraightLineNavigator
from .planner import DEFAULT_HYSTERESIS_EPSILON, GOAPPlanner
from .sensors import Sensor
from .strategies import ActionStrategy, IdleStrategy, MoveStrategy, WanderStrategy
from .validation import ConfigurationError
from .world import WorldState

logger = logging.getLogger(__name__)


@dataclass
class AgentConfig:
    """
    Configuration for one GOAP agent.

    Attributes:
        name: Agent identifier
        hysteresis_epsilon: Priority penalty for the most recent goal
        verify_preconditions: Re-check preconditions before starting actions
        log_level: Default log level for hosts running this agent
        start_position: Where the agent's navigator starts
        speed: Navigator speed in units per second
        beliefs: Belief declarations
        sensors: Named sensors that sensor beliefs may reference
        resources: Initial resource stock
        actions: Action declarations
        goals: Goal declarations
    """
    name: str
    hysteresis_epsilon: float = DEFAULT_HYSTERESIS_EPSILON
    verify_preconditions: bool = True
    log_level: str = "INFO"
    start_position: List[float] = field(default_factory=lambda: [0.0, 0.0])
    speed: float = 3.0
    beliefs: List[Dict[str, Any]] = field(default_factory=list)
    sensors: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    resources: Dict[str, int] = field(default_factory=dict)
    actions: List[Dict[str, Any]] = field(default_factory=list)
    goals: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentConfig":
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def save(self, path: str) -> None:
        """Save config to JSON or YAML file (by extension)."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            if path.endswith((".yaml", ".yml")):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> Optional["AgentConfig"]:
        """Load config from JSON or YAML file. Returns None if missing or unreadable."""
        if not os.path.exists(path):
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()

            if path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)

            return cls.from_dict(data)

        except (OSError, ValueError, TypeError, AttributeError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return None


# Built-in agent presets
PRESETS: Dict[str, AgentConfig] = {
    "villager": AgentConfig(
        name="villager",
        beliefs=[
            {"name": "Nothing", "type": "constant", "value": False},
            {"name": "AgentMoving", "type": "moving"},
            {"name": "HasAxe", "type": "flag"},
            {"name": "HasWood", "type": "flag"},
            {"name": "HasFood", "type": "flag"},
        ],
        resources={"Wood": 20, "Food": 10},
        actions=[
            {"name": "Relax", "effects": ["Nothing"],
             "strategy": {"type": "idle", "duration": 2.0}},
            {"name": "Wander", "effects": ["AgentMoving"],
             "strategy": {"type": "wander", "radius": 5.0}},
            {"name": "PickUpAxe", "effects": ["HasAxe"],
             "strategy": {"type": "idle", "duration": 1.0}},
            {"name": "ChopWood", "cost": 2, "preconditions": ["HasAxe", "WoodAvailable"],
             "effects": ["HasWood"],
             "strategy": {"type": "move", "target": [8.0, 0.0], "consume": "Wood"}},
            {"name": "GatherFood", "cost": 3, "preconditions": ["FoodAvailable"],
             "effects": ["HasFood"],
             "strategy": {"type": "move", "target": [-6.0, 2.0], "consume": "Food"}},
        ],
        goals=[
            {"name": "Relax", "priority": 1, "desired_effects": ["Nothing"]},
            {"name": "Wander", "priority": 1, "desired_effects": ["AgentMoving"]},
            {"name": "StockFood", "priority": 2, "desired_effects": ["HasFood"]},
            {"name": "StockWood", "priority": 3, "desired_effects": ["HasWood"]},
        ],
    ),
    "guard": AgentConfig(
        name="guard",
        start_position=[3.0, 4.0],
        speed=2.0,
        beliefs=[
            {"name": "Nothing", "type": "constant", "value": False},
            {"name": "AtPost", "type": "location", "within": 0.5, "location": [0.0, 0.0]},
            {"name": "AgentMoving", "type": "moving"},
        ],
        actions=[
            {"name": "ReturnToPost", "effects": ["AtPost"],
             "strategy": {"type": "move", "target": [0.0, 0.0]}},
            {"name": "StandWatch", "preconditions": ["AtPost"], "effects": ["Nothing"],
             "strategy": {"type": "idle", "duration": 5.0}},
            {"name": "Patrol", "cost": 2, "effects": ["AgentMoving"],
             "strategy": {"type": "wander", "radius": 3.0}},
        ],
        goals=[
            {"name": "StandGuard", "priority": 2, "desired_effects": ["Nothing"]},
            {"name": "Patrol", "priority": 1, "desired_effects": ["AgentMoving"]},
        ],
    ),
}


def get_preset(name: str) -> Optional[AgentConfig]:
    """Get a built-in agent preset by name."""
    return PRESETS.get(name.lower())


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())


class ConfigManager:
    """
    Manages agent configurations with preset + custom file support.

    Example:
        >>> manager = ConfigManager("./agent_configs")
        >>> config = manager.get("villager")  # Uses built-in preset
        >>> config = manager.get("miner")     # Loads ./agent_configs/miner.yaml
    """

    def __init__(self, config_dir: str = "./agent_configs"):
        self.config_dir = config_dir
        self._cache: Dict[str, AgentConfig] = {}

    def get(self, name: str) -> Optional[AgentConfig]:
        """
        Get agent config by name.

        Checks in order:
        1. Cache
        2. Custom file (config_dir/name.json, .yaml or .yml)
        3. Built-in presets
        """
        name_lower = name.lower()

        if name_lower in self._cache:
            return self._cache[name_lower]

        for ext in [".json", ".yaml", ".yml"]:
            path = os.path.join(self.config_dir, f"{name_lower}{ext}")
            config = AgentConfig.load(path)
            if config:
                self._cache[name_lower] = config
                return config

        preset = get_preset(name_lower)
        if preset:
            self._cache[name_lower] = preset
            return preset

        return None

    def save(self, config: AgentConfig, name: Optional[str] = None, fmt: str = "json") -> str:
        """Save an agent config to file and return its path."""
        name = (name or config.name).lower()
        os.makedirs(self.config_dir, exist_ok=True)
        path = os.path.join(self.config_dir, f"{name}.{fmt}")
        config.save(path)
        self._cache[name] = config
        return path

    def list_available(self) -> List[str]:
        """List all available agents (presets + custom files)."""
        available = set(list_presets())

        if os.path.exists(self.config_dir):
            for f in os.listdir(self.config_dir):
                if f.endswith((".json", ".yaml", ".yml")):
                    available.add(os.path.splitext(f)[0])

        return sorted(available)


# Blueprint assembly

def _point(value: Any, where: str) -> tuple:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise ConfigurationError(f"{where}: expected a point like [x, y], got {value!r}")
    return tuple(float(c) for c in value)


def _build_beliefs(
    config: AgentConfig,
    world: WorldState,
    navigator: Navigator,
    sensors: Mapping[str, Sensor],
) -> BeliefRegistry:
    registry = BeliefRegistry(position=lambda: navigator.position)

    for entry in config.beliefs:
        name = entry.get("name")
        kind = entry.get("type", "flag")
        if kind == "flag":
            world.flag_belief(registry, name, entry.get("initial"))
        elif kind == "constant":
            value = bool(entry.get("value", False))
            registry.add_belief(name, lambda value=value: value)
        elif kind == "location":
            location = _point(entry.get("location"), f"Belief '{name}'")
            registry.add_location_belief(name, float(entry.get("within", 1.0)), location)
        elif kind == "moving":
            registry.add_belief(name, lambda: not navigator.is_at_destination())
        elif kind == "sensor":
            sensor_name = entry.get("sensor")
            if sensor_name not in sensors:
                raise ConfigurationError(f"Belief '{name}' references unknown sensor '{sensor_name}'")
            registry.add_sensor_belief(name, sensors[sensor_name])
        else:
            raise ConfigurationError(f"Belief '{name}' has unknown type '{kind}'")

    for resource_type, amount in config.resources.items():
        world.add_resource(resource_type, int(amount))
        world.resource_belief(registry, resource_type)

    return registry


def _build_strategy(
    entry: Mapping[str, Any],
    action_name: str,
    world: WorldState,
    navigator: Navigator,
    rng: random.Random,
) -> ActionStrategy:
    kind = entry.get("type")
    if kind == "idle":
        return IdleStrategy(float(entry.get("duration", 1.0)))
    if kind == "wander":
        return WanderStrategy(navigator, float(entry.get("radius", 5.0)), rng=rng)
    if kind == "move":
        destination = _point(entry.get("target"), f"Action '{action_name}' strategy")
        on_arrival: Optional[Callable[[], object]] = None
        resource = entry.get("consume")
        if resource:
            on_arrival = lambda: world.request_resource(resource)
        return MoveStrategy(navigator, lambda: destination, on_arrival)
    raise ConfigurationError(f"Action '{action_name}' has unknown strategy type '{kind}'")


def _resolve(registry: BeliefRegistry, name: str, owner: str) -> Belief:
    belief = registry.get(name)
    if belief is None:
        raise ConfigurationError(f"{owner} references unknown belief '{name}'")
    return belief


def _build_actions(
    config: AgentConfig,
    registry: BeliefRegistry,
    world: WorldState,
    navigator: Navigator,
    rng: random.Random,
) -> List[AgentAction]:
    actions = []
    for entry in config.actions:
        name = entry.get("name", "")
        owner = f"Action '{name}'"
        builder = ActionBuilder(name).with_cost(entry.get("cost", 1))
        builder.with_strategy(_build_strategy(entry.get("strategy", {}), name, world, navigator, rng))
        for pre in entry.get("preconditions", []):
            builder.add_precondition(_resolve(registry, pre, owner))
        for eff in entry.get("effects", []):
            builder.add_effect(_resolve(registry, eff, owner))
        actions.append(builder.build())
    return actions


def _build_goals(config: AgentConfig, registry: BeliefRegistry) -> List[AgentGoal]:
    goals = []
    for entry in config.goals:
        name = entry.get("name", "")
        builder = GoalBuilder(name).with_priority(entry.get("priority", 0))
        for eff in entry.get("desired_effects", []):
            builder.with_desired_effect(_resolve(registry, eff, f"Goal '{name}'"))
        goals.append(builder.build())
    return goals


def build_sensors(config: AgentConfig, navigator: Navigator) -> Dict[str, Sensor]:
    """
    Create the sensors a blueprint declares, carried by the navigator.

    A sensor with a `target` observes that fixed point from the start; the
    host may call observe() later to report something else.

    Raises:
        ConfigurationError: If a sensor declaration is malformed
    """
    sensors: Dict[str, Sensor] = {}
    for name, entry in config.sensors.items():
        if not isinstance(entry, Mapping):
            raise ConfigurationError(f"Sensor '{name}': expected a mapping, got {entry!r}")
        try:
            radius = float(entry.get("radius", 3.0))
            interval = float(entry.get("interval", 1.0))
        except (TypeError, ValueError):
            raise ConfigurationError(f"Sensor '{name}': radius and interval must be numbers")
        if radius < 0 or interval < 0:
            raise ConfigurationError(f"Sensor '{name}': radius and interval must be non-negative")

        sensor = Sensor(radius, interval, position=lambda: navigator.position)
        if entry.get("target") is not None:
            target = _point(entry["target"], f"Sensor '{name}'")
            sensor.observe(lambda target=target: target)
        sensors[name] = sensor
    return sensors


def build_agent(
    config: AgentConfig,
    world: Optional[WorldState] = None,
    navigator: Optional[Navigator] = None,
    sensors: Optional[Mapping[str, Sensor]] = None,
    rng: Optional[random.Random] = None,
    metrics: Optional[MetricsCollector] = None,
) -> GOAPAgent:
    """
    Assemble a GOAPAgent from a blueprint.

    Args:
        config: The blueprint
        world: World state the agent's beliefs read from (new one if omitted)
        navigator: Movement collaborator (StraightLineNavigator if omitted)
        sensors: Named sensors that sensor beliefs may reference (the
            blueprint's own, from build_sensors(), if omitted); all of them
            are bound to the agent
        rng: Random source for wander strategies
        metrics: Collector shared with the planner

    Raises:
        ConfigurationError: If any part of the blueprint is malformed
    """
    world = world if world is not None else WorldState()
    navigator = navigator or StraightLineNavigator(config.start_position, speed=config.speed)
    if sensors is None:
        sensors = build_sensors(config, navigator)
    rng = rng or random.Random()

    registry = _build_beliefs(config, world, navigator, sensors)
    actions = _build_actions(config, registry, world, navigator, rng)
    goals = _build_goals(config, registry)

    agent = GOAPAgent(
        config.name,
        registry,
        actions,
        goals,
        planner=GOAPPlanner(config.hysteresis_epsilon, metrics=metrics),
        world=world,
        verify_preconditions=config.verify_preconditions,
    )
    for sensor in sensors.values():
        agent.bind_sensor(sensor)

    logger.info(
        f"Built agent '{config.name}' with {len(registry)} beliefs, "
        f"{len(actions)} actions, {len(goals)} goals"
    )
    return agent
