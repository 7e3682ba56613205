"""
Command-line host loop for running a GOAP agent blueprint.

Run with:
    python -m goap_agent.cli --preset villager --ticks 200 --dt 0.25
    python -m goap_agent.cli --preset miner --config-dir ./agent_configs
"""
from __future__ import annotations

import argparse
import json
import random
import sys
from typing import List, Optional

from .config import ConfigManager, build_agent, build_sensors
from .logging_config import configure_logging
from .metrics import MetricsCollector
from .navigation import StraightLineNavigator
from .timers import CountdownTimer
from .validation import ConfigurationError
from .world import WorldState


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="GOAP agent - run a planning agent blueprint in a simple host loop"
    )

    ap.add_argument("--preset", default="villager", help="Preset or config name")
    ap.add_argument("--config-dir", default="./agent_configs", help="Directory of custom configs")
    ap.add_argument("--list", action="store_true", help="List available configs and exit")

    # Host loop
    ap.add_argument("--ticks", type=int, default=200, help="Number of ticks to run")
    ap.add_argument("--dt", type=float, default=0.25, help="Seconds per tick")
    ap.add_argument("--seed", type=int, default=None, help="Random seed for wandering")
    ap.add_argument("--consume-flag", action="append", default=[],
                    help="Flag reset to false every --consume-interval (repeatable)")
    ap.add_argument("--consume-interval", type=float, default=10.0,
                    help="Seconds between consume-flag resets")

    # Logging
    ap.add_argument("--log-level", default=None, help="Override the config's log level")
    ap.add_argument("--log-dir", default=None, help="Directory for rotating log files")
    ap.add_argument("--metrics-out", default=None, help="Write metrics summary JSON here")

    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    manager = ConfigManager(args.config_dir)

    if args.list:
        for name in manager.list_available():
            print(name)
        return 0

    config = manager.get(args.preset)
    if config is None:
        print(f"Unknown agent config: {args.preset}", file=sys.stderr)
        return 2

    configure_logging(level=args.log_level or config.log_level, log_dir=args.log_dir)

    world = WorldState()
    navigator = StraightLineNavigator(config.start_position, speed=config.speed)
    metrics = MetricsCollector()
    try:
        sensors = build_sensors(config, navigator)
        agent = build_agent(
            config,
            world=world,
            navigator=navigator,
            sensors=sensors,
            rng=random.Random(args.seed),
            metrics=metrics,
        )
    except ConfigurationError as e:
        print(f"Invalid agent config '{config.name}': {e}", file=sys.stderr)
        return 2

    consume_timer = CountdownTimer(args.consume_interval)

    def consume() -> None:
        for flag in args.consume_flag:
            world.set_flag(flag, False)
        consume_timer.start()

    if args.consume_flag:
        consume_timer.on_timer_stop.append(consume)
        consume_timer.start()

    print(f"[Running '{config.name}' for {args.ticks} ticks of {args.dt}s]")
    last_goal = None
    last_action = None
    for _ in range(args.ticks):
        consume_timer.tick(args.dt)
        navigator.tick(args.dt)
        for sensor in sensors.values():
            sensor.tick(args.dt)
        agent.tick(args.dt)

        goal = agent.current_goal.name if agent.current_goal else None
        action = agent.current_action.name if agent.current_action else None
        if (goal, action) != (last_goal, last_action):
            print(f"  t={agent.tick_count * args.dt:7.2f}s  goal={goal or '-':<12} action={action or '-'}")
            last_goal, last_action = goal, action

    print("\n[World]")
    print(f"  flags: {world.flags}")
    print(f"  resources: {world.resources}")
    print("\n[Metrics]")
    print(json.dumps(metrics.summary(), indent=2))

    if args.metrics_out:
        metrics.export_json(args.metrics_out)

    return 0


if __name__ == "__main__":
    sys.exit(main())
