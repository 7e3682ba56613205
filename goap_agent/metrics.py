"""
Planner and agent metrics.

Tracks:
- Search latency (per plan() call)
- Plan outcomes per goal (how often chosen, steps, cost)
- Event counters (plans found/failed/completed, actions completed, interrupts)

Everything runs inside one host-loop tick, so no locking is done here.
"""
from __future__ import annotations

import json
import logging
import os
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, Optional

logger = logging.getLogger(__name__)

SAMPLE_WINDOW = 500


@dataclass
class LatencyStats:
    """Running latency aggregate with a window of recent samples."""
    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0
    samples: Deque[float] = field(default_factory=lambda: deque(maxlen=SAMPLE_WINDOW))

    def record(self, ms: float) -> None:
        self.count += 1
        self.total_ms += ms
        self.min_ms = min(self.min_ms, ms)
        self.max_ms = max(self.max_ms, ms)
        self.samples.append(ms)

    @property
    def mean_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def percentile(self, p: float) -> float:
        """Nearest-rank percentile (0-100) over the sample window."""
        if not self.samples:
            return 0.0
        ordered = sorted(self.samples)
        rank = min(int(len(ordered) * p / 100), len(ordered) - 1)
        return ordered[rank]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "mean_ms": round(self.mean_ms, 3),
            "min_ms": round(self.min_ms, 3) if self.count else 0.0,
            "max_ms": round(self.max_ms, 3),
            "p50_ms": round(self.percentile(50), 3),
            "p95_ms": round(self.percentile(95), 3),
        }


@dataclass
class GoalStats:
    """How often a goal won the search and what its plans looked like."""
    plans: int = 0
    total_steps: int = 0
    last_cost: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "plans": self.plans,
            "avg_steps": round(self.total_steps / self.plans, 2) if self.plans else 0.0,
            "last_cost": self.last_cost,
        }


class MetricsCollector:
    """
    Latency, per-goal and counter collection for one planner/agent pair.

    Example:
        >>> metrics = MetricsCollector()
        >>> with metrics.time_operation("planner.plan"):
        ...     plan = planner.plan(actions, goals)
        >>> metrics.record_plan(plan.goal.name, len(plan), plan.total_cost)
        >>> metrics.increment("plans_found")
    """

    def __init__(self):
        self._started = datetime.now()
        self._latencies: Dict[str, LatencyStats] = {}
        self._goals: Dict[str, GoalStats] = {}
        self._counters: Counter = Counter()

    def record_latency(self, operation: str, ms: float) -> None:
        self._latencies.setdefault(operation, LatencyStats()).record(ms)

    def time_operation(self, operation: str) -> "LatencyContext":
        """Context manager timing the enclosed block under `operation`."""
        return LatencyContext(self, operation)

    def record_plan(self, goal: str, steps: int, cost: float) -> None:
        stats = self._goals.setdefault(goal, GoalStats())
        stats.plans += 1
        stats.total_steps += steps
        stats.last_cost = cost

    def increment(self, counter: str, n: int = 1, subsystem: Optional[str] = None) -> int:
        """Increment a counter and return its new value."""
        key = f"{subsystem}.{counter}" if subsystem else counter
        self._counters[key] += n
        return self._counters[key]

    def get_latency_stats(self, operation: str) -> LatencyStats:
        return self._latencies.get(operation, LatencyStats())

    def get_goal_stats(self, goal: str) -> GoalStats:
        return self._goals.get(goal, GoalStats())

    def get_counter(self, counter: str) -> int:
        return self._counters.get(counter, 0)

    def summary(self) -> Dict[str, Any]:
        return {
            "uptime_seconds": round((datetime.now() - self._started).total_seconds(), 1),
            "latencies": {op: s.as_dict() for op, s in self._latencies.items()},
            "goals": {name: s.as_dict() for name, s in self._goals.items()},
            "counters": dict(self._counters),
        }

    def export_json(self, path: str) -> None:
        """Write summary() plus an export timestamp to `path`."""
        data = self.summary()
        data["exported_at"] = datetime.now().isoformat()

        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Metrics exported to {path}")

    def reset(self) -> None:
        self._latencies.clear()
        self._goals.clear()
        self._counters.clear()
        self._started = datetime.now()


class LatencyContext:
    """Times a block and records it on exit; `elapsed_ms` stays readable afterwards."""

    def __init__(self, collector: MetricsCollector, operation: str):
        self.collector = collector
        self.operation = operation
        self.elapsed_ms = 0.0
        self._t0: Optional[float] = None

    def __enter__(self) -> "LatencyContext":
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, *exc) -> None:
        if self._t0 is not None:
            self.elapsed_ms = (time.perf_counter() - self._t0) * 1000
            self.collector.record_latency(self.operation, self.elapsed_ms)
