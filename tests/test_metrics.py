"""
Tests for metrics collection and structured logging.
"""
import json
import logging

import pytest

from goap_agent.logging_config import (
    HumanFormatter,
    JSONFormatter,
    StructuredLogger,
    configure_logging,
    get_logger,
)
from goap_agent.metrics import LatencyStats, MetricsCollector


class TestLatencyStats:
    """Test latency aggregation."""

    def test_record(self):
        stats = LatencyStats()
        for ms in [1.0, 2.0, 3.0, 4.0]:
            stats.record(ms)

        assert stats.count == 4
        assert stats.mean_ms == pytest.approx(2.5)
        assert stats.min_ms == 1.0
        assert stats.max_ms == 4.0

    def test_percentile(self):
        stats = LatencyStats()
        for ms in range(1, 101):
            stats.record(float(ms))

        assert stats.percentile(50) == 51.0
        assert stats.percentile(100) == 100.0

    def test_empty_as_dict(self):
        data = LatencyStats().as_dict()

        assert data["count"] == 0
        assert data["min_ms"] == 0
        assert data["p95_ms"] == 0.0


class TestMetricsCollector:
    """Test counters, timing and export."""

    def test_counters(self):
        metrics = MetricsCollector()

        assert metrics.increment("plans_found") == 1
        assert metrics.increment("plans_found", 2) == 3
        metrics.increment("ticks", subsystem="agent")

        assert metrics.get_counter("plans_found") == 3
        assert metrics.get_counter("agent.ticks") == 1
        assert metrics.get_counter("missing") == 0

    def test_time_operation(self):
        metrics = MetricsCollector()

        with metrics.time_operation("planner.plan") as timing:
            sum(range(100))

        assert timing.elapsed_ms >= 0.0
        assert metrics.get_latency_stats("planner.plan").count == 1

    def test_record_plan_per_goal(self):
        metrics = MetricsCollector()
        metrics.record_plan("StockWood", 2, 3.0)
        metrics.record_plan("StockWood", 1, 2.0)

        stats = metrics.get_goal_stats("StockWood")
        assert stats.plans == 2
        assert metrics.summary()["goals"]["StockWood"] == {
            "plans": 2, "avg_steps": 1.5, "last_cost": 2.0,
        }
        assert metrics.get_goal_stats("Unknown").plans == 0

    def test_summary_and_reset(self):
        metrics = MetricsCollector()
        metrics.record_latency("planner.plan", 1.5)
        metrics.increment("interrupts")

        summary = metrics.summary()
        assert summary["counters"] == {"interrupts": 1}
        assert summary["latencies"]["planner.plan"]["count"] == 1

        metrics.reset()
        assert metrics.summary()["counters"] == {}

    def test_export_json(self, tmp_path):
        metrics = MetricsCollector()
        metrics.increment("plans_found")
        path = tmp_path / "out" / "metrics.json"

        metrics.export_json(str(path))

        data = json.loads(path.read_text())
        assert data["counters"]["plans_found"] == 1
        assert "exported_at" in data


def _record(**fields):
    record = logging.LogRecord("goap_agent.test", logging.INFO, "", 0, "Plan complete", (), None)
    for key, value in fields.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    """Test log formatting."""

    def test_json_formatter_includes_structured_fields(self):
        record = _record(
            subsystem="agent", agent_id="villager", tick=7, goal="StockWood",
            action=None, event_type="plan_complete", latency_ms=None,
            extra_data={"total_cost": 3.0},
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Plan complete"
        assert data["agent_id"] == "villager"
        assert data["tick"] == 7
        assert data["goal"] == "StockWood"
        assert data["event"] == "plan_complete"
        assert data["total_cost"] == 3.0
        assert "action" not in data
        assert "latency_ms" not in data

    def test_human_formatter(self):
        record = _record(subsystem="planner", agent_id="guard", tick=3, latency_ms=1.234)

        line = HumanFormatter(use_colors=False).format(record)

        assert "[planner]" in line
        assert "agent=guard" in line
        assert "tick=3" in line
        assert line.endswith("Plan complete (1.23ms)")


class TestStructuredLogger:
    """Test structured logger helpers."""

    def test_get_logger_returns_structured_logger(self):
        assert isinstance(get_logger("goap_agent.tests.structured"), StructuredLogger)

    def test_get_logger_leaves_standard_logger_alone(self):
        logger = get_logger("goap_agent.tests.plain")

        assert type(logging.getLogger("goap_agent.tests.plain")) is logging.Logger
        assert logger.logger is logging.getLogger("goap_agent.tests.plain")

    def test_plain_calls_keep_extra(self, caplog):
        logger = get_logger("goap_agent.tests.extra")

        with caplog.at_level(logging.DEBUG, logger="goap_agent.tests.extra"):
            logger.debug("Popped action ChopWood", extra={"agent_id": "cutter", "action": "ChopWood"})

        record = caplog.records[-1]
        assert record.getMessage() == "Popped action ChopWood"
        assert record.agent_id == "cutter"
        assert record.action == "ChopWood"

    def test_event_carries_fields(self, caplog):
        logger = get_logger("goap_agent.tests.events")

        with caplog.at_level(logging.INFO, logger="goap_agent.tests.events"):
            logger.event("goal_selected", "Goal StockWood", agent_id="villager", tick=2)

        record = caplog.records[-1]
        assert record.event_type == "goal_selected"
        assert record.agent_id == "villager"
        assert record.tick == 2

    def test_configure_logging_writes_files(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging(level="DEBUG", log_dir=str(tmp_path))
            get_logger("goap_agent.tests.files").event("plan_complete", "done", agent_id="a1")
            for handler in root.handlers:
                handler.flush()

            lines = (tmp_path / "goap.json.log").read_text().strip().splitlines()
            assert json.loads(lines[-1])["event"] == "plan_complete"
            assert (tmp_path / "goap.log").exists()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)
