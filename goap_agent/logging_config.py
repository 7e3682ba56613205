"""
Structured logging for planner and agent activity.

Every record may carry the planning context it happened in:
- subsystem (planner, agent, world, ...)
- agent_id and tick
- goal and action active at the time
- event type and latency

The console gets a compact human line, the optional JSON file gets one
object per record for offline analysis of agent behavior.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

CONTEXT_FIELDS = ("subsystem", "agent_id", "tick", "goal", "action")

HUMAN_LOG = "goap.log"
JSON_LOG = "goap.json.log"


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    """Context fields present (and not None) on a record."""
    found = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            found[name] = value
    return found


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }

        event_type = getattr(record, "event_type", None)
        if event_type:
            payload["event"] = event_type
        latency_ms = getattr(record, "latency_ms", None)
        if latency_ms is not None:
            payload["latency_ms"] = round(latency_ms, 3)
        payload.update(getattr(record, "extra_data", None) or {})

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class HumanFormatter(logging.Formatter):
    """
    Compact console line:

        12:00:01.250 INFO [agent] agent=villager tick=14 StockWood>ChopWood: ChopWood complete
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        ctx = _context(record)
        parts = [
            datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3],
            record.levelname[:4],
        ]
        if ctx.get("subsystem", "general") != "general":
            parts.append(f"[{ctx['subsystem']}]")
        if "agent_id" in ctx:
            parts.append(f"agent={ctx['agent_id']}")
        if "tick" in ctx:
            parts.append(f"tick={ctx['tick']}")
        if "goal" in ctx or "action" in ctx:
            parts.append(f"{ctx.get('goal', '-')}>{ctx.get('action', '-')}")

        message = record.getMessage()
        latency_ms = getattr(record, "latency_ms", None)
        if latency_ms is not None:
            message += f" ({latency_ms:.2f}ms)"

        line = f"{' '.join(parts)}: {message}"
        if self.use_colors and sys.stderr.isatty():
            line = f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.LoggerAdapter):
    """
    Adapter over a standard Logger with event() and latency() helpers that
    attach planning context.

    Plain calls (debug, info, ...) pass their `extra` through, merged over
    any context the adapter was created with.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def _emit(
        self,
        level: int,
        msg: str,
        subsystem: str = "general",
        agent_id: Optional[str] = None,
        tick: Optional[int] = None,
        goal: Optional[str] = None,
        action: Optional[str] = None,
        event_type: Optional[str] = None,
        latency_ms: Optional[float] = None,
        **extra,
    ) -> None:
        if not self.isEnabledFor(level):
            return
        self.logger.log(
            level,
            msg,
            extra={
                **self.extra,
                "subsystem": subsystem,
                "agent_id": agent_id,
                "tick": tick,
                "goal": goal,
                "action": action,
                "event_type": event_type,
                "latency_ms": latency_ms,
                "extra_data": extra,
            },
        )

    def event(self, event_type: str, msg: str, **context) -> None:
        """Log a named agent/planner event at INFO."""
        self._emit(logging.INFO, msg, event_type=event_type, **context)

    def latency(self, operation: str, latency_ms: float, **context) -> None:
        """Log how long an operation took, at DEBUG."""
        self._emit(logging.DEBUG, f"{operation} completed", latency_ms=latency_ms, **context)


def _rotating(path: str, formatter: logging.Formatter, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    json_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Install console and (optionally) rotating file handlers on the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for goap.log and the JSON log; console only if None
        json_file: JSON log path, relative to log_dir unless absolute
        max_bytes: Rotate a log file once it reaches this size
        backup_count: Rotated files to keep
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    root.handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(HumanFormatter())
    root.addHandler(console)

    if not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)
    json_path = os.path.join(log_dir, json_file or JSON_LOG)

    root.addHandler(_rotating(
        os.path.join(log_dir, HUMAN_LOG), HumanFormatter(use_colors=False), max_bytes, backup_count,
    ))
    root.addHandler(_rotating(json_path, JSONFormatter(), max_bytes, backup_count))


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger wrapping the standard logger `name`."""
    return StructuredLogger(logging.getLogger(name))
