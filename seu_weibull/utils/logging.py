"""Structured logging utilities with JSON output."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_FIELDS = {"run_id", "component", "stage", "seed", "variant", "duration_ms"}


class JSONFormatter(logging.Formatter):
    """JSON formatter adding common contextual fields when present."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in DEFAULT_FIELDS:
            if hasattr(record, field):
                payload[field] = getattr(record, field)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextFilter(logging.Filter):
    """Fill in run_id/component on records that do not carry their own."""

    def __init__(self, run_id: Optional[str] = None, component: Optional[str] = None) -> None:
        super().__init__()
        self.run_id = run_id
        self.component = component

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if self.run_id and not hasattr(record, "run_id"):
            record.run_id = self.run_id
        if self.component and not hasattr(record, "component"):
            record.component = self.component
        return True


def configure_logging(run_id: Optional[str] = None, component: Optional[str] = None, level: int = logging.INFO) -> None:
    """Configure root logger with structured JSON output.

    Embeds run_id/component defaults so downstream loggers inherit context without
    requiring every call to pass `extra`. Only entry points (the CLI) call this;
    the library itself never touches the root logger.
    """

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(ContextFilter(run_id=run_id, component=component))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)


def get_logger(name: str, run_id: Optional[str] = None, component: Optional[str] = None) -> logging.Logger:
    """Convenience helper to fetch a logger with optional context defaults."""

    logger = logging.getLogger(name)
    if run_id or component:
        if not any(isinstance(f, ContextFilter) for f in logger.filters):
            logger.addFilter(ContextFilter(run_id=run_id, component=component))
    return logger


__all__ = ["ContextFilter", "JSONFormatter", "configure_logging", "get_logger"]
