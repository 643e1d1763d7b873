"""Logging setup — one JSON object per line on stderr.

Callers attach structured context through ``extra={"data": {...}}``::

    logger.info("event:decision", extra={"data": {"process": True}})
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(name: Optional[str]) -> int:
    """Map a LOG_LEVEL string to a logging level, defaulting to INFO."""
    return _LEVELS.get((name or "info").strip().lower(), logging.INFO)


def uvicorn_level(name: Optional[str]) -> str:
    """Same mapping, as the lowercase name uvicorn's ``log_level`` expects."""
    return logging.getLevelName(parse_level(name)).lower()


class JsonFormatter(logging.Formatter):
    """Render records as ``{"level", "msg", "ts", "data", "error"}``."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "logger": record.name,
        }
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info:
            exc = record.exc_info[1]
            entry["error"] = {
                "message": str(exc),
                "stack": self.formatException(record.exc_info),
            }
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    """Install the JSON handler on the root logger (idempotent)."""
    root = logging.getLogger()
    root.setLevel(parse_level(level))
    for handler in root.handlers:
        if isinstance(handler.formatter, JsonFormatter):
            return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
