# roadmap_tracker/logging_config.py
"""
Stderr-only logging configuration.

stdout carries command output (task lists, JSON), so every log record goes to
stderr. Human-readable by default, one JSON object per line with --log-json.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, stamped with the record's own creation time."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "where": f"{record.module}:{record.lineno}",
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(verbose: bool = False, json_format: bool = False) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        verbose: Log at DEBUG instead of WARNING
        json_format: Emit JSON lines instead of plain text
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
