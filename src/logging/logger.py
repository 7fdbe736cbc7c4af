# src/logging/logger.py - v1
"""Logging setup for the ``plexweave`` logger tree.

Modules log through ``logging.getLogger(__name__)``. ``setup_logging``
installs the handlers on the package root: stderr always, plus a
rotating file when LOG_FILE is set. A filter stamps each record with the
current run context, and either formatter renders it together with any
structured payload passed as ``extra={"data": {...}}``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from plexweave.logging.context import current_context

ROOT_LOGGER_NAME = "plexweave"

_QUIET_LOGGERS = ("httpx", "httpcore", "chromadb", "sentence_transformers", "urllib3")


class RunContextFilter(logging.Filter):
    """Copies the run context onto the record as ``record.run_context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_context"):
            record.run_context = current_context().as_dict()
        return True


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        run_context = getattr(record, "run_context", None)
        if run_context:
            entry["context"] = run_context
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``2024-05-01 12:00:00 [INFO    ] name <run> (stage) - message {data}``"""

    def format(self, record: logging.LogRecord) -> str:
        run_context = getattr(record, "run_context", None) or {}
        parts = [
            _timestamp(record).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if "run_id" in run_context:
            parts.append(f"<{run_context['run_id']}>")
        if "stage" in run_context:
            parts.append(f"({run_context['stage']})")
        parts.append(f"- {record.getMessage()}")
        data = getattr(record, "data", None)
        if data:
            parts.append(json.dumps(data, default=str))
        line = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Logger:
    """Configure the ``plexweave`` root logger; safe to call repeatedly.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional log file; stderr only when None.
        rotation: Size that triggers rotation of ``log_file`` (e.g. "10MB").
        retention: Rotated files to keep.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from plexweave.logging.handlers import create_rotating_handler

        handlers.append(create_rotating_handler(log_file, rotation=rotation, retention=retention))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RunContextFilter())
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root
