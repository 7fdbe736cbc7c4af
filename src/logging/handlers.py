# src/logging/handlers.py - v1
"""Rotating file handler for LOG_FILE."""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*([KMG]?)B?$", re.IGNORECASE)
_MULTIPLIERS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3}


def parse_size(size: str | int) -> int:
    """Bytes in ``size``: a plain integer or a string such as "10MB", "1.5G", "512k"."""
    if isinstance(size, int):
        return size
    match = _SIZE_PATTERN.match(size.strip())
    if not match:
        raise ValueError(f"Invalid size format: {size!r}. Use e.g. '10MB'.")
    number, unit = match.groups()
    return int(float(number) * _MULTIPLIERS[unit.upper()])


def create_rotating_handler(
    log_file: str | Path, rotation: str | int = "10MB", retention: int = 30,
) -> RotatingFileHandler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path, maxBytes=parse_size(rotation), backupCount=retention, encoding="utf-8",
    )
