"""Configuration for pocketbook.

Settings come from environment variables so the CLI and any host application
share one source of truth:

- ``POCKETBOOK_DB_PATH``: SQLite database file
- ``POCKETBOOK_WARNING_THRESHOLD``: budget warning threshold percentage
- ``POCKETBOOK_LOG_LEVEL``: log level name for the package logger
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_WARNING_THRESHOLD = 80.0
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_DB_DIR = ".pocketbook"
DEFAULT_DB_NAME = "pocketbook.db"


@dataclass(frozen=True)
class Settings:
    """Per-deployment settings."""

    database_path: Optional[str] = None
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD
    log_level: str = DEFAULT_LOG_LEVEL


def parse_threshold(value: str | float) -> float:
    """Parse a warning threshold percentage.

    Raises:
        ValueError: If the value is not a number between 0 and 100
    """
    try:
        threshold = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid warning threshold '{value}'")
    if not 0 <= threshold <= 100:
        raise ValueError(f"Warning threshold must be between 0 and 100, got {threshold}")
    return threshold


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from the environment."""
    env = os.environ if environ is None else environ

    threshold = DEFAULT_WARNING_THRESHOLD
    raw_threshold = env.get("POCKETBOOK_WARNING_THRESHOLD")
    if raw_threshold:
        threshold = parse_threshold(raw_threshold)

    return Settings(
        database_path=env.get("POCKETBOOK_DB_PATH") or None,
        warning_threshold=threshold,
        log_level=env.get("POCKETBOOK_LOG_LEVEL") or DEFAULT_LOG_LEVEL,
    )


def default_database_path() -> str:
    """Return ~/.pocketbook/pocketbook.db, creating the directory if needed."""
    db_dir = Path.home() / DEFAULT_DB_DIR
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / DEFAULT_DB_NAME)
