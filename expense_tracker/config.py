"""Configuration management for the expense tracker.

This module centralizes file locations and environment variable
overrides.  Engines never read these values directly; they are used by
``ExpenseTracker.from_data_dir`` and the helper scripts to build the
JSON-backed stores.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

# Base project root - assumes this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORT_DIR = Path(os.getenv("EXPENSE_TRACKER_EXPORT_DIR", DATA_DIR / "exports"))

# One JSON record per persisted concern
ENTRIES_FILENAME = "entries.json"
BUDGETS_FILENAME = "budgets.json"
BUDGET_MONTH_FILENAME = "budget_month.json"
STREAK_FILENAME = "streak.json"
ACHIEVEMENTS_FILENAME = "achievements.json"
THEME_FILENAME = "theme.json"

LOG_LEVEL = os.getenv("EXPENSE_TRACKER_LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

THEMES = ("light", "dark")


def ensure_data_directories(data_dir: Optional[Path] = None) -> None:
    """Create the data and export directories if they don't exist."""
    if data_dir is None:
        directories = [DATA_DIR, EXPORT_DIR]
    else:
        directories = [Path(data_dir), Path(data_dir) / "exports"]
    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def ambient_theme() -> str:
    """Theme to use when the user never picked one."""
    value = os.getenv("EXPENSE_TRACKER_THEME", "").strip().lower()
    return value if value in THEMES else "light"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """Configure root logging for scripts and host applications.

    Library modules only create loggers; handlers are installed here so
    importing the package never changes the host's logging setup.
    """
    resolved = level if level is not None else LOG_LEVEL
    if isinstance(resolved, str):
        resolved = getattr(logging, resolved.upper(), logging.WARNING)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
