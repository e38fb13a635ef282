"""
Data Directory Management for Work

This module defines where Work keeps its data on disk.
All paths are relative to the DATA_ROOT (platform data directory by default).

Layout:
    <DATA_ROOT>/
    ├── work.log       # Append-only event log (source of truth)
    └── config.json    # User settings, merged over defaults

The log is never rewritten. Every invocation of the CLI opens it, reads it
in full when a query needs it and appends at most a couple of lines.
"""

import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

APP_NAME = "work"

LOG_FILENAME = "work.log"
CONFIG_FILENAME = "config.json"


def _get_default_data_root() -> Path:
    """The per-user data directory conventional on this platform."""
    home = Path.home()
    if sys.platform == "darwin":
        base = home / "Library" / "Application Support"
    elif sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA") or home / "AppData" / "Local")
    else:
        # XDG base directory spec
        base = Path(os.environ.get("XDG_DATA_HOME") or home / ".local" / "share")
    return base / APP_NAME


def get_data_root() -> Path:
    """
    Resolve the data root, honouring the WORK_DATA_ROOT override.

    Read on every call so that a `.env` file loaded after import still applies.
    """
    override = os.environ.get("WORK_DATA_ROOT")
    return Path(override) if override else _get_default_data_root()


def get_log_path() -> Path:
    """Path of the event log under the current data root."""
    return get_data_root() / LOG_FILENAME


def get_config_path() -> Path:
    """Path of the settings file under the current data root."""
    return get_data_root() / CONFIG_FILENAME


def ensure_parent_directory(path: Path) -> bool:
    """
    Ensure the directory holding `path` exists.

    This function is idempotent and safe to call multiple times.

    Args:
        path: File whose parent directory should exist

    Returns:
        True if the directory was created, False if it already existed

    Raises:
        OSError: If the directory cannot be created
    """
    parent = path.parent
    created = not parent.exists()
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory {parent}: {e}")
        raise

    if created:
        logger.info(f"Created directory: {parent}")
    return created
