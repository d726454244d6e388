"""
envedit/settings.py
Runtime settings, read from ENVEDIT_* environment variables.

Functions rather than module constants so tests (and the CLI, after
loading its own flags) always see the current environment.
"""

from __future__ import annotations

import os

DEFAULT_FILE = ".env"
DEFAULT_BACKUP_DIR = ".env_backups"
DEFAULT_MAX_BACKUPS = 20
DEFAULT_LOCK_TIMEOUT = 10.0


def _int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


def env_file() -> str:
    return os.environ.get("ENVEDIT_FILE") or DEFAULT_FILE


def backup_dir() -> str:
    return os.environ.get("ENVEDIT_BACKUP_DIR") or DEFAULT_BACKUP_DIR


def max_backups() -> int:
    return max(1, _int("ENVEDIT_MAX_BACKUPS", DEFAULT_MAX_BACKUPS))


def lock_timeout() -> float:
    try:
        return float(os.environ.get("ENVEDIT_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT))
    except ValueError:
        return DEFAULT_LOCK_TIMEOUT


def log_level() -> str:
    return os.environ.get("ENVEDIT_LOG_LEVEL", "WARNING").upper()


def log_dir() -> str:
    return os.environ.get("ENVEDIT_LOG_DIR", "")
