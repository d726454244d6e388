"""Shared utilities for CLI modules."""
from __future__ import annotations

import os
import re
from importlib import metadata
from typing import NoReturn

from filelock import FileLock, Timeout
from rich.console import Console
from rich.markup import escape

from envedit import __version__, settings
from envedit.document import EnvDocument
from envedit.errors import DotenvError
from envedit.theme import theme as _theme

_SECRET_HINT = re.compile(r"(KEY|SECRET|TOKEN|PASSWORD|PASS|PRIVATE)", re.IGNORECASE)


class CommandError(DotenvError):
    """A CLI command cannot proceed (bad usage, lock timeout, cancelled prompt)."""


def get_version() -> str:
    """Installed distribution version, falling back to the package constant."""
    try:
        return metadata.version("envedit")
    except metadata.PackageNotFoundError:
        return __version__


def console() -> Console:
    return Console(highlight=False, soft_wrap=True)


def fail(message: str) -> NoReturn:
    """Print a themed error line and exit with status 1."""
    console().print(f"  {_theme.tag(_theme.error, '✗')} {escape(message)}")
    raise SystemExit(1)


def ok(message: str):
    console().print(f"  {_theme.tag(_theme.success, '✓')} {message}")


def warn(message: str):
    console().print(f"  {_theme.tag(_theme.warning, '!')} {message}")


def is_secret(key: str) -> bool:
    return bool(_SECRET_HINT.search(key))


def mask(value: str) -> str:
    """Mask a secret for display: first 6 + last 4 chars, or *** when short."""
    if len(value) > 12:
        return value[:6] + "..." + value[-4:]
    return "***" if value else ""


def display_value(key: str, value: str, reveal: bool = False) -> str:
    if not reveal and is_secret(key):
        return mask(value)
    return value.replace("\n", "\\n")


def open_document(path: str, create: bool = False) -> EnvDocument:
    """Load *path*; with create=True a missing file yields an empty document."""
    if create and not os.path.exists(path):
        return EnvDocument(path=path)
    return EnvDocument.from_file(path)


def file_lock(path: str) -> FileLock:
    """Inter-process lock guarding load → edit → save of *path*."""
    return FileLock(path + ".lock", timeout=settings.lock_timeout())


class locked:
    """Context manager: hold the file lock, turning a timeout into CommandError."""

    def __init__(self, path: str):
        self._lock = file_lock(path)
        self._path = path

    def __enter__(self):
        try:
            self._lock.acquire()
        except Timeout:
            raise CommandError(f"Timed out waiting for lock on {self._path}")
        return self

    def __exit__(self, *exc):
        self._lock.release()
        return False
