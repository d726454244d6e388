"""
envedit/errors.py
Exception hierarchy shared by the parser, document, loader and schema layers.
"""

from __future__ import annotations


class DotenvError(Exception):
    """Base class for every error raised by envedit."""


class NotFoundError(DotenvError, FileNotFoundError):
    """A referenced .env / backup file does not exist."""


class EnvIOError(DotenvError, OSError):
    """Read, write or copy failure at the filesystem level."""


class SaveError(EnvIOError):
    """save() could not write or replace the target file."""


class ParseError(DotenvError, ValueError):
    """Invalid key syntax or an unterminated multi-line value."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class NoTargetError(DotenvError):
    """save() was called without a path and nothing was loaded."""


class SchemaError(DotenvError):
    """Schema validation, casting or config construction failed."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key
