"""
envedit/ — format-preserving .env editor.

Public API:
    EnvDocument   — load / set / remove / diff / merge / save a .env file
    parse         — raw text → ordered line records
    format_value  — quote/escape a value for KEY=VALUE output
    load_env      — inject a .env file into os.environ
    EnvSchema     — required/optional keys, casts and rules
    build_config  — construct a typed config object from a validated document
"""

from envedit.document import DiffResult, EnvDocument, Position, ValueChange  # noqa: F401
from envedit.errors import (  # noqa: F401
    DotenvError, EnvIOError, NoTargetError, NotFoundError, ParseError,
    SaveError, SchemaError,
)
from envedit.factory import build_config  # noqa: F401
from envedit.formatter import format_value  # noqa: F401
from envedit.loader import load_env  # noqa: F401
from envedit.parser import parse  # noqa: F401
from envedit.records import Comment, Entry, Raw  # noqa: F401
from envedit.schema import EnvRules, EnvSchema, load_schema  # noqa: F401

__version__ = "0.3.0"

__all__ = [
    "EnvDocument", "DiffResult", "Position", "ValueChange",
    "DotenvError", "EnvIOError", "NoTargetError", "NotFoundError",
    "ParseError", "SaveError", "SchemaError",
    "build_config", "format_value", "load_env", "parse",
    "Comment", "Entry", "Raw",
    "EnvRules", "EnvSchema", "load_schema",
]
