"""
envedit/casts.py
String → typed value conversion for schema validation.

Supported types: string, int, float, bool, list (alias: array), json,
enum:<module.Class> — or an Enum subclass passed directly.
"""

from __future__ import annotations

import importlib
import json
import math
import re
from enum import Enum
from typing import Any, Union

from envedit.errors import SchemaError

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")

CastType = Union[str, type]

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_INTEGER = re.compile(r"^[+-]?\d+$")


def _cast_bool(value: str) -> bool:
    low = value.strip().lower()
    if low in TRUE_VALUES:
        return True
    if low in FALSE_VALUES:
        return False
    raise SchemaError(f"Cannot cast '{value}' to bool")


def is_numeric(value: str) -> bool:
    """True for a finite decimal number: optional sign, digits, fraction, exponent.

    Rejects what float() alone would let through (nan, inf, 1_000).
    """
    if not _NUMERIC.match(value):
        return False
    return math.isfinite(float(value))


def _cast_number(value: str, kind: type):
    if not is_numeric(value):
        raise SchemaError(f"Cannot cast '{value}' to {kind.__name__}")
    text = value.strip()
    if kind is int:
        # "1.5" -> 1, "1e3" -> 1000
        return int(text) if _INTEGER.match(text) else int(float(text))
    return float(text)


def _cast_list(value: str) -> list[str]:
    if value == "":
        return []
    return [item.strip() for item in value.split(",")]


def _cast_json(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Cannot cast '{value}' to JSON: {e.msg}")


def resolve_enum(dotted: str) -> type:
    """Import 'package.module.ClassName' and check it is an Enum."""
    module_name, _, class_name = dotted.lstrip(".").rpartition(".")
    if not module_name:
        raise SchemaError(f"Enum class '{dotted}' must be a dotted path")
    try:
        cls = getattr(importlib.import_module(module_name), class_name)
    except (ImportError, AttributeError):
        raise SchemaError(f"Enum class '{dotted}' does not exist")
    if not (isinstance(cls, type) and issubclass(cls, Enum)):
        raise SchemaError(f"'{dotted}' is not a valid enum")
    return cls


def _cast_enum(value: str, enum_cls: type) -> Enum:
    try:
        return enum_cls(value)
    except ValueError:
        raise SchemaError(f"Invalid value '{value}' for enum {enum_cls.__name__}")


def apply_cast(value: str, cast: CastType) -> Any:
    """Convert *value* according to *cast*; raise SchemaError on failure."""
    if isinstance(cast, type) and issubclass(cast, Enum):
        return _cast_enum(value, cast)

    kind = str(cast).strip()
    if kind.startswith("enum:"):
        return _cast_enum(value, resolve_enum(kind[len("enum:"):]))

    if kind in ("string", "str"):
        return value
    if kind == "int":
        return _cast_number(value, int)
    if kind == "float":
        return _cast_number(value, float)
    if kind == "bool":
        return _cast_bool(value)
    if kind in ("list", "array"):
        return _cast_list(value)
    if kind == "json":
        return _cast_json(value)
    raise SchemaError(f"Unknown cast type: {kind}")
