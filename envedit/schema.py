"""
envedit/schema.py
Schema validation for .env documents.

Declares required keys, optional keys with defaults, per-key casts and
value rules, then validates a document and returns typed values.
Optional defaults are written back into the document with set().

Usage:
    from envedit.schema import EnvSchema, load_schema
    schema = (EnvSchema()
              .required("APP_NAME", "DB_PORT")
              .optional("DEBUG", "false")
              .cast_int("DB_PORT")
              .cast_bool("DEBUG"))
    schema.rules().min("DB_PORT", 1)
    typed = schema.validate(doc)

    schema = load_schema("env.schema.yaml")
"""

from __future__ import annotations

import logging
import os
import re
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

import yaml

from envedit.casts import CastType, apply_cast, is_numeric
from envedit.errors import NotFoundError, SchemaError

if TYPE_CHECKING:
    from envedit.document import EnvDocument

logger = logging.getLogger(__name__)

Rule = Callable[[str], None]


# ── Rules ─────────────────────────────────────────────────────────────────

class EnvRules:
    """Per-key value checks. Each rule raises SchemaError on failure."""

    def __init__(self):
        self._rules: dict[str, list[Rule]] = {}

    def add(self, key: str, rule: Rule) -> "EnvRules":
        self._rules.setdefault(key, []).append(rule)
        return self

    def validate(self, key: str, value: str) -> None:
        for rule in self._rules.get(key, []):
            rule(value)

    def export(self) -> dict[str, list[Rule]]:
        return {k: list(v) for k, v in self._rules.items()}

    def min(self, key: str, minimum: float) -> "EnvRules":
        def _check(value: str):
            if not is_numeric(value) or float(value) < minimum:
                raise SchemaError(f"Value for '{key}' must be >= {minimum}", key=key)
        return self.add(key, _check)

    def max(self, key: str, maximum: float) -> "EnvRules":
        def _check(value: str):
            if not is_numeric(value) or float(value) > maximum:
                raise SchemaError(f"Value for '{key}' must be <= {maximum}", key=key)
        return self.add(key, _check)

    def one_of(self, key: str, allowed: Iterable[str]) -> "EnvRules":
        allowed = [str(a) for a in allowed]

        def _check(value: str):
            if value not in allowed:
                raise SchemaError(
                    f"Value for '{key}' must be one of: {', '.join(allowed)}", key=key)
        return self.add(key, _check)

    def regex(self, key: str, pattern: str) -> "EnvRules":
        compiled = re.compile(pattern)

        def _check(value: str):
            if not compiled.search(value):
                raise SchemaError(
                    f"Value for '{key}' does not match pattern {pattern}", key=key)
        return self.add(key, _check)

    def length(self, key: str, minimum: int,
               maximum: Optional[int] = None) -> "EnvRules":
        def _check(value: str):
            if len(value) < minimum or (maximum is not None and len(value) > maximum):
                upper = maximum if maximum is not None else "any"
                raise SchemaError(
                    f"Value for '{key}' must be length {minimum} to {upper}", key=key)
        return self.add(key, _check)


# ── Schema ────────────────────────────────────────────────────────────────

class EnvSchema:

    def __init__(self):
        self._required: list[str] = []
        self._optional: dict[str, str] = {}
        self._casts: dict[str, CastType] = {}
        self._rules = EnvRules()

    def required(self, *keys: str) -> "EnvSchema":
        self._required.extend(keys)
        return self

    def optional(self, key: str, default: str) -> "EnvSchema":
        self._optional[key] = default
        return self

    def cast(self, key: str, kind: CastType) -> "EnvSchema":
        self._casts[key] = kind
        return self

    def cast_bool(self, key: str) -> "EnvSchema":
        return self.cast(key, "bool")

    def cast_int(self, key: str) -> "EnvSchema":
        return self.cast(key, "int")

    def cast_float(self, key: str) -> "EnvSchema":
        return self.cast(key, "float")

    def cast_list(self, key: str) -> "EnvSchema":
        return self.cast(key, "list")

    def cast_json(self, key: str) -> "EnvSchema":
        return self.cast(key, "json")

    def cast_enum(self, key: str, enum_cls: type) -> "EnvSchema":
        return self.cast(key, enum_cls)

    def rules(self) -> EnvRules:
        return self._rules

    def group(self, prefix: str,
              callback: Callable[["EnvSchema"], Any]) -> "EnvSchema":
        """Declare keys on a sub-schema and merge them in under *prefix*.

        schema.group("DB_", lambda g: g.required("HOST").cast_int("PORT"))
        """
        sub = EnvSchema()
        callback(sub)
        self._required.extend(prefix + k for k in sub._required)
        for key, default in sub._optional.items():
            self._optional[prefix + key] = default
        for key, kind in sub._casts.items():
            self._casts[prefix + key] = kind
        for key, rules in sub._rules.export().items():
            for rule in rules:
                self._rules.add(prefix + key, rule)
        return self

    @property
    def expected_keys(self) -> list[str]:
        return list(dict.fromkeys([*self._required, *self._optional]))

    def validate(self, document: "EnvDocument") -> dict[str, Any]:
        """Backfill defaults, check required keys, run rules, apply casts.

        Raises SchemaError naming the offending key.
        """
        env = document.to_dict()

        for key, default in self._optional.items():
            if key not in env:
                document.set(key, default)
                env[key] = default
                logger.debug("Backfilled %s with default", key)

        for key in self._required:
            if key not in env:
                raise SchemaError(f"Missing required environment key: {key}", key=key)

        result: dict[str, Any] = {}
        for key in self.expected_keys:
            value = env[key]
            self._rules.validate(key, value)
            if key in self._casts:
                value = apply_cast(value, self._casts[key])
            result[key] = value
        return result


# ── YAML schema files ─────────────────────────────────────────────────────

def _apply_rules(rules: EnvRules, key: str, checks: dict) -> None:
    if not isinstance(checks, dict):
        raise SchemaError(f"Rules for '{key}' must be a mapping", key=key)
    for name, arg in checks.items():
        if name == "min":
            rules.min(key, arg)
        elif name == "max":
            rules.max(key, arg)
        elif name in ("in", "one_of"):
            rules.one_of(key, arg)
        elif name == "regex":
            rules.regex(key, arg)
        elif name == "length":
            if isinstance(arg, (list, tuple)):
                rules.length(key, *arg)
            else:
                rules.length(key, arg)
        else:
            raise SchemaError(f"Unknown rule '{name}' for '{key}'", key=key)


def schema_from_dict(data: dict) -> EnvSchema:
    """Build a schema from the mapping layout used in schema YAML files.

    required: [APP_NAME, DB_PORT]
    optional: {DEBUG: "false"}
    casts:    {DB_PORT: int, DEBUG: bool}
    rules:    {DB_PORT: {min: 1, max: 65535}, APP_ENV: {in: [local, prod]}}
    groups:   {"REDIS_": {required: [HOST]}}
    """
    schema = EnvSchema()
    required = data.get("required") or []
    if not isinstance(required, list):
        raise SchemaError("'required' must be a list")
    schema.required(*[str(k) for k in required])

    for key, default in (data.get("optional") or {}).items():
        schema.optional(str(key), "" if default is None else str(default))
    for key, kind in (data.get("casts") or {}).items():
        schema.cast(str(key), str(kind))
    for key, checks in (data.get("rules") or {}).items():
        _apply_rules(schema.rules(), str(key), checks)
    for prefix, sub in (data.get("groups") or {}).items():
        sub_schema = schema_from_dict(sub or {})
        schema.group(str(prefix), lambda g, s=sub_schema: _copy_into(s, g))
    return schema


def _copy_into(source: EnvSchema, target: EnvSchema) -> None:
    target.required(*source._required)
    for key, default in source._optional.items():
        target.optional(key, default)
    for key, kind in source._casts.items():
        target.cast(key, kind)
    for key, rules in source.rules().export().items():
        for rule in rules:
            target.rules().add(key, rule)


def load_schema(path: str) -> EnvSchema:
    """Load an EnvSchema from a YAML file."""
    if not os.path.exists(path):
        raise NotFoundError(f"Schema file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SchemaError(f"YAML parse error in {path}: {e}")
    if not isinstance(data, dict):
        raise SchemaError(f"Schema {path} is not a mapping")
    return schema_from_dict(data)
