"""Schema validation subcommand."""
from __future__ import annotations

import json
from enum import Enum

from rich.markup import escape

from envedit.schema import load_schema
from envedit.snapshots import snapshot
from envedit.theme import theme as _theme
from envedit_cli.helpers import console, display_value, locked, ok, open_document


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    return value


def cmd_validate(path: str, schema_path: str, write: bool = False,
                 reveal: bool = False, json_output: bool = False):
    """Handle `envedit validate SCHEMA [--write]`.

    Optional keys missing from the file are backfilled with their defaults;
    --write saves those defaults back to the file.
    """
    schema = load_schema(schema_path)

    with locked(path):
        doc = open_document(path)
        before = doc.preview()
        typed = schema.validate(doc)
        backfilled = doc.preview() != before
        if write and backfilled:
            snapshot(path, reason=f"validate {schema_path} defaults")
            doc.save(path)

    if json_output:
        print(json.dumps({k: _plain(v) for k, v in typed.items()},
                         indent=2, default=str))
        return

    out = console()
    ok(f"{escape(path)} satisfies {escape(schema_path)} ({len(typed)} keys)")
    for key, value in typed.items():
        shown = display_value(key, str(_plain(value)), reveal)
        out.print(f"    {_theme.tag(_theme.key, escape(key))} = {escape(shown)}"
                  f" {_theme.tag(_theme.muted, type(value).__name__)}")
    if backfilled and not write:
        out.print(f"  {_theme.tag(_theme.muted, 'defaults applied in memory only; use --write to save')}")
