"""Non-interactive .env editing: list / get / set / unset / check."""
from __future__ import annotations

import json
from typing import Optional

import questionary
from rich.markup import escape
from rich.table import Table

from envedit.snapshots import snapshot
from envedit.theme import theme as _theme
from envedit_cli.helpers import (
    CommandError, console, display_value, fail, is_secret, locked, ok,
    open_document, warn,
)


def cmd_list(path: str, reveal: bool = False, json_output: bool = False):
    """Handle `envedit list`."""
    doc = open_document(path)
    values = doc.to_dict()

    if json_output:
        print(json.dumps(values, indent=2))
        return

    if not values:
        warn(f"No entries in {escape(path)}")
        return

    table = Table(show_header=True, header_style=_theme.heading, box=None)
    table.add_column("Key", style=_theme.key or None)
    table.add_column("Value", style=_theme.value or None)
    for key, value in values.items():
        table.add_row(escape(key), escape(display_value(key, value, reveal)))
    console().print(table)


def cmd_get(path: str, key: str, json_output: bool = False):
    """Handle `envedit get KEY` — prints the raw logical value."""
    doc = open_document(path)
    if not doc.has(key):
        fail(f"Key not found: {key}")
    value = doc.get(key)
    if json_output:
        print(json.dumps({key: value}))
    else:
        print(value)


def _prompt_value(key: str) -> str:
    style = _theme.questionary_style()
    if is_secret(key):
        answer = questionary.password(f"{key}:", style=style).ask()
    else:
        answer = questionary.text(f"{key}:", style=style).ask()
    if answer is None:
        raise CommandError("Cancelled")
    return answer


def cmd_set(path: str, key: str, value: Optional[str] = None,
            after: str = "", before: str = "", top: bool = False,
            bottom: bool = False, spacing: int = 0, atomic: bool = True,
            dry_run: bool = False):
    """Handle `envedit set KEY [VALUE] [--after K | --before K | --top | --bottom]`."""
    if value is None:
        value = _prompt_value(key)

    with locked(path):
        doc = open_document(path, create=True)
        existed = doc.has(key)

        placement = doc.spacing(spacing)
        if after:
            placement = placement.after(after)
        elif before:
            placement = placement.before(before)
        elif top:
            placement = placement.top()
        elif bottom:
            placement = placement.bottom()
        placement.set(key, value)

        if dry_run:
            print(doc.preview())
            return

        snapshot(path, reason=f"set {key}")
        doc.save(path, atomic=atomic)

    shown = escape(display_value(key, value))
    verb = "Updated" if existed else "Added"
    ok(f"{verb} {_theme.tag(_theme.key, escape(key))} = {shown}")


def cmd_unset(path: str, key: str, atomic: bool = True, dry_run: bool = False):
    """Handle `envedit unset KEY`."""
    with locked(path):
        doc = open_document(path)
        if not doc.has(key):
            warn(f"Key not found: {escape(key)}")
            return
        doc.remove(key)

        if dry_run:
            print(doc.preview())
            return

        snapshot(path, reason=f"unset {key}")
        doc.save(path, atomic=atomic)

    ok(f"Removed: {_theme.tag(_theme.key, escape(key))}")


def cmd_check(path: str, keys: list[str], json_output: bool = False):
    """Handle `envedit check KEY...` — exit 1 if any key is missing."""
    doc = open_document(path)
    missing = doc.missing_keys(keys)

    if json_output:
        print(json.dumps({"missing": missing}))
    elif missing:
        for key in missing:
            console().print(f"  {_theme.tag(_theme.error, '✗')} missing: {escape(key)}")
    else:
        ok(f"All {len(keys)} keys present")

    if missing:
        raise SystemExit(1)
