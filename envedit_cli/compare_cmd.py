"""Compare and combine .env files: diff / merge."""
from __future__ import annotations

import json

from rich.markup import escape

from envedit.snapshots import snapshot
from envedit.theme import theme as _theme
from envedit_cli.helpers import console, display_value, locked, ok, open_document


def cmd_diff(path: str, other: str, reveal: bool = False,
             json_output: bool = False):
    """Handle `envedit diff OTHER`.

    +  key only in OTHER
    -  key only in the current file
    ~  key in both with different values
    """
    doc = open_document(path)
    result = doc.diff(other)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
        return

    out = console()
    if result.is_empty:
        ok(f"No differences between {escape(path)} and {escape(other)}")
        return

    for key, value in result.missing_in_current.items():
        shown = escape(display_value(key, value, reveal))
        out.print(_theme.tag(_theme.added, f"+ {escape(key)}={shown}"))
    for key, value in result.extra_in_current.items():
        shown = escape(display_value(key, value, reveal))
        out.print(_theme.tag(_theme.removed, f"- {escape(key)}={shown}"))
    for key, change in result.changed.items():
        current = escape(display_value(key, change.current, reveal))
        other_value = escape(display_value(key, change.other, reveal))
        out.print(_theme.tag(_theme.changed,
                             f"~ {escape(key)}: {current} → {other_value}"))


def cmd_merge(path: str, other: str, override: bool = False,
              atomic: bool = True, dry_run: bool = False,
              json_output: bool = False):
    """Handle `envedit merge OTHER [--override]`."""
    with locked(path):
        doc = open_document(path, create=True)
        applied = doc.merge(other, override_existing=override)

        if dry_run:
            print(doc.preview())
            return

        if applied:
            snapshot(path, reason=f"merge {other}")
            doc.save(path, atomic=atomic)

    if json_output:
        print(json.dumps({"applied": applied}))
        return
    ok(f"Merged {len(applied)} key(s) from {escape(other)}")
    for key in applied:
        console().print(f"    {_theme.tag(_theme.key, escape(key))}")
