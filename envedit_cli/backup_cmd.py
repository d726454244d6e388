"""Backup management: backup / restore / history / rollback."""
from __future__ import annotations

import json
import time

from rich.markup import escape
from rich.table import Table

from envedit import snapshots
from envedit.document import EnvDocument
from envedit.theme import theme as _theme
from envedit_cli.helpers import console, locked, ok, open_document, warn


def cmd_backup(path: str, dest: str):
    """Handle `envedit backup DEST` — exact byte copy of the file."""
    doc = open_document(path)
    doc.backup(dest)
    ok(f"Backed up {escape(path)} → {escape(dest)}")


def cmd_restore(path: str, source: str):
    """Handle `envedit restore SOURCE` — snapshot, copy back, re-parse."""
    with locked(path):
        snapshots.snapshot(path, reason=f"pre-restore from {source}")
        doc = EnvDocument(path=path)
        doc.restore(source)
    ok(f"Restored {escape(path)} from {escape(source)} ({len(doc.keys())} keys)")


def cmd_history(path: str, json_output: bool = False):
    """Handle `envedit history` — list snapshots, newest last."""
    entries = snapshots.history(path)

    if json_output:
        print(json.dumps(entries, indent=2))
        return

    if not entries:
        warn(f"No snapshots for {escape(path)}")
        return

    table = Table(show_header=True, header_style=_theme.heading, box=None)
    table.add_column("#", justify="right", style=_theme.muted or None)
    table.add_column("When")
    table.add_column("Snapshot")
    table.add_column("Reason", style=_theme.comment or None)
    total = len(entries)
    for i, entry in enumerate(entries):
        when = time.strftime("%Y-%m-%d %H:%M:%S",
                             time.localtime(entry.get("timestamp", 0)))
        table.add_row(str(i - total), when, escape(entry.get("file", "")),
                      escape(entry.get("reason", "")))
    console().print(table)


def cmd_rollback(path: str, version: int = -1):
    """Handle `envedit rollback [--version N]`."""
    with locked(path):
        name = snapshots.rollback(path, version=version)
    ok(f"Rolled back {escape(path)} → {escape(name)}")
