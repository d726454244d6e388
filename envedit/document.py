"""
envedit/document.py
Format-preserving .env document — load, edit, diff/merge, save.

The document is an ordered list of line records. Untouched records keep
their original text, so load() followed by preview() reproduces the file
byte-for-byte. set() updates an existing entry in place (keeping its
inline comment) or inserts a new one according to a position policy:

    doc = EnvDocument.from_file(".env")
    doc.set("APP_ENV", "staging")
    doc.after("DB_HOST").spacing(1).set("DB_PORT", "5432")
    doc.top().set("FIRST", "1")
    doc.save()

A document is not thread-safe; callers serialise access to one instance.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, NamedTuple, Optional, Union

from envedit.errors import (
    EnvIOError, NoTargetError, NotFoundError, ParseError, SaveError,
)
from envedit.formatter import format_value
from envedit.parser import is_valid_key, parse, read_env_file, to_mapping
from envedit.records import Entry, LineRecord, blank

logger = logging.getLogger(__name__)

TOP = "top"
BOTTOM = "bottom"


# ── Position policy ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class Position:
    """Where set() inserts a new entry.

    Priority: after > before > where ("top" / "bottom").
    """
    where: str = BOTTOM
    after: Optional[str] = None
    before: Optional[str] = None

    @classmethod
    def coerce(cls, value: Union["Position", str, Mapping, None]) -> "Position":
        if isinstance(value, Position):
            return value
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(where=value)
        return cls(after=value.get("after"), before=value.get("before"))


@dataclass(frozen=True)
class Placement:
    """Fluent insertion builder, consumed by its own set().

    Returned by EnvDocument.after()/before()/top()/bottom()/spacing(); it
    never touches the document until set() is called, so a placement
    cannot leak into a later, unrelated set().
    """
    document: "EnvDocument"
    position: Position = field(default_factory=Position)
    lines: int = 0

    def after(self, key: str) -> "Placement":
        return replace(self, position=Position(after=key))

    def before(self, key: str) -> "Placement":
        return replace(self, position=Position(before=key))

    def top(self) -> "Placement":
        return replace(self, position=Position(where=TOP))

    def bottom(self) -> "Placement":
        return replace(self, position=Position(where=BOTTOM))

    def spacing(self, lines: int) -> "Placement":
        return replace(self, lines=lines)

    def set(self, key: str, value: str) -> None:
        self.document.set(key, value, position=self.position, spacing=self.lines)


# ── Diff result ───────────────────────────────────────────────────────────

class ValueChange(NamedTuple):
    current: str
    other: str


@dataclass
class DiffResult:
    missing_in_current: dict[str, str] = field(default_factory=dict)
    extra_in_current: dict[str, str] = field(default_factory=dict)
    changed: dict[str, ValueChange] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.missing_in_current or self.extra_in_current
                    or self.changed)

    def to_dict(self) -> dict:
        return {
            "missing_in_current": dict(self.missing_in_current),
            "extra_in_current": dict(self.extra_in_current),
            "changed": {k: c._asdict() for k, c in self.changed.items()},
        }


def diff_mappings(current: Mapping[str, str],
                  other: Mapping[str, str]) -> DiffResult:
    result = DiffResult()
    for key, value in other.items():
        if key not in current:
            result.missing_in_current[key] = value
        elif current[key] != value:
            result.changed[key] = ValueChange(current=current[key], other=value)
    for key, value in current.items():
        if key not in other:
            result.extra_in_current[key] = value
    return result


# ── Document ──────────────────────────────────────────────────────────────

class EnvDocument:
    """Ordered, mutable view of one .env file."""

    def __init__(self, records: Optional[Iterable[LineRecord]] = None,
                 path: Optional[str] = None):
        self._records: list[LineRecord] = list(records or [])
        self._path: Optional[str] = path

    @classmethod
    def from_file(cls, path: str) -> "EnvDocument":
        doc = cls()
        doc.load(path)
        return doc

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def records(self) -> tuple[LineRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    # ── Loading ───────────────────────────────────────────────────────

    def load(self, path: str) -> None:
        """Parse *path* and replace the current records with its contents.

        Raises NotFoundError, EnvIOError or ParseError; on failure the
        document is left as it was.
        """
        records = parse(read_env_file(path))
        self._records = records
        self._path = path
        logger.info("Loaded %s (%d entries)", path, len(self.keys()))

    # ── Lookup ────────────────────────────────────────────────────────

    def _entries(self) -> Iterable[Entry]:
        return (r for r in self._records if isinstance(r, Entry))

    def has(self, key: str) -> bool:
        return any(e.key == key for e in self._entries())

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for entry in self._entries():
            if entry.key == key:
                return entry.value
        return default

    def keys(self) -> list[str]:
        return [e.key for e in self._entries()]

    def missing_keys(self, keys: Iterable[str]) -> list[str]:
        """Keys from *keys* (in the given order) with no entry."""
        present = set(self.keys())
        return [k for k in keys if k not in present]

    def to_dict(self) -> dict[str, str]:
        return to_mapping(self._records)

    # ── Fluent positioning ────────────────────────────────────────────

    def after(self, key: str) -> Placement:
        return Placement(self).after(key)

    def before(self, key: str) -> Placement:
        return Placement(self).before(key)

    def top(self) -> Placement:
        return Placement(self).top()

    def bottom(self) -> Placement:
        return Placement(self).bottom()

    def spacing(self, lines: int) -> Placement:
        return Placement(self).spacing(lines)

    # ── Mutation ──────────────────────────────────────────────────────

    def set(self, key: str, value: str,
            position: Union[Position, str, Mapping, None] = BOTTOM,
            spacing: int = 0) -> None:
        """Update *key* in place, or insert it at *position*.

        Updates keep the entry's inline comment and ignore position and
        spacing. Inserts are preceded by *spacing* blank lines.
        """
        if not is_valid_key(key):
            raise ParseError(f"Invalid .env key: {key}", key=key)
        formatted = format_value(value)

        updated = False
        for entry in self._entries():
            if entry.key == key:
                rendered = formatted
                if not rendered and entry.inline_comment:
                    # bare 'KEY= # c' would read back '# c' as the value
                    rendered = '""'
                entry.value = value
                entry.raw = f"{key}={rendered}{entry.inline_comment}"
                updated = True
        if updated:
            logger.debug("Updated %s in place", key)
            return

        index = self._resolve_index(Position.coerce(position))
        new_records: list[LineRecord] = [blank() for _ in range(max(spacing, 0))]
        new_records.append(Entry(key=key, value=value, raw=f"{key}={formatted}"))
        self._records[index:index] = new_records
        logger.debug("Inserted %s at line %d (+%d blank)", key, index, spacing)

    def remove(self, key: str) -> "EnvDocument":
        """Drop every entry for *key*; comments and blank lines stay."""
        self._records = [r for r in self._records
                         if not (isinstance(r, Entry) and r.key == key)]
        return self

    def import_values(self, values: Mapping[str, object]) -> None:
        """set() each pair with the default policy (update or append)."""
        for key, value in values.items():
            self.set(key, "" if value is None else str(value))

    def merge(self, other_file: str, override_existing: bool = False) -> list[str]:
        """Copy entries from *other_file* into this document.

        Existing keys are kept unless *override_existing*. The other file is
        read and parsed before anything is applied; there is no rollback if
        a later set() fails. Returns the keys that were set.
        """
        other = parse(read_env_file(other_file))
        applied = []
        for record in other:
            if not isinstance(record, Entry):
                continue
            if not override_existing and self.has(record.key):
                continue
            self.set(record.key, record.value)
            applied.append(record.key)
        logger.info("Merged %d keys from %s", len(applied), other_file)
        return applied

    def diff(self, other_file: str) -> DiffResult:
        other = to_mapping(parse(read_env_file(other_file)))
        return diff_mappings(self.to_dict(), other)

    def _resolve_index(self, position: Position) -> int:
        if position.after is not None:
            index = len(self._records)
            for i, record in enumerate(self._records):
                if isinstance(record, Entry) and record.key == position.after:
                    index = i + 1
            return index
        if position.before is not None:
            for i, record in enumerate(self._records):
                if isinstance(record, Entry) and record.key == position.before:
                    return i
            return len(self._records)
        if position.where == TOP:
            return 0
        return len(self._records)

    # ── Output ────────────────────────────────────────────────────────

    def preview(self) -> str:
        return "\n".join(r.raw for r in self._records)

    def save(self, path: Optional[str] = None, atomic: bool = True) -> None:
        """Write the document to *path* (default: the loaded path).

        Atomic mode writes a temp file beside the target, fsyncs it and
        renames it over the target, so readers never see a partial file.
        """
        target = path or self._path
        if not target:
            raise NoTargetError("No target filepath set for save().")
        output = self.preview()

        if not atomic:
            try:
                with open(target, "w", encoding="utf-8", newline="") as f:
                    f.write(output)
            except OSError as e:
                raise SaveError(f"Failed to write {target}: {e}") from e
            logger.info("Saved %s", target)
            return

        directory = os.path.dirname(os.path.abspath(target))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix="envtmp_", dir=directory)
        except OSError as e:
            raise SaveError(f"Failed to create temporary file in: {directory}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(output)
                f.flush()
                os.fsync(f.fileno())
            if os.path.exists(target):
                shutil.copymode(target, tmp_path)
            os.replace(tmp_path, target)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.remove(tmp_path)
            raise SaveError(f"Failed to replace {target} atomically: {e}") from e
        logger.info("Saved %s (atomic)", target)

    # ── Backup / restore ──────────────────────────────────────────────

    def _require_path(self) -> str:
        if not self._path:
            raise NoTargetError("No file loaded; call load() first.")
        return self._path

    def backup(self, backup_path: str) -> None:
        """Byte-copy the loaded file to *backup_path*."""
        source = self._require_path()
        if not os.path.isfile(source):
            raise NotFoundError(f"File not found: {source}")
        try:
            shutil.copyfile(source, backup_path)
        except OSError as e:
            raise EnvIOError(f"Failed to backup to {backup_path}: {e}") from e
        logger.info("Backed up %s → %s", source, backup_path)

    def restore(self, backup_path: str) -> None:
        """Copy *backup_path* over the loaded file and reload it."""
        target = self._require_path()
        if not os.path.isfile(backup_path):
            raise NotFoundError(f"Backup not found: {backup_path}")
        try:
            shutil.copyfile(backup_path, target)
        except OSError as e:
            raise EnvIOError(f"Failed to restore from {backup_path}: {e}") from e
        logger.info("Restored %s ← %s", target, backup_path)
        self.load(target)
