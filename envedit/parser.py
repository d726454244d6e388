"""
envedit/parser.py
.env parser — raw text → ordered list of line records.

Line-oriented state machine with two states:
  normal     — each physical line is a comment, an assignment or raw text
  multiline  — inside a quoted value whose closing quote has not been seen;
               lines accumulate until one ends in an unescaped quote

Quote/escape detection is done by explicit scanning: a quote is escaped
iff it is preceded by an odd number of backslashes.

Usage:
    from envedit.parser import parse
    records = parse(open(".env").read())
"""

from __future__ import annotations

import logging
import os
import string
from dataclasses import dataclass
from typing import Optional

from envedit.errors import EnvIOError, NotFoundError, ParseError
from envedit.records import Comment, Entry, LineRecord, Raw

logger = logging.getLogger(__name__)

# ASCII whitespace (no unicode spaces)
_WS = " \t\n\r\x0b\x0c"
_KEY_CHARS = frozenset(string.ascii_letters + string.digits + "_.:-")
_QUOTES = ("\"", "'")
_BOM = "\ufeff"

_DOUBLE_QUOTE_ESCAPES = {
    "\"": "\"",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
_SINGLE_QUOTE_ESCAPES = {"'": "'"}


# ── Multi-line accumulator ────────────────────────────────────────────────

@dataclass
class _Multiline:
    key: str
    quote: str
    value: str
    raw: str

    def append(self, line: str):
        self.value += "\n" + line
        self.raw += "\n" + line

    def finish(self) -> Entry:
        value = unquote(self.value.lstrip("\n"), self.quote)
        return Entry(key=self.key, value=value, inline_comment="", raw=self.raw)


@dataclass
class _ValuePart:
    value: str
    comment: str = ""
    quote: Optional[str] = None
    complete: bool = True


# ── Public API ────────────────────────────────────────────────────────────

def parse(contents: str) -> list[LineRecord]:
    """Parse .env text into line records.

    Raises ParseError for an invalid key or an unterminated multi-line value.
    """
    if contents.startswith(_BOM):
        contents = contents[len(_BOM):]
    contents = contents.replace("\r\n", "\n").replace("\r", "\n")

    records: list[LineRecord] = []
    pending: Optional[_Multiline] = None

    for line in contents.split("\n"):
        if pending is not None:
            pending.append(line)
            if ends_with_closing_quote(line, pending.quote):
                records.append(pending.finish())
                pending = None
            continue

        stripped = line.lstrip(_WS)
        if not stripped or stripped.startswith("#"):
            records.append(Comment(line))
            continue

        assignment = split_assignment(line)
        if assignment is None:
            records.append(Raw(line))
            continue

        key, value_part = assignment
        if not is_valid_key(key):
            raise ParseError(f"Invalid .env key: {key}", key=key)

        part = _scan_value(value_part)
        if part.complete:
            if part.quote is not None:
                value = unquote(part.value, part.quote)
            else:
                value = part.value
            records.append(Entry(key=key, value=value,
                                 inline_comment=part.comment, raw=line))
        else:
            logger.debug("Multi-line value opened for %s", key)
            pending = _Multiline(key=key, quote=part.quote,
                                 value=part.value, raw=line)

    if pending is not None:
        raise ParseError(
            f"Unterminated multiline value for key {pending.key}",
            key=pending.key)

    logger.debug("Parsed %d line records", len(records))
    return records


def read_env_file(path: str) -> str:
    """Read a .env file as text (line endings untouched)."""
    if not os.path.isfile(path):
        raise NotFoundError(f"File not found: {path}")
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise EnvIOError(f"Unable to read file: {path} ({e})") from e


def parse_file(path: str) -> list[LineRecord]:
    return parse(read_env_file(path))


def to_mapping(records: list[LineRecord]) -> dict[str, str]:
    """Key → logical value for every Entry (later duplicates win)."""
    return {r.key: r.value for r in records if isinstance(r, Entry)}


def is_valid_key(key: str) -> bool:
    return bool(key) and all(ch in _KEY_CHARS for ch in key)


# ── Scanning helpers ──────────────────────────────────────────────────────

def _skip_ws(text: str, i: int) -> int:
    while i < len(text) and text[i] in _WS:
        i += 1
    return i


def strip_export(line: str) -> str:
    """Drop a leading, case-insensitive 'export' keyword (plus whitespace)."""
    i = _skip_ws(line, 0)
    word_end = i + len("export")
    if (line[i:word_end].lower() == "export"
            and word_end < len(line) and line[word_end] in _WS):
        return line[_skip_ws(line, word_end):]
    return line


def split_assignment(line: str) -> Optional[tuple[str, str]]:
    """Match 'KEY = ' at the start of *line*.

    Returns (key, value_part) or None when the line is not an assignment.
    The key is the leading run of non-whitespace, non-'=' characters.
    """
    text = strip_export(line)
    i = _skip_ws(text, 0)
    start = i
    while i < len(text) and text[i] not in _WS and text[i] != "=":
        i += 1
    if i == start:
        return None
    key = text[start:i]
    i = _skip_ws(text, i)
    if i >= len(text) or text[i] != "=":
        return None
    i = _skip_ws(text, i + 1)
    return key, text[i:]


def is_escaped(text: str, pos: int) -> bool:
    """True if text[pos] is preceded by an odd number of backslashes."""
    backslashes = 0
    i = pos - 1
    while i >= 0 and text[i] == "\\":
        backslashes += 1
        i -= 1
    return backslashes % 2 == 1


def find_closing_quote(text: str, quote: str, start: int = 1) -> int:
    for i in range(start, len(text)):
        if text[i] == quote and not is_escaped(text, i):
            return i
    return -1


def ends_with_closing_quote(line: str, quote: str) -> bool:
    trimmed = line.rstrip(_WS)
    if not trimmed or trimmed[-1] != quote:
        return False
    return not is_escaped(trimmed, len(trimmed) - 1)


def find_inline_comment(text: str) -> int:
    """Start index of the first 'whitespace run + #' fragment, or -1."""
    for j, ch in enumerate(text):
        if ch == "#" and j > 0 and text[j - 1] in _WS:
            i = j - 1
            while i >= 0 and text[i] in _WS:
                i -= 1
            return i + 1
    return -1


def _scan_value(value_part: str) -> _ValuePart:
    trimmed = value_part.lstrip(_WS)
    if not trimmed:
        return _ValuePart(value="")

    first = trimmed[0]
    if first in _QUOTES:
        close = find_closing_quote(trimmed, first)
        if close < 0:
            return _ValuePart(value=trimmed.rstrip(_WS), quote=first,
                              complete=False)
        rest = trimmed[close + 1:]
        idx = find_inline_comment(rest)
        comment = rest[idx:] if idx >= 0 else ""
        return _ValuePart(value=trimmed[:close + 1], comment=comment,
                          quote=first)

    value = value_part.rstrip(_WS)
    comment = ""
    idx = find_inline_comment(value)
    if idx >= 0:
        comment = value[idx:]
        value = value[:idx].rstrip(_WS)
    return _ValuePart(value=value, comment=comment)


# ── Unquoting ─────────────────────────────────────────────────────────────

def unquote(text: str, quote: str) -> str:
    """Strip one pair of *quote* characters and resolve escapes.

    Double quotes resolve \\" \\n \\r \\t in a single pass; single
    quotes resolve only \\'. Unknown sequences are kept verbatim.
    """
    text = text.lstrip(_WS)
    if not text:
        return text
    if text[0] == quote:
        text = text[1:]
    end = len(text.rstrip(_WS))
    if end > 0 and text[end - 1] == quote:
        text = text[:end - 1]

    table = _DOUBLE_QUOTE_ESCAPES if quote == "\"" else _SINGLE_QUOTE_ESCAPES
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in table:
            out.append(table[text[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)
