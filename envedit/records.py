"""
envedit/records.py
Line records — the atomic units of a parsed .env document.

A document is an ordered list of these three variants. Each keeps the
verbatim source text in ``raw`` so an untouched document re-renders
byte-for-byte.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass
class Comment:
    """Blank line or a line whose first non-whitespace char is '#'."""
    raw: str = ""


@dataclass
class Raw:
    """Unrecognised line, preserved verbatim and never interpreted."""
    raw: str


@dataclass
class Entry:
    """Parsed KEY=VALUE assignment.

    value          — logical value (unquoted, unescaped; may contain newlines)
    inline_comment — trailing '# ...' fragment including its leading whitespace
    raw            — original source text, replaced when the entry is updated
    """
    key: str
    value: str
    inline_comment: str = ""
    raw: str = ""


LineRecord = Union[Comment, Raw, Entry]


def blank() -> Comment:
    return Comment("")
