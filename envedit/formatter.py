"""
envedit/formatter.py
Render logical values as single-line .env values.

Values with whitespace or '#' are double-quoted and escaped so they
survive a save → load cycle; everything else is written verbatim.
"""

from __future__ import annotations

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def needs_quoting(value: str) -> bool:
    """True if *value* contains whitespace or a '#'."""
    return any(ch.isspace() or ch == "#" for ch in value)


def escape(value: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def format_value(value: str) -> str:
    """Format a logical value for the right-hand side of KEY=VALUE.

    ''            → ''
    'plain'       → 'plain'
    'hello world' → '"hello world"'
    'a#b'         → '"a#b"'
    """
    if value == "":
        return ""
    if needs_quoting(value):
        return '"' + escape(value) + '"'
    return value
