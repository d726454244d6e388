"""
envedit/theme.py
Semantic color theme for CLI output.

Supports:
  - NO_COLOR=1 → disable all colors
  - ENVEDIT_THEME=minimal → alternative theme

Usage:
    from envedit.theme import theme
    console.print(f"[{theme.key}]APP_ENV[/{theme.key}]")
"""

from __future__ import annotations

import os

from questionary import Style


class Theme:
    """Semantic color definitions for consistent CLI appearance."""

    def __init__(self):
        self._no_color = bool(os.environ.get("NO_COLOR"))
        self._theme_name = os.environ.get("ENVEDIT_THEME", "default")

        if self._no_color:
            self._apply_no_color()
        elif self._theme_name == "minimal":
            self._apply_minimal()
        else:
            self._apply_default()

    def _apply_default(self):
        self.key = "bold cyan"
        self.value = "green"
        self.comment = "dim"
        self.success = "green"
        self.warning = "yellow"
        self.error = "red"
        self.muted = "dim"
        self.added = "green"
        self.removed = "red"
        self.changed = "yellow"
        self.heading = "bold"
        # Questionary style
        self.qmark = "fg:#4dd0e1 bold"
        self.question = "bold"
        self.answer = "fg:#81c784 bold"

    def _apply_minimal(self):
        self.key = "bold"
        self.value = ""
        self.comment = "dim"
        self.success = "green"
        self.warning = "yellow"
        self.error = "red"
        self.muted = "dim"
        self.added = ""
        self.removed = ""
        self.changed = ""
        self.heading = "bold"
        self.qmark = "bold"
        self.question = "bold"
        self.answer = "bold"

    def _apply_no_color(self):
        for attr in ("key", "value", "comment", "success", "warning", "error",
                     "muted", "added", "removed", "changed", "heading",
                     "qmark", "question", "answer"):
            setattr(self, attr, "")

    def questionary_style(self) -> Style:
        return Style([
            ("qmark", self.qmark),
            ("question", self.question),
            ("answer", self.answer),
        ])

    def tag(self, style: str, text: str) -> str:
        """Wrap *text* in rich markup for *style* (no-op for empty styles)."""
        if not style:
            return text
        return f"[{style}]{text}[/{style}]"


# Singleton instance
theme = Theme()
