"""Keyboard input translation."""

from __future__ import annotations

import click

# Raw sequences returned by click.getchar() mapped to key names
_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\xe0H": "up",
    "\xe0P": "down",
    "\xe0M": "right",
    "\xe0K": "left",
    "\x00H": "up",
    "\x00P": "down",
    "\x00M": "right",
    "\x00K": "left",
    "\r": "enter",
    "\n": "enter",
    " ": "space",
    "\x1b": "esc",
    "\x03": "ctrl+c",
    "\x04": "ctrl+c",
}

UP = frozenset({"up", "k"})
DOWN = frozenset({"down", "j"})
DRILL_DOWN = frozenset({"right", "l"})
GO_BACK = frozenset({"left", "h"})
QUIT = frozenset({"q", "ctrl+c"})

HELP_LINES: tuple[tuple[str, str], ...] = (
    ("↑/k ↓/j", "move"),
    ("space", "toggle selection"),
    ("a / n", "select all / none"),
    ("enter", "clean selected items"),
    ("c", "clean only the highlighted item"),
    ("→/l", "explore folder"),
    ("←/h", "go to parent folder"),
    ("r", "refresh folder (tree mode)"),
    ("esc", "leave tree mode"),
    ("?", "toggle this help"),
    ("q", "quit"),
)


def translate(raw: str) -> str:
    """Map a raw getchar() result to a key name."""
    return _SEQUENCES.get(raw, raw)


def read_key() -> str:
    """Block until a key is pressed and return its name."""
    try:
        raw = click.getchar()
    except (KeyboardInterrupt, EOFError):
        return "ctrl+c"
    return translate(raw)
