"""Grapheme-aware line buffer and edit-mode engine for readline-style editors."""

__all__ = [
    "actions",
    "buffer",
    "editor",
    "keymaps",
    "modes",
    "runtime",
]

__version__ = "0.1.0"
