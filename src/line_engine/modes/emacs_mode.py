"""Emacs-style editing: one mode, every printable key types."""

from __future__ import annotations

from .base_mode import PromptEditMode
from .keymap_mode import KeymapMode


class EmacsMode(KeymapMode):
    name = "emacs"
    prompt_mode = PromptEditMode.EMACS
    inserts_text = True


__all__ = ["EmacsMode"]
