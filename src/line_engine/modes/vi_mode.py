"""Vi normal and insert modes."""

from __future__ import annotations

from .base_mode import KeyInput, ModeResult, PromptEditMode
from .keymap_mode import KeymapMode


class ViNormalMode(KeymapMode):
    """Command keys only; unbound printable keys are ignored.

    ``f``, ``t``, ``F`` and ``T`` (alone or after ``d``) wait for the
    character to search for on the current line.
    """

    name = "normal"
    prompt_mode = PromptEditMode.VI_NORMAL
    inserts_text = False

    def handle_unbound(self, key: KeyInput) -> ModeResult:
        if key.key == "esc":
            return ModeResult(consumed=True, status="noop")
        return ModeResult(consumed=False, status="ignored")


class ViInsertMode(KeymapMode):
    name = "insert"
    prompt_mode = PromptEditMode.VI_INSERT
    inserts_text = True


__all__ = ["ViInsertMode", "ViNormalMode"]
