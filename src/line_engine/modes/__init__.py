"""Edit modes: Emacs, Vi normal and Vi insert.

``ModeManager`` and the ``create_*_manager`` factories live in
``line_engine.modes.mode_manager``.
"""

from .base_mode import (
    KeyInput,
    Mode,
    ModeBus,
    ModeContext,
    ModeResult,
    PromptEditMode,
)
from .emacs_mode import EmacsMode
from .keymap_mode import KeymapMode
from .vi_mode import ViInsertMode, ViNormalMode

__all__ = [
    "EmacsMode",
    "KeyInput",
    "KeymapMode",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeResult",
    "PromptEditMode",
    "ViInsertMode",
    "ViNormalMode",
]
