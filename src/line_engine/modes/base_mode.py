"""Base classes and shared types for edit modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from line_engine.editor import Editor, RegisterBank
from line_engine.keymaps import KeyStroke

# extras key holding the EditKind a character search is waiting to complete
PENDING_CHAR_KEY = "pending_char_command"


class PromptEditMode(str, Enum):
    """What a prompt should show as the edit mode indicator."""

    DEFAULT = "default"
    EMACS = "emacs"
    VI_NORMAL = "vi_normal"
    VI_INSERT = "vi_insert"


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to modes.

    ``key`` is either a single character or a lower-case key name such as
    ``"enter"``; ``text`` is what the key would type, if anything.
    """

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None

    @classmethod
    def char(cls, text: str) -> "KeyInput":
        return cls(key=text, text=text)

    @classmethod
    def parse(cls, token: str) -> "KeyInput":
        """``"x"`` types an x; ``"ctrl+w"`` or ``"enter"`` types nothing."""

        stroke = KeyStroke.parse(token)
        typed = stroke.key if len(stroke.key) == 1 and not stroke.modifiers else None
        return cls(key=stroke.key, modifiers=stroke.modifiers, text=typed)


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``."""

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None
    timeout_ms: Optional[int] = None


class ModeBus:
    """Minimal event bus letting modes publish signals such as ``line.submit``."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


@dataclass(slots=True)
class ModeContext:
    """Services shared by every mode; ``registers`` defaults to the editor's cut buffer."""

    editor: Editor
    registers: Optional[RegisterBank] = None
    bus: ModeBus = field(default_factory=ModeBus)
    extras: Dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.registers is None:
            self.registers = self.editor.cut_buffer


class Mode:
    """Base class all concrete edit modes inherit from."""

    name: str = "mode"
    prompt_mode: PromptEditMode = PromptEditMode.DEFAULT

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    def on_enter(self, previous: Optional[str]) -> None:  # pragma: no cover - default no-op
        del previous

    def on_exit(self, next_mode: Optional[str]) -> None:  # pragma: no cover - default no-op
        del next_mode

    def handle_key(self, key: KeyInput) -> ModeResult:  # pragma: no cover - abstract
        raise NotImplementedError

    def handle_timeout(self) -> ModeResult:
        """Invoked by the manager when a pending key sequence expires."""

        return ModeResult(consumed=False, status="timeout")


__all__ = [
    "KeyInput",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeResult",
    "PENDING_CHAR_KEY",
    "PromptEditMode",
]
