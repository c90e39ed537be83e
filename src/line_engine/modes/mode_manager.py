"""Mode manager dispatching key events to the active edit mode."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Type

from line_engine.editor import Editor
from line_engine.keymaps import KeymapRegistry, KeymapResolver
from line_engine.keymaps.defaults import load_default_keymaps
from line_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult, PromptEditMode
from .emacs_mode import EmacsMode
from .vi_mode import ViInsertMode, ViNormalMode

LOGGER_NAME = "line_engine.modes"


@dataclass
class PendingTimeout:
    deadline: float
    timeout_ms: int
    generation: int


class ModeManager:
    """Owns the registered modes, switches between them and arms key timeouts."""

    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        load_defaults: bool = True,
    ) -> None:
        self.context = context
        self._modes: Dict[str, Mode] = {}
        self._active: Optional[str] = None
        if keymap_registry is None:
            keymap_registry = KeymapRegistry()
            if load_defaults:
                load_default_keymaps(keymap_registry)
        self.keymap_registry = keymap_registry
        self.keymap_resolver = keymap_resolver or KeymapResolver(self.keymap_registry)
        self.context.extras.setdefault("keymap_registry", self.keymap_registry)
        self.context.extras.setdefault("keymap_resolver", self.keymap_resolver)
        self.context.extras.setdefault("keymap_flags", {})
        self.context.extras.setdefault("mode_manager", self)
        self._pending_timeouts: Dict[str, PendingTimeout] = {}
        self._timer_counter = 0

    @property
    def editor(self) -> Editor:
        return self.context.editor

    @property
    def active_mode(self) -> Optional[Mode]:
        if self._active is None:
            return None
        return self._modes.get(self._active)

    @property
    def prompt_mode(self) -> PromptEditMode:
        mode = self.active_mode
        return mode.prompt_mode if mode is not None else PromptEditMode.DEFAULT

    def register_mode(
        self,
        mode_cls: Type[Mode],
        /,
        *mode_args: object,
        **mode_kwargs: object,
    ) -> Mode:
        """Instantiate and register a mode; the first one registered becomes active."""

        mode = mode_cls(self.context, *mode_args, **mode_kwargs)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.name] = mode
        if self._active is None:
            self._active = mode.name
            mode.on_enter(None)
        return mode

    def switch_mode(self, name: str) -> None:
        if name not in self._modes:
            raise KeyError(f"Unknown mode '{name}'")
        previous = self.active_mode
        if previous is not None and previous.name == name:
            return
        if previous is not None:
            self.cancel_timeout(previous.name)
            previous.on_exit(name)
        self._active = name
        self._modes[name].on_enter(previous.name if previous else None)
        telemetry.record_event(
            "mode.switch",
            level="debug",
            data={"from": previous.name if previous else None, "to": name},
            logger_name=LOGGER_NAME,
        )

    def handle_key(self, key: KeyInput) -> ModeResult:
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        with telemetry.span(
            f"mode::{mode.name}",
            logger_name=LOGGER_NAME,
            component=True,
            metadata={"key": key.key, "mode": mode.name},
        ):
            result = mode.handle_key(key)
        return self._after_mode_result(mode, result)

    def feed(self, keys: Iterable[KeyInput | str]) -> List[ModeResult]:
        """Handle several keys; strings are parsed with ``KeyInput.parse``."""

        return [
            self.handle_key(key if isinstance(key, KeyInput) else KeyInput.parse(key))
            for key in keys
        ]

    def _after_mode_result(self, mode: Mode, result: ModeResult) -> ModeResult:
        if result.timeout_ms:
            self.arm_timeout(mode.name, result.timeout_ms)
        else:
            self.cancel_timeout(mode.name)
        if result.switch_to:
            self.switch_mode(result.switch_to)
        return result

    def arm_timeout(self, mode_name: str, timeout_ms: int) -> None:
        self._timer_counter += 1
        self._pending_timeouts[mode_name] = PendingTimeout(
            deadline=time.monotonic() + timeout_ms / 1000.0,
            timeout_ms=timeout_ms,
            generation=self._timer_counter,
        )

    def cancel_timeout(self, mode_name: str) -> None:
        self._pending_timeouts.pop(mode_name, None)

    def has_pending_timeout(self, mode_name: Optional[str] = None) -> bool:
        if mode_name is None:
            return bool(self._pending_timeouts)
        return mode_name in self._pending_timeouts

    def process_timeouts(self) -> Dict[str, ModeResult]:
        """Fire every timeout whose deadline has passed."""

        now = time.monotonic()
        expired = [
            (mode_name, timer.generation)
            for mode_name, timer in self._pending_timeouts.items()
            if timer.deadline <= now
        ]
        return {
            mode_name: self._trigger_timeout(mode_name, generation)
            for mode_name, generation in expired
        }

    def force_timeout(self, mode_name: Optional[str] = None) -> Dict[str, ModeResult]:
        if mode_name is not None:
            names = [mode_name] if mode_name in self._pending_timeouts else []
        else:
            names = list(self._pending_timeouts)
        return {
            name: self._trigger_timeout(name, self._pending_timeouts[name].generation)
            for name in names
        }

    def _trigger_timeout(self, mode_name: str, generation: int) -> ModeResult:
        timer = self._pending_timeouts.get(mode_name)
        if timer is None or timer.generation != generation:
            return ModeResult(consumed=False, status="timeout")
        del self._pending_timeouts[mode_name]
        mode = self._modes.get(mode_name)
        if mode is None:
            return ModeResult(consumed=False, status="timeout")
        with telemetry.span(
            f"mode_timeout::{mode_name}",
            logger_name=LOGGER_NAME,
            component=True,
            metadata={"mode": mode_name},
        ):
            result = mode.handle_timeout()
        return self._after_mode_result(mode, result)


def _context_for(editor: Optional[Editor], context: Optional[ModeContext]) -> ModeContext:
    if context is not None:
        return context
    return ModeContext(editor=editor if editor is not None else Editor())


def create_emacs_manager(
    editor: Optional[Editor] = None,
    *,
    context: Optional[ModeContext] = None,
    keymap_registry: KeymapRegistry | None = None,
    default_pending_timeout_ms: int = 1000,
) -> ModeManager:
    """Manager with a single Emacs mode over ``editor`` (a fresh one by default)."""

    manager = ModeManager(_context_for(editor, context), keymap_registry=keymap_registry)
    manager.register_mode(
        EmacsMode, default_pending_timeout_ms=default_pending_timeout_ms
    )
    return manager


def create_vi_manager(
    editor: Optional[Editor] = None,
    *,
    context: Optional[ModeContext] = None,
    keymap_registry: KeymapRegistry | None = None,
    default_pending_timeout_ms: int = 1000,
) -> ModeManager:
    """Manager with Vi insert (active first) and Vi normal modes."""

    manager = ModeManager(_context_for(editor, context), keymap_registry=keymap_registry)
    manager.register_mode(
        ViInsertMode, default_pending_timeout_ms=default_pending_timeout_ms
    )
    manager.register_mode(
        ViNormalMode, default_pending_timeout_ms=default_pending_timeout_ms
    )
    return manager


__all__ = [
    "ModeManager",
    "PendingTimeout",
    "create_emacs_manager",
    "create_vi_manager",
]
