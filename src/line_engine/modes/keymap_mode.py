"""Keymap-driven mode shared by the Emacs and Vi modes."""

from __future__ import annotations

from typing import List, Optional

from line_engine.editor import EditCommand, EditKind
from line_engine.keymaps import ResolutionMatch
from line_engine.runtime import telemetry

from .base_mode import PENDING_CHAR_KEY, KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import (
    key_to_token,
    keymap_flag_context,
    printable_text,
    require_keymap_resolver,
    update_flag,
)


class KeymapMode(Mode):
    """Resolves keys through the keymap and runs the bound action.

    Keys are collected until the resolver reports a match or a miss. A miss on
    the first key falls through to ``handle_unbound``, which types the key's
    text when ``inserts_text`` is set. A miss after a prefix drops the whole
    sequence.
    """

    inserts_text: bool = True

    def __init__(
        self,
        context: ModeContext,
        *,
        default_pending_timeout_ms: int = 1000,
    ) -> None:
        super().__init__(context)
        self._resolver = require_keymap_resolver(context)
        self._flags = keymap_flag_context(context)
        self._pending: List[str] = []
        self._default_timeout_ms = default_pending_timeout_ms

    @property
    def pending_keys(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        update_flag(self.context, f"{self.name}_active", True)

    def on_exit(self, next_mode: Optional[str]) -> None:
        del next_mode
        self._pending.clear()
        self.context.extras.pop(PENDING_CHAR_KEY, None)
        update_flag(self.context, f"{self.name}_active", False)

    def handle_key(self, key: KeyInput) -> ModeResult:
        if PENDING_CHAR_KEY in self.context.extras:
            return self._complete_char_search(key)

        self._pending.append(key_to_token(key))
        result = self._resolver.resolve(
            self.name, tuple(self._pending), context=self._flags
        )

        if result.status == "match" and result.match:
            self._pending.clear()
            return self._execute_match(result.match)

        if result.status == "pending":
            return ModeResult(
                consumed=True,
                status="pending",
                message="awaiting_sequence",
                timeout_ms=result.timeout_ms or self._default_timeout_ms,
            )

        had_prefix = len(self._pending) > 1
        self._pending.clear()
        if had_prefix:
            return ModeResult(consumed=True, status="miss", message="unknown_sequence")
        return self.handle_unbound(key)

    def handle_unbound(self, key: KeyInput) -> ModeResult:
        text = printable_text(key) if self.inserts_text else None
        if text is None:
            return ModeResult(consumed=False)
        if len(text) == 1:
            command = EditCommand(EditKind.INSERT_CHAR, text)
        else:
            command = EditCommand(EditKind.INSERT_STRING, text)
        self.context.editor.apply(command)
        return ModeResult(consumed=True, message="insert_text")

    def handle_timeout(self) -> ModeResult:
        if not self._pending:
            return ModeResult(consumed=False, status="timeout")

        tokens = tuple(self._pending)
        self._pending.clear()
        result = self._resolver.resolve(self.name, tokens, context=self._flags)
        if result.status == "match" and result.match:
            return self._execute_match(result.match)
        return ModeResult(consumed=False, status="timeout", message="pending_timeout")

    def _complete_char_search(self, key: KeyInput) -> ModeResult:
        kind = EditKind(self.context.extras.pop(PENDING_CHAR_KEY))
        text = printable_text(key)
        if text is None or len(text) != 1:
            return ModeResult(consumed=True, status="cancelled", message=kind.value)
        self.context.editor.apply(EditCommand(kind, text))
        return ModeResult(consumed=True, message=kind.value)

    def _execute_match(self, match: ResolutionMatch) -> ModeResult:
        with telemetry.span(
            "keymaps::execute",
            logger_name="line_engine.modes",
            component="keymaps",
            metadata={"binding_id": match.binding.id, "action": match.action.id},
        ):
            outcome = match.action(self.context, match)

        if isinstance(outcome, ModeResult):
            return outcome
        return ModeResult(consumed=True)


__all__ = ["KeymapMode"]
