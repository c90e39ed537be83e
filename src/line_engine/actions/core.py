"""Mode-level actions shared by the Emacs and Vi keymaps."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from line_engine.editor import EditCommand, EditKind
from line_engine.modes.base_mode import PENDING_CHAR_KEY, ModeContext, ModeResult

if TYPE_CHECKING:
    from line_engine.keymaps import ResolutionMatch

ActionHandler = Callable[[ModeContext, "ResolutionMatch"], ModeResult]


def enter_insert_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to="insert", message="enter_insert")


def append_after_cursor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.editor.apply(EditCommand(EditKind.MOVE_RIGHT))
    return ModeResult(consumed=True, switch_to="insert", message="append")


def insert_at_line_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.editor.apply(EditCommand(EditKind.MOVE_TO_LINE_START))
    return ModeResult(consumed=True, switch_to="insert", message="insert_line_start")


def append_at_line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.editor.apply(EditCommand(EditKind.MOVE_TO_LINE_END))
    return ModeResult(consumed=True, switch_to="insert", message="append_line_end")


def exit_to_normal_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to="normal", message="exit_insert")


def submit_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Hand the finished text to whoever listens for ``line.submit``."""

    del match
    text = context.editor.get_buffer()
    context.bus.emit("line.submit", text)
    return ModeResult(consumed=True, status="submit", message=text)


def await_char(kind: EditKind) -> ActionHandler:
    """Build an action that parks ``kind`` until the next typed character."""

    def handler(context: ModeContext, match: ResolutionMatch) -> ModeResult:
        del match
        context.extras[PENDING_CHAR_KEY] = kind
        return ModeResult(consumed=True, status="pending", message="awaiting_char")

    handler.__name__ = f"await_{kind.value}"
    return handler


__all__ = [
    "append_after_cursor",
    "append_at_line_end",
    "await_char",
    "enter_insert_mode",
    "exit_to_normal_mode",
    "insert_at_line_start",
    "submit_line",
]
