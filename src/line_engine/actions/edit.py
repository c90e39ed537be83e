"""Actions that forward to the editor as edit commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from line_engine.editor import EditCommand, EditKind
from line_engine.modes.base_mode import ModeContext, ModeResult

from .core import ActionHandler

if TYPE_CHECKING:
    from line_engine.keymaps import ResolutionMatch


def edit_action(*kinds: EditKind, switch_to: Optional[str] = None) -> ActionHandler:
    """Build an action applying ``kinds`` (argument-free) as one editor batch."""

    if not kinds:
        raise ValueError("edit_action requires at least one edit kind")
    commands = tuple(EditCommand(kind) for kind in kinds)
    label = "+".join(command.label for command in commands)

    def handler(context: ModeContext, match: ResolutionMatch) -> ModeResult:
        del match
        context.editor.apply(commands)
        return ModeResult(consumed=True, switch_to=switch_to, message=label)

    handler.__name__ = f"edit_{label.replace('+', '_')}"
    return handler


__all__ = ["edit_action"]
