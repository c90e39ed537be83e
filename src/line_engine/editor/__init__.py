"""Edit commands, cut buffer and undo history around a line buffer."""

from .commands import EditCommand, EditKind, takes_argument
from .editor import Editor
from .registers import UNNAMED_REGISTER, RegisterBank, RegisterType, RegisterValue
from .undo import UndoEntry, UndoTimeline

__all__ = [
    "EditCommand",
    "EditKind",
    "Editor",
    "RegisterBank",
    "RegisterType",
    "RegisterValue",
    "UNNAMED_REGISTER",
    "UndoEntry",
    "UndoTimeline",
    "takes_argument",
]
