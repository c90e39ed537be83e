"""Edit commands understood by the editor.

Edit modes translate key presses into sequences of these commands; the
editor maps each one onto line buffer operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EditKind(str, Enum):
    MOVE_TO_START = "move_to_start"
    MOVE_TO_LINE_START = "move_to_line_start"
    MOVE_TO_END = "move_to_end"
    MOVE_TO_LINE_END = "move_to_line_end"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    MOVE_WORD_LEFT = "move_word_left"
    MOVE_WORD_RIGHT = "move_word_right"
    MOVE_LINE_UP = "move_line_up"
    MOVE_LINE_DOWN = "move_line_down"
    INSERT_CHAR = "insert_char"
    INSERT_STRING = "insert_string"
    INSERT_NEWLINE = "insert_newline"
    BACKSPACE = "backspace"
    DELETE = "delete"
    BACKSPACE_WORD = "backspace_word"
    DELETE_WORD = "delete_word"
    CLEAR = "clear"
    CLEAR_TO_LINE_END = "clear_to_line_end"
    CUT_CURRENT_LINE = "cut_current_line"
    CUT_FROM_START = "cut_from_start"
    CUT_FROM_LINE_START = "cut_from_line_start"
    CUT_TO_END = "cut_to_end"
    CUT_TO_LINE_END = "cut_to_line_end"
    CUT_WORD_LEFT = "cut_word_left"
    CUT_WORD_RIGHT = "cut_word_right"
    PASTE_CUT_BUFFER_BEFORE = "paste_cut_buffer_before"
    PASTE_CUT_BUFFER_AFTER = "paste_cut_buffer_after"
    UPPERCASE_WORD = "uppercase_word"
    LOWERCASE_WORD = "lowercase_word"
    CAPITALIZE_CHAR = "capitalize_char"
    SWAP_WORDS = "swap_words"
    SWAP_GRAPHEMES = "swap_graphemes"
    UNDO = "undo"
    REDO = "redo"
    MOVE_RIGHT_UNTIL = "move_right_until"
    MOVE_RIGHT_BEFORE = "move_right_before"
    MOVE_LEFT_UNTIL = "move_left_until"
    MOVE_LEFT_BEFORE = "move_left_before"
    CUT_RIGHT_UNTIL = "cut_right_until"
    CUT_RIGHT_BEFORE = "cut_right_before"
    CUT_LEFT_UNTIL = "cut_left_until"
    CUT_LEFT_BEFORE = "cut_left_before"


CHAR_ARGUMENT_KINDS = frozenset(
    {
        EditKind.INSERT_CHAR,
        EditKind.MOVE_RIGHT_UNTIL,
        EditKind.MOVE_RIGHT_BEFORE,
        EditKind.MOVE_LEFT_UNTIL,
        EditKind.MOVE_LEFT_BEFORE,
        EditKind.CUT_RIGHT_UNTIL,
        EditKind.CUT_RIGHT_BEFORE,
        EditKind.CUT_LEFT_UNTIL,
        EditKind.CUT_LEFT_BEFORE,
    }
)
TEXT_ARGUMENT_KINDS = frozenset({EditKind.INSERT_STRING})


@dataclass(frozen=True, slots=True)
class EditCommand:
    """One editing step, with the character or text it needs (if any)."""

    kind: EditKind
    argument: Optional[str] = None

    def __post_init__(self) -> None:
        kind = EditKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if kind in CHAR_ARGUMENT_KINDS:
            if self.argument is None or len(self.argument) != 1:
                raise ValueError(f"{kind.value} requires a single character")
        elif kind in TEXT_ARGUMENT_KINDS:
            if self.argument is None:
                raise ValueError(f"{kind.value} requires text")
        elif self.argument is not None:
            raise ValueError(f"{kind.value} takes no argument")

    @property
    def label(self) -> str:
        if self.argument is None:
            return self.kind.value
        return f"{self.kind.value}({self.argument!r})"


def takes_argument(kind: EditKind) -> bool:
    return kind in CHAR_ARGUMENT_KINDS or kind in TEXT_ARGUMENT_KINDS


__all__ = [
    "CHAR_ARGUMENT_KINDS",
    "TEXT_ARGUMENT_KINDS",
    "EditCommand",
    "EditKind",
    "takes_argument",
]
