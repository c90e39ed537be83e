"""Editing verbs bound to keys by the default keymaps."""

from .core import (
    append_after_cursor,
    append_at_line_end,
    await_char,
    enter_insert_mode,
    exit_to_normal_mode,
    insert_at_line_start,
    submit_line,
)
from .edit import edit_action

__all__ = [
    "append_after_cursor",
    "append_at_line_end",
    "await_char",
    "edit_action",
    "enter_insert_mode",
    "exit_to_normal_mode",
    "insert_at_line_start",
    "submit_line",
]
