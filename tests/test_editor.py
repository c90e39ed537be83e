from __future__ import annotations

from typing import Optional

import pytest

from line_engine.buffer import LineBuffer
from line_engine.editor import (
    EditCommand,
    EditKind,
    Editor,
    RegisterBank,
    RegisterValue,
    UndoTimeline,
)


def make_editor(text: str = "", point: Optional[int] = None) -> Editor:
    editor = Editor.from_text(text)
    if point is not None:
        editor.line_buffer.set_insertion_point(point)
    return editor


def cmd(kind: str, argument: Optional[str] = None) -> EditCommand:
    return EditCommand(EditKind(kind), argument)


def test_apply_returns_snapshot() -> None:
    editor = make_editor()

    snapshot = editor.apply([cmd("insert_string", "hi"), cmd("insert_newline")])

    assert snapshot.text == "hi\n"
    assert snapshot.insertion_point == 3
    assert snapshot.line == 1
    assert editor.line_buffer.is_valid()


def test_apply_accepts_single_command() -> None:
    editor = make_editor("abc")

    editor.apply(cmd("move_to_start"))

    assert editor.line_buffer.insertion_point() == 0


def test_edit_command_validates_arguments() -> None:
    with pytest.raises(ValueError):
        EditCommand(EditKind.INSERT_CHAR)
    with pytest.raises(ValueError):
        EditCommand(EditKind.MOVE_RIGHT_UNTIL, "ab")
    with pytest.raises(ValueError):
        EditCommand(EditKind.MOVE_LEFT, "x")

    coerced = EditCommand("backspace")  # type: ignore[arg-type]
    assert coerced.kind is EditKind.BACKSPACE


def test_cut_word_left_then_paste_restores_text() -> None:
    editor = make_editor("hello world")

    editor.apply(cmd("cut_word_left"))
    assert editor.get_buffer() == "hello "
    assert editor.cut_buffer.get().text == "world"

    editor.apply(cmd("paste_cut_buffer_before"))
    assert editor.get_buffer() == "hello world"
    assert editor.line_buffer.insertion_point() == 11


def test_cut_to_line_end_and_from_line_start() -> None:
    editor = make_editor("one two\nthree", 4)

    editor.apply(cmd("cut_to_line_end"))
    assert editor.get_buffer() == "one \nthree"
    assert editor.cut_buffer.get() == RegisterValue("two")

    editor.apply(cmd("cut_from_line_start"))
    assert editor.get_buffer() == "\nthree"
    assert editor.cut_buffer.get().text == "one "
    assert editor.line_buffer.insertion_point() == 0


def test_cut_from_start_and_to_end() -> None:
    editor = make_editor("abc\ndef", 5)

    editor.apply(cmd("cut_to_end"))
    assert editor.get_buffer() == "abc\nd"
    assert editor.cut_buffer.get().text == "ef"

    editor.apply(cmd("cut_from_start"))
    assert editor.get_buffer() == ""
    assert editor.cut_buffer.get().text == "abc\nd"


def test_empty_cut_keeps_register() -> None:
    editor = make_editor("abc")
    editor.apply(cmd("cut_word_left"))
    assert editor.cut_buffer.get().text == "abc"

    editor.apply(cmd("cut_to_end"))

    assert editor.cut_buffer.get().text == "abc"


def test_cut_current_line_stores_line_register() -> None:
    editor = make_editor("one\ntwo\nthree", 5)

    editor.apply(cmd("cut_current_line"))

    assert editor.get_buffer() == "one\nthree"
    assert editor.line_buffer.insertion_point() == 4
    assert editor.cut_buffer.get() == RegisterValue("two\n", "line")


def test_paste_line_after_current_line() -> None:
    editor = make_editor("a\nb", 0)
    editor.cut_buffer.yank_to('"', "x\n", register_type="line")

    editor.apply(cmd("paste_cut_buffer_after"))

    assert editor.get_buffer() == "a\nx\nb"
    assert editor.line_buffer.insertion_point() == 2


def test_paste_line_after_last_line_adds_terminator() -> None:
    editor = make_editor("a", 0)
    editor.cut_buffer.yank_to('"', "x\n", register_type="line")

    editor.apply(cmd("paste_cut_buffer_after"))

    assert editor.get_buffer() == "a\nx"
    assert editor.line_buffer.insertion_point() == 2


def test_paste_line_before_goes_to_line_start() -> None:
    editor = make_editor("a\nbc", 3)
    editor.cut_buffer.yank_to('"', "x\n", register_type="line")

    editor.apply(cmd("paste_cut_buffer_before"))

    assert editor.get_buffer() == "a\nx\nbc"


def test_paste_characters_after_cursor() -> None:
    editor = make_editor("ac", 0)
    editor.cut_buffer.yank_to('"', "b")

    editor.apply(cmd("paste_cut_buffer_after"))

    assert editor.get_buffer() == "abc"
    assert editor.line_buffer.insertion_point() == 2


def test_paste_with_empty_register_is_noop() -> None:
    editor = make_editor("abc", 1)

    editor.apply([cmd("paste_cut_buffer_after"), cmd("paste_cut_buffer_before")])

    assert editor.get_buffer() == "abc"
    assert len(editor.undo_timeline) == 0


@pytest.mark.parametrize(
    ("kind", "char", "point", "expected_text", "expected_cut"),
    [
        ("cut_right_until", "d", 0, "ef ghi", "abc d"),
        ("cut_right_before", "d", 0, "def ghi", "abc "),
        ("cut_left_until", "b", 5, "aef ghi", "bc d"),
        ("cut_left_before", "a", 10, "ai", "bc def gh"),
    ],
)
def test_character_search_cuts(
    kind: str, char: str, point: int, expected_text: str, expected_cut: str
) -> None:
    editor = make_editor("abc def ghi", point)

    editor.apply(cmd(kind, char))

    assert editor.get_buffer() == expected_text
    assert editor.cut_buffer.get().text == expected_cut
    assert editor.line_buffer.is_valid()


@pytest.mark.parametrize(
    ("text", "point", "char", "expected_text", "expected_cut"),
    [
        ("aé b", 5, "é", "aé", " b"),
        ("a\U0001f60ab", 6, "\U0001f60a", "a\U0001f60a", "b"),
        ("a\u0301x", 4, "a", "a", "\u0301x"),
    ],
)
def test_cut_left_before_multibyte_char(
    text: str, point: int, char: str, expected_text: str, expected_cut: str
) -> None:
    editor = make_editor(text, point)

    editor.apply(cmd("cut_left_before", char))

    assert editor.get_buffer() == expected_text
    assert editor.cut_buffer.get().text == expected_cut
    assert editor.line_buffer.insertion_point() == len(expected_text.encode("utf-8"))
    assert editor.line_buffer.is_valid()


def test_character_search_commands_stay_on_current_line() -> None:
    editor = make_editor("abc\ndef", 0)

    editor.apply([cmd("move_right_until", "f"), cmd("cut_right_until", "f")])

    assert editor.line_buffer.insertion_point() == 0
    assert editor.get_buffer() == "abc\ndef"


def test_search_without_match_changes_nothing() -> None:
    editor = make_editor("abc", 0)

    editor.apply([cmd("move_left_before", "z"), cmd("cut_left_until", "z")])

    assert editor.get_buffer() == "abc"
    assert editor.line_buffer.insertion_point() == 0
    assert len(editor.undo_timeline) == 0


def test_undo_and_redo_restore_snapshots() -> None:
    editor = make_editor()
    editor.apply([cmd("insert_char", "a"), cmd("insert_char", "b")])
    editor.apply(cmd("move_left"))

    assert len(editor.undo_timeline) == 2

    editor.apply(cmd("undo"))
    assert editor.get_buffer() == "a"
    assert editor.line_buffer.insertion_point() == 1

    editor.apply(cmd("redo"))
    assert editor.get_buffer() == "ab"
    assert editor.line_buffer.insertion_point() == 2


def test_new_edit_after_undo_drops_redo_tail() -> None:
    editor = make_editor()
    editor.apply([cmd("insert_char", "a"), cmd("insert_char", "b")])
    editor.apply(cmd("undo"))

    editor.apply(cmd("insert_char", "c"))

    assert editor.redo() is False
    assert editor.get_buffer() == "ac"


def test_undo_without_history_is_noop() -> None:
    editor = make_editor("abc")

    assert editor.undo() is False
    editor.apply(cmd("redo"))

    assert editor.get_buffer() == "abc"


def test_undo_timeline_limit_discards_oldest() -> None:
    editor = Editor(undo=UndoTimeline(limit=2))
    editor.apply([cmd("insert_char", c) for c in "abc"])

    assert editor.undo() and editor.undo()
    assert editor.undo() is False
    assert editor.get_buffer() == "a"


def test_undo_timeline_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        UndoTimeline(limit=0)


def test_reset_replaces_text_and_history() -> None:
    editor = make_editor()
    editor.apply(cmd("insert_string", "draft"))

    editor.reset("fresh")

    assert editor.get_buffer() == "fresh"
    assert not editor.undo_timeline.can_undo()


def test_editor_keeps_given_empty_collaborators() -> None:
    line_buffer = LineBuffer()
    registers = RegisterBank()
    editor = Editor(line_buffer=line_buffer, cut_buffer=registers)

    editor.apply(cmd("insert_char", "x"))

    assert editor.line_buffer is line_buffer
    assert editor.cut_buffer is registers
    assert line_buffer.get_buffer() == "x"


def test_transform_commands() -> None:
    editor = make_editor("hello world", 0)

    editor.apply(
        [cmd("capitalize_char"), cmd("move_word_right"), cmd("uppercase_word")]
    )
    assert editor.get_buffer() == "Hello WORLD"

    editor.apply([cmd("move_to_start"), cmd("swap_words")])
    assert editor.get_buffer() == "WORLD Hello"


def test_named_register_also_fills_unnamed() -> None:
    registers = RegisterBank()

    registers.yank_to("a", "text")

    assert registers.get("a").text == "text"
    assert registers.get().text == "text"
    assert registers.names() == ('"', "a")
    assert registers.get("z") == RegisterValue("")
