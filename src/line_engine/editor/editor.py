"""Editor façade combining the line buffer, cut buffer and undo history."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Union

from line_engine.buffer import BufferSnapshot, LineBuffer, utf8_len
from line_engine.runtime import telemetry

from .commands import EditCommand, EditKind
from .registers import UNNAMED_REGISTER, RegisterBank, RegisterType
from .undo import UndoEntry, UndoTimeline

LOGGER_NAME = "line_engine.editor"

Handler = Callable[["Editor", Optional[str]], None]


class Editor:
    """Applies edit commands to one line buffer.

    Every command that changes the text records an undo entry holding the
    buffer snapshots from before and after it. Cut commands copy the removed
    text into the unnamed register of ``cut_buffer`` first.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        line_buffer: Optional[LineBuffer] = None,
        cut_buffer: Optional[RegisterBank] = None,
        undo: Optional[UndoTimeline] = None,
    ) -> None:
        self.name = name
        self.line_buffer = line_buffer if line_buffer is not None else LineBuffer()
        self.cut_buffer = cut_buffer if cut_buffer is not None else RegisterBank()
        self.undo_timeline = undo if undo is not None else UndoTimeline()

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Editor":
        return cls(name=name, line_buffer=LineBuffer.from_text(text))

    def snapshot(self) -> BufferSnapshot:
        return self.line_buffer.snapshot()

    def get_buffer(self) -> str:
        return self.line_buffer.get_buffer()

    def reset(self, text: str = "") -> None:
        """Start a new session: replace the text and forget the undo history."""

        self.line_buffer.set_buffer(text)
        self.undo_timeline.clear()

    def apply(
        self, commands: Union[EditCommand, Iterable[EditCommand]]
    ) -> BufferSnapshot:
        batch = (commands,) if isinstance(commands, EditCommand) else tuple(commands)
        with telemetry.span(
            "editor::apply",
            logger_name=LOGGER_NAME,
            component="editor",
            metadata={
                "editor": self.name,
                "commands": ",".join(command.kind.value for command in batch),
            },
        ) as handle:
            for command in batch:
                self._run(command)
            snapshot = self.line_buffer.snapshot()
            handle.add_metadata("insertion_point", snapshot.insertion_point)
            return snapshot

    def _run(self, command: EditCommand) -> None:
        if command.kind is EditKind.UNDO:
            self.undo()
            return
        if command.kind is EditKind.REDO:
            self.redo()
            return

        before = self.line_buffer.snapshot()
        _HANDLERS[command.kind](self, command.argument)
        if self.line_buffer.get_buffer() != before.text:
            self.undo_timeline.push(
                UndoEntry(
                    label=command.label,
                    before=before,
                    after=self.line_buffer.snapshot(),
                )
            )

    def undo(self) -> bool:
        entry = self.undo_timeline.undo()
        if entry is None:
            return False
        self.line_buffer.restore(entry.before)
        telemetry.record_event(
            "editor.undo", level="debug", data={"label": entry.label}, logger_name=LOGGER_NAME
        )
        return True

    def redo(self) -> bool:
        entry = self.undo_timeline.redo()
        if entry is None:
            return False
        self.line_buffer.restore(entry.after)
        telemetry.record_event(
            "editor.redo", level="debug", data={"label": entry.label}, logger_name=LOGGER_NAME
        )
        return True

    # -- cut buffer --------------------------------------------------------

    def _cut(self, start: int, end: int, register_type: RegisterType = "character") -> None:
        if start >= end:
            return
        text = self.line_buffer.get_text_range(start, end)
        self.cut_buffer.yank_to(UNNAMED_REGISTER, text, register_type=register_type)

    def cut_current_line(self) -> None:
        buffer = self.line_buffer
        start, end = buffer.current_line_range()
        if start == end:
            return
        self._cut(start, end, "line")
        buffer.clear_range(start, end)
        buffer.set_insertion_point(start)

    def cut_from_start(self) -> None:
        buffer = self.line_buffer
        if buffer.insertion_point() > 0:
            self._cut(0, buffer.insertion_point())
            buffer.clear_to_insertion_point()

    def cut_from_line_start(self) -> None:
        buffer = self.line_buffer
        end = buffer.insertion_point()
        buffer.move_to_line_start()
        start = buffer.insertion_point()
        self._cut(start, end)
        buffer.clear_range(start, end)

    def cut_to_end(self) -> None:
        buffer = self.line_buffer
        self._cut(buffer.insertion_point(), len(buffer))
        buffer.clear_to_end()

    def cut_to_line_end(self) -> None:
        buffer = self.line_buffer
        self._cut(buffer.insertion_point(), buffer.find_current_line_end())
        buffer.clear_to_line_end()

    def cut_word_left(self) -> None:
        buffer = self.line_buffer
        start = buffer.word_left_index()
        self._cut(start, buffer.insertion_point())
        buffer.delete_word_left()

    def cut_word_right(self) -> None:
        buffer = self.line_buffer
        self._cut(buffer.insertion_point(), buffer.word_right_index())
        buffer.delete_word_right()

    def cut_right_until(self, c: str) -> None:
        buffer = self.line_buffer
        index = buffer.find_char_right(c, True)
        if index is not None:
            self._cut(buffer.insertion_point(), index + utf8_len(c))
            buffer.delete_right_until_char(c, True)

    def cut_right_before(self, c: str) -> None:
        buffer = self.line_buffer
        index = buffer.find_char_right(c, True)
        if index is not None:
            self._cut(buffer.insertion_point(), index)
            buffer.delete_right_before_char(c, True)

    def cut_left_until(self, c: str) -> None:
        buffer = self.line_buffer
        index = buffer.find_char_left(c, True)
        if index is not None:
            self._cut(index, buffer.insertion_point())
            buffer.delete_left_until_char(c, True)

    def cut_left_before(self, c: str) -> None:
        buffer = self.line_buffer
        index = buffer.find_char_left(c, True)
        if index is not None:
            self._cut(index + utf8_len(c), buffer.insertion_point())
            buffer.delete_left_before_char(c, True)

    def paste_cut_buffer_before(self) -> None:
        value = self.cut_buffer.get(UNNAMED_REGISTER)
        if not value.text:
            return
        if value.type == "line":
            self.line_buffer.move_to_line_start()
        self.line_buffer.insert_str(value.text)

    def paste_cut_buffer_after(self) -> None:
        value = self.cut_buffer.get(UNNAMED_REGISTER)
        if not value.text:
            return
        buffer = self.line_buffer
        if value.type == "character":
            buffer.move_right()
            buffer.insert_str(value.text)
            return

        start, end = buffer.current_line_range()
        text = value.text
        target = end
        if not buffer.get_text_range(start, end).endswith("\n"):
            # Last line without a terminator: open a new line below it.
            text = "\n" + text.removesuffix("\n")
            target = end + 1
        elif not text.endswith("\n"):
            text += "\n"
        buffer.set_insertion_point(end)
        buffer.insert_str(text)
        buffer.set_insertion_point(target)


def _buffer_call(method: str) -> Handler:
    def handler(editor: Editor, argument: Optional[str]) -> None:
        del argument
        getattr(editor.line_buffer, method)()

    return handler


def _buffer_search(method: str) -> Handler:
    def handler(editor: Editor, argument: Optional[str]) -> None:
        getattr(editor.line_buffer, method)(argument, True)

    return handler


def _editor_call(method: str) -> Handler:
    def handler(editor: Editor, argument: Optional[str]) -> None:
        del argument
        getattr(editor, method)()

    return handler


def _editor_search(method: str) -> Handler:
    def handler(editor: Editor, argument: Optional[str]) -> None:
        getattr(editor, method)(argument)

    return handler


def _insert_char(editor: Editor, argument: Optional[str]) -> None:
    editor.line_buffer.insert_char(argument or "")


def _insert_string(editor: Editor, argument: Optional[str]) -> None:
    editor.line_buffer.insert_str(argument or "")


def _insert_newline(editor: Editor, argument: Optional[str]) -> None:
    del argument
    editor.line_buffer.insert_char("\n")


_HANDLERS: Dict[EditKind, Handler] = {
    EditKind.MOVE_TO_START: _buffer_call("move_to_start"),
    EditKind.MOVE_TO_LINE_START: _buffer_call("move_to_line_start"),
    EditKind.MOVE_TO_END: _buffer_call("move_to_end"),
    EditKind.MOVE_TO_LINE_END: _buffer_call("move_to_line_end"),
    EditKind.MOVE_LEFT: _buffer_call("move_left"),
    EditKind.MOVE_RIGHT: _buffer_call("move_right"),
    EditKind.MOVE_WORD_LEFT: _buffer_call("move_word_left"),
    EditKind.MOVE_WORD_RIGHT: _buffer_call("move_word_right"),
    EditKind.MOVE_LINE_UP: _buffer_call("move_line_up"),
    EditKind.MOVE_LINE_DOWN: _buffer_call("move_line_down"),
    EditKind.INSERT_CHAR: _insert_char,
    EditKind.INSERT_STRING: _insert_string,
    EditKind.INSERT_NEWLINE: _insert_newline,
    EditKind.BACKSPACE: _buffer_call("delete_left_grapheme"),
    EditKind.DELETE: _buffer_call("delete_right_grapheme"),
    EditKind.BACKSPACE_WORD: _buffer_call("delete_word_left"),
    EditKind.DELETE_WORD: _buffer_call("delete_word_right"),
    EditKind.CLEAR: _buffer_call("clear"),
    EditKind.CLEAR_TO_LINE_END: _buffer_call("clear_to_line_end"),
    EditKind.CUT_CURRENT_LINE: _editor_call("cut_current_line"),
    EditKind.CUT_FROM_START: _editor_call("cut_from_start"),
    EditKind.CUT_FROM_LINE_START: _editor_call("cut_from_line_start"),
    EditKind.CUT_TO_END: _editor_call("cut_to_end"),
    EditKind.CUT_TO_LINE_END: _editor_call("cut_to_line_end"),
    EditKind.CUT_WORD_LEFT: _editor_call("cut_word_left"),
    EditKind.CUT_WORD_RIGHT: _editor_call("cut_word_right"),
    EditKind.PASTE_CUT_BUFFER_BEFORE: _editor_call("paste_cut_buffer_before"),
    EditKind.PASTE_CUT_BUFFER_AFTER: _editor_call("paste_cut_buffer_after"),
    EditKind.UPPERCASE_WORD: _buffer_call("uppercase_word"),
    EditKind.LOWERCASE_WORD: _buffer_call("lowercase_word"),
    EditKind.CAPITALIZE_CHAR: _buffer_call("capitalize_char"),
    EditKind.SWAP_WORDS: _buffer_call("swap_words"),
    EditKind.SWAP_GRAPHEMES: _buffer_call("swap_graphemes"),
    EditKind.MOVE_RIGHT_UNTIL: _buffer_search("move_right_until"),
    EditKind.MOVE_RIGHT_BEFORE: _buffer_search("move_right_before"),
    EditKind.MOVE_LEFT_UNTIL: _buffer_search("move_left_until"),
    EditKind.MOVE_LEFT_BEFORE: _buffer_search("move_left_before"),
    EditKind.CUT_RIGHT_UNTIL: _editor_search("cut_right_until"),
    EditKind.CUT_RIGHT_BEFORE: _editor_search("cut_right_before"),
    EditKind.CUT_LEFT_UNTIL: _editor_search("cut_left_until"),
    EditKind.CUT_LEFT_BEFORE: _editor_search("cut_left_before"),
}


__all__ = ["Editor"]
