"""In-memory line buffer with a grapheme-aligned byte cursor.

The text of every line lives in one string. The insertion point is a UTF-8
byte offset into that string and, after every public operation, sits on a
grapheme cluster boundary (or at the very end). Line information is never
stored; it is derived by scanning for ``\\n`` on each query.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from line_engine.runtime import telemetry

from .segmentation import (
    grapheme_count,
    grapheme_indices,
    graphemes,
    is_word_boundary,
    utf8_len,
    word_bound_indices,
)
from .state import BufferSnapshot, InsertionPoint, Span
from .validation import (
    BufferValidationError,
    encode_text,
    ensure_insertion_point,
    invariant_violation,
)

_NEWLINE = b"\n"
_CARRIAGE_RETURN = ord("\r")


@dataclass(slots=True)
class LineBuffer:
    """Text of the current edit session plus the insertion point."""

    _lines: str = ""
    _insertion_point: InsertionPoint = 0

    def __post_init__(self) -> None:
        encode_text(self._lines)

    @classmethod
    def from_text(cls, text: str) -> "LineBuffer":
        """Build a buffer holding ``text`` with the cursor at its end."""

        buffer = cls()
        buffer.insert_str(text)
        return buffer

    # -- storage -----------------------------------------------------------

    def _raw(self) -> bytes:
        return self._lines.encode("utf-8")

    def _slice(self, start: int, end: Optional[int] = None) -> str:
        return self._raw()[start:end].decode("utf-8")

    def get_buffer(self) -> str:
        return self._lines

    def get_text_range(self, start: int, end: int) -> str:
        if start > end:
            start, end = end, start
        return self._slice(start, end)

    def set_buffer(self, text: str) -> None:
        """Replace the whole content and put the cursor at its end."""

        encoded = encode_text(text)
        self._lines = text
        self._insertion_point = len(encoded)

    def insertion_point(self) -> InsertionPoint:
        return self._insertion_point

    def set_insertion_point(self, offset: InsertionPoint) -> None:
        """Move the cursor without any check.

        ``offset`` must come from one of the buffer's own boundary queries;
        anything else leaves the buffer in a state only ``is_valid`` reveals.
        """

        self._insertion_point = offset

    def set_insertion_point_checked(self, offset: InsertionPoint) -> None:
        try:
            ensure_insertion_point(self, offset)
        except BufferValidationError as exc:
            telemetry.record_event(
                "buffer.invalid_insertion_point",
                level="warning",
                data={"offset": offset, "reason": str(exc)},
                logger_name="line_engine.buffer",
            )
            raise
        self._insertion_point = offset

    def is_valid(self) -> bool:
        """UTF-8 content with the cursor on a grapheme boundary or at the end."""

        return invariant_violation(self._lines, self._insertion_point) is None

    def __len__(self) -> int:
        return utf8_len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def ends_with(self, c: str) -> bool:
        return self._lines.endswith(c)

    def snapshot(self) -> BufferSnapshot:
        return BufferSnapshot(
            text=self._lines,
            insertion_point=self._insertion_point,
            line=self.line(),
            num_lines=self.num_lines(),
            line_range=self.current_line_range(),
        )

    def restore(self, snapshot: BufferSnapshot) -> None:
        self._lines = snapshot.text
        self._insertion_point = snapshot.insertion_point

    # -- boundary queries --------------------------------------------------

    def grapheme_right_index(self) -> InsertionPoint:
        """Offset *behind* the grapheme right of the cursor."""

        for cluster in graphemes(self._slice(self._insertion_point)):
            return self._insertion_point + utf8_len(cluster)
        return len(self)

    def grapheme_left_index(self) -> InsertionPoint:
        """Offset *in front of* the grapheme left of the cursor."""

        start = 0
        for index, _ in grapheme_indices(self._slice(0, self._insertion_point)):
            start = index
        return start

    def word_right_index(self) -> InsertionPoint:
        """Offset *behind* the next word to the right."""

        point = self._insertion_point
        for index, segment in word_bound_indices(self._slice(point), point):
            if not is_word_boundary(segment):
                return index + utf8_len(segment)
        return len(self)

    def word_left_index(self) -> InsertionPoint:
        """Offset *in front of* the next word to the left."""

        return _last_word_start(self._slice(0, self._insertion_point))

    def current_word_range(self) -> Span:
        right_index = self.word_right_index()
        return Span(_last_word_start(self._slice(0, right_index)), right_index)

    def on_whitespace(self) -> bool:
        rest = self._slice(self._insertion_point)
        return bool(rest) and rest[0].isspace()

    # -- line navigation ---------------------------------------------------

    def line(self) -> int:
        """Zero-based index of the line holding the cursor."""

        return self._raw().count(_NEWLINE, 0, self._insertion_point)

    def num_lines(self) -> int:
        return self._lines.count("\n") + 1

    def find_current_line_end(self) -> InsertionPoint:
        """Where the current line stops: on the ``\\n`` (or the ``\\r`` of ``\\r\\n``).

        Returns ``len()`` on the last line.
        """

        raw = self._raw()
        index = raw.find(_NEWLINE, self._insertion_point)
        if index < 0:
            return len(raw)
        if index > self._insertion_point and raw[index - 1] == _CARRIAGE_RETURN:
            return index - 1
        return index

    def current_line_range(self) -> Span:
        """Span of the current line, terminator included."""

        raw = self._raw()
        start = raw.rfind(_NEWLINE, 0, self._insertion_point) + 1
        newline = raw.find(_NEWLINE, self._insertion_point)
        end = len(raw) if newline < 0 else newline + 1
        return Span(start, end)

    def is_cursor_at_first_line(self) -> bool:
        return _NEWLINE not in self._raw()[: self._insertion_point]

    def is_cursor_at_last_line(self) -> bool:
        return _NEWLINE not in self._raw()[self._insertion_point :]

    def move_to_start(self) -> None:
        self._insertion_point = 0

    def move_to_end(self) -> None:
        self._insertion_point = len(self)

    def move_to_line_start(self) -> None:
        self._insertion_point = self._raw().rfind(_NEWLINE, 0, self._insertion_point) + 1

    def move_to_line_end(self) -> None:
        self._insertion_point = self.find_current_line_end()

    def move_left(self) -> None:
        self._insertion_point = self.grapheme_left_index()

    def move_right(self) -> None:
        self._insertion_point = self.grapheme_right_index()

    def move_word_left(self) -> None:
        self._insertion_point = self.word_left_index()

    def move_word_right(self) -> None:
        self._insertion_point = self.word_right_index()

    def _grapheme_column(self, line_start: int) -> int:
        return grapheme_count(self._slice(line_start, self._insertion_point))

    def move_line_up(self) -> None:
        """Move to the previous line, keeping the grapheme column if it fits."""

        if self.is_cursor_at_first_line():
            return
        old_range = self.current_line_range()
        column = self._grapheme_column(old_range.start)

        # One grapheme left of the line start is the previous line's
        # terminator, whether it is ``\n`` or ``\r\n``.
        self._insertion_point = old_range.start
        self.move_left()

        new_range = self.current_line_range()
        target = new_range.start
        clusters = grapheme_indices(self._slice(*new_range), new_range.start)
        for count, (index, _) in enumerate(clusters):
            target = index
            if count == column:
                break
        self._insertion_point = target

    def move_line_down(self) -> None:
        """Move to the next line, keeping the grapheme column if it fits."""

        if self.is_cursor_at_last_line():
            return
        old_range = self.current_line_range()
        column = self._grapheme_column(old_range.start)

        self._insertion_point = old_range.end

        new_range = self.current_line_range()
        clusters = grapheme_indices(self._slice(*new_range), new_range.start)
        for count, (index, _) in enumerate(clusters):
            if count == column:
                self._insertion_point = index
                return
        # The last line may have no terminator to land on.
        self._insertion_point = self.find_current_line_end()

    # -- mutation ----------------------------------------------------------

    def replace_range(self, start: int, end: int, text: str) -> None:
        """Substitute ``[start, end)`` with ``text``.

        Leaves the insertion point alone; callers keep it consistent.
        """

        raw = self._raw()
        self._lines = (raw[:start] + encode_text(text) + raw[end:]).decode("utf-8")

    def clear_range(self, start: int, end: int) -> None:
        self.replace_range(start, end, "")

    def insert_char(self, c: str) -> None:
        """Insert a single character and step over it."""

        if len(c) != 1:
            raise ValueError(f"insert_char expects one character, got {c!r}")
        self.replace_range(self._insertion_point, self._insertion_point, c)
        self.move_right()

    def insert_str(self, text: str) -> None:
        """Insert ``text`` at the cursor and move the cursor behind it.

        Neither ``text`` nor the resulting cursor position are checked against
        grapheme boundaries.
        """

        encoded = encode_text(text)
        self.replace_range(self._insertion_point, self._insertion_point, text)
        self._insertion_point += len(encoded)

    def clear(self) -> None:
        self._lines = ""
        self._insertion_point = 0

    def clear_to_end(self) -> None:
        """Drop everything right of the cursor."""

        self._lines = self._slice(0, self._insertion_point)

    def clear_to_line_end(self) -> None:
        """Drop the rest of the current line, keeping its terminator."""

        self.clear_range(self._insertion_point, self.find_current_line_end())

    def clear_to_insertion_point(self) -> None:
        self.clear_range(0, self._insertion_point)
        self._insertion_point = 0

    def delete_left_grapheme(self) -> None:
        left_index = self.grapheme_left_index()
        if left_index < self._insertion_point:
            self.clear_range(left_index, self._insertion_point)
            self._insertion_point = left_index

    def delete_right_grapheme(self) -> None:
        right_index = self.grapheme_right_index()
        if right_index > self._insertion_point:
            self.clear_range(self._insertion_point, right_index)

    def delete_word_left(self) -> None:
        left_index = self.word_left_index()
        self.clear_range(left_index, self._insertion_point)
        self._insertion_point = left_index

    def delete_word_right(self) -> None:
        self.clear_range(self._insertion_point, self.word_right_index())

    # -- transforms --------------------------------------------------------

    def uppercase_word(self) -> None:
        start, end = self.current_word_range()
        self.replace_range(start, end, self._slice(start, end).upper())
        self.move_word_right()

    def lowercase_word(self) -> None:
        start, end = self.current_word_range()
        self.replace_range(start, end, self._slice(start, end).lower())
        self.move_word_right()

    def capitalize_char(self) -> None:
        """Uppercase the grapheme at the cursor and step over it.

        On whitespace the cursor first jumps to the start of the next word.
        """

        if self.on_whitespace():
            self.move_word_right()
            self.move_word_left()
        point = self._insertion_point
        right_index = self.grapheme_right_index()
        if right_index > point:
            self.replace_range(point, right_index, self._slice(point, right_index).upper())
            self.move_right()

    def word_count(self) -> int:
        return len(self._lines.split())

    def swap_words(self) -> None:
        """Swap the current word with the next one to the right."""

        first = self.current_word_range()
        self.move_word_right()
        second = self.current_word_range()
        if first == second:
            return

        self.move_word_left()
        first_text = self._slice(*first)
        second_text = self._slice(*second)
        self.replace_range(second.start, second.end, first_text)
        self.replace_range(first.start, first.end, second_text)

    def swap_graphemes(self) -> None:
        """Swap the graphemes on either side of the cursor.

        At the start of the buffer the pair to the right is swapped and at the
        end the pair to the left, so the command always has an effect once
        there are two graphemes.
        """

        initial = self._insertion_point
        if initial == 0:
            self.move_right()
        elif initial == len(self):
            self.move_left()

        point = self._insertion_point
        first_start = self.grapheme_left_index()
        second_end = self.grapheme_right_index()
        if first_start < point < second_end:
            first_text = self._slice(first_start, point)
            second_text = self._slice(point, second_end)
            self.replace_range(point, second_end, first_text)
            self.replace_range(first_start, point, second_text)
            self._insertion_point = second_end

    # -- character search --------------------------------------------------

    def find_char_right(self, c: str, current_line: bool) -> Optional[InsertionPoint]:
        """Offset of the next ``c`` after the grapheme under the cursor.

        The match is a code point, not a grapheme. ``c`` must start a grapheme
        for the search commands to leave the cursor on a boundary: looking for
        ``"\\n"`` in ``"\\r\\n"`` text, or for the base of a combining
        sequence, lands inside a cluster and ``is_valid()`` turns false.
        """

        start = self.grapheme_right_index()
        end = self.current_line_range().end if current_line else len(self)
        index = self._raw().find(c.encode("utf-8"), start, end)
        return None if index < 0 else index

    def find_char_left(self, c: str, current_line: bool) -> Optional[InsertionPoint]:
        """Offset of the closest ``c`` left of the cursor.

        Same precondition as ``find_char_right``; the ``_before`` variants
        additionally step over ``c`` alone, so ``c`` must also end a grapheme.
        """

        start = self.current_line_range().start if current_line else 0
        index = self._raw().rfind(c.encode("utf-8"), start, self._insertion_point)
        return None if index < 0 else index

    def move_right_until(self, c: str, current_line: bool) -> InsertionPoint:
        index = self.find_char_right(c, current_line)
        if index is not None:
            self._insertion_point = index
        return self._insertion_point

    def move_right_before(self, c: str, current_line: bool) -> InsertionPoint:
        index = self.find_char_right(c, current_line)
        if index is not None:
            self._insertion_point = index
            self._insertion_point = self.grapheme_left_index()
        return self._insertion_point

    def move_left_until(self, c: str, current_line: bool) -> InsertionPoint:
        index = self.find_char_left(c, current_line)
        if index is not None:
            self._insertion_point = index
        return self._insertion_point

    def move_left_before(self, c: str, current_line: bool) -> InsertionPoint:
        # Steps over the matched character itself, not over a whole grapheme.
        index = self.find_char_left(c, current_line)
        if index is not None:
            self._insertion_point = index + utf8_len(c)
        return self._insertion_point

    def delete_right_until_char(self, c: str, current_line: bool) -> None:
        index = self.find_char_right(c, current_line)
        if index is not None:
            self.clear_range(self._insertion_point, index + utf8_len(c))

    def delete_right_before_char(self, c: str, current_line: bool) -> None:
        index = self.find_char_right(c, current_line)
        if index is not None:
            self.clear_range(self._insertion_point, index)

    def delete_left_until_char(self, c: str, current_line: bool) -> None:
        index = self.find_char_left(c, current_line)
        if index is not None:
            self.clear_range(index, self._insertion_point)
            self._insertion_point = index

    def delete_left_before_char(self, c: str, current_line: bool) -> None:
        index = self.find_char_left(c, current_line)
        if index is not None:
            start = index + utf8_len(c)
            self.clear_range(start, self._insertion_point)
            self._insertion_point = start


def _last_word_start(text: str) -> int:
    start = 0
    for index, segment in word_bound_indices(text):
        if not is_word_boundary(segment):
            start = index
    return start


__all__ = ["LineBuffer"]
