"""Invariant checks for line buffers.

None of these run on the hot path. ``LineBuffer`` only calls ``encode_text``
on text entering the buffer; the remaining helpers back ``is_valid`` and the
checked setter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .segmentation import grapheme_indices
from .state import InsertionPoint

if TYPE_CHECKING:
    from .line_buffer import LineBuffer


class BufferValidationError(RuntimeError):
    """Raised when text or an insertion point breaks the buffer invariants."""

    def __init__(
        self, message: str, *, insertion_point: InsertionPoint | None = None
    ) -> None:
        super().__init__(message)
        self.insertion_point = insertion_point


def invariant_violation(text: str, offset: InsertionPoint) -> Optional[str]:
    """Describe the first invariant ``(text, offset)`` breaks, if any."""

    try:
        raw = text.encode("utf-8")
    except UnicodeEncodeError:
        return "not valid utf-8"
    if offset < 0 or offset > len(raw):
        return "out of range"
    if offset == len(raw):
        return None
    if raw[offset] & 0xC0 == 0x80:
        return "not on a code point boundary"
    for index, _ in grapheme_indices(text):
        if index == offset:
            return None
        if index > offset:
            break
    return "not on a grapheme boundary"


def encode_text(text: str) -> bytes:
    """Encode ``text`` for storage, rejecting lone surrogates."""

    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise BufferValidationError(f"text is not valid utf-8: {exc.reason}") from exc


def ensure_insertion_point(buffer: "LineBuffer", offset: InsertionPoint) -> InsertionPoint:
    reason = invariant_violation(buffer.get_buffer(), offset)
    if reason is not None:
        raise BufferValidationError(
            f"Insertion point {offset} is {reason}", insertion_point=offset
        )
    return offset


def ensure_valid(buffer: "LineBuffer") -> None:
    """Raise ``BufferValidationError`` unless ``buffer`` satisfies its invariants."""

    offset = buffer.insertion_point()
    reason = invariant_violation(buffer.get_buffer(), offset)
    if reason is not None:
        raise BufferValidationError(f"Buffer invalid: {reason}", insertion_point=offset)


__all__ = [
    "BufferValidationError",
    "ensure_insertion_point",
    "encode_text",
    "ensure_valid",
    "invariant_violation",
]
