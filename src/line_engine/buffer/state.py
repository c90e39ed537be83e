"""Offset and interval types shared across buffer services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

InsertionPoint = int  # UTF-8 byte offset into the buffer


class Span(NamedTuple):
    """Half-open ``[start, end)`` byte interval over the buffer."""

    start: int
    end: int


@dataclass(frozen=True, slots=True)
class BufferSnapshot:
    """Immutable copy of a buffer, suitable for rendering and undo."""

    text: str
    insertion_point: InsertionPoint
    line: int
    num_lines: int
    line_range: Span
