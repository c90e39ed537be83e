"""Snapshot-based undo/redo layered over the line buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from line_engine.buffer import BufferSnapshot


@dataclass(frozen=True, slots=True)
class UndoEntry:
    label: str
    before: BufferSnapshot
    after: BufferSnapshot


class UndoTimeline:
    """Linear undo/redo history; a new entry discards the redo tail."""

    def __init__(self, *, limit: Optional[int] = None) -> None:
        if limit is not None and limit <= 0:
            raise ValueError("limit must be positive")
        self._entries: List[UndoEntry] = []
        self._index: int = -1
        self._limit = limit

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, entry: UndoEntry) -> None:
        if self._index < len(self._entries) - 1:
            del self._entries[self._index + 1 :]
        self._entries.append(entry)
        if self._limit is not None and len(self._entries) > self._limit:
            del self._entries[0]
        self._index = len(self._entries) - 1

    def can_undo(self) -> bool:
        return self._index >= 0

    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def undo(self) -> Optional[UndoEntry]:
        if not self.can_undo():
            return None
        entry = self._entries[self._index]
        self._index -= 1
        return entry

    def redo(self) -> Optional[UndoEntry]:
        if not self.can_redo():
            return None
        self._index += 1
        return self._entries[self._index]

    def clear(self) -> None:
        self._entries.clear()
        self._index = -1


__all__ = ["UndoEntry", "UndoTimeline"]
