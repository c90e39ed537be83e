"""Line buffer, segmentation helpers and invariant checks."""

from .line_buffer import LineBuffer
from .segmentation import (
    grapheme_indices,
    is_word_boundary,
    utf8_len,
    word_bound_indices,
)
from .state import BufferSnapshot, InsertionPoint, Span
from .validation import (
    BufferValidationError,
    encode_text,
    ensure_insertion_point,
    ensure_valid,
)

__all__ = [
    "BufferSnapshot",
    "BufferValidationError",
    "InsertionPoint",
    "LineBuffer",
    "Span",
    "encode_text",
    "ensure_insertion_point",
    "ensure_valid",
    "grapheme_indices",
    "is_word_boundary",
    "utf8_len",
    "word_bound_indices",
]
