"""Unicode text segmentation over UTF-8 byte offsets.

Grapheme clusters come from ``grapheme`` and word boundaries from the
default Unicode word-boundary rules exposed by ``regex``. Both report
positions as byte offsets so callers can mix them with ``bytes.find``.
"""

from __future__ import annotations

from typing import Iterator, Tuple

import grapheme
import regex

_WORD_BOUNDARY = regex.compile(r"\b", flags=regex.WORD)


def utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def graphemes(text: str) -> Iterator[str]:
    return grapheme.graphemes(text)


def grapheme_indices(text: str, base: int = 0) -> Iterator[Tuple[int, str]]:
    """Yield ``(byte_offset, cluster)`` for every grapheme cluster of ``text``."""

    offset = base
    for cluster in grapheme.graphemes(text):
        yield offset, cluster
        offset += utf8_len(cluster)


def grapheme_count(text: str) -> int:
    return grapheme.length(text)


def word_bound_indices(text: str, base: int = 0) -> Iterator[Tuple[int, str]]:
    """Yield ``(byte_offset, segment)`` for every word-boundary segment.

    Segments cover ``text`` completely: words, whitespace runs and
    punctuation all come out as separate pieces.
    """

    if not text:
        return
    cuts = {0, len(text)}
    cuts.update(match.start() for match in _WORD_BOUNDARY.finditer(text))
    ordered = sorted(cuts)
    offset = base
    for start, end in zip(ordered, ordered[1:]):
        segment = text[start:end]
        yield offset, segment
        offset += utf8_len(segment)


def is_word_boundary(segment: str) -> bool:
    """A segment without any alphanumeric character separates words."""

    return not any(ch.isalnum() for ch in segment)


__all__ = [
    "grapheme_count",
    "grapheme_indices",
    "graphemes",
    "is_word_boundary",
    "utf8_len",
    "word_bound_indices",
]
