from __future__ import annotations

from line_engine.buffer import (
    grapheme_indices,
    is_word_boundary,
    utf8_len,
    word_bound_indices,
)


def test_utf8_len_counts_bytes() -> None:
    assert utf8_len("abc") == 3
    assert utf8_len("é") == 2
    assert utf8_len("😊") == 4


def test_grapheme_indices_report_byte_offsets() -> None:
    assert list(grapheme_indices("a😊b")) == [(0, "a"), (1, "😊"), (5, "b")]


def test_grapheme_indices_keep_combining_marks_together() -> None:
    assert list(grapheme_indices("e\u0301x")) == [(0, "e\u0301"), (3, "x")]


def test_grapheme_indices_treat_crlf_as_one_cluster() -> None:
    assert list(grapheme_indices("a\r\nb")) == [(0, "a"), (1, "\r\n"), (3, "b")]


def test_grapheme_indices_with_base_offset() -> None:
    assert list(grapheme_indices("xy", base=10)) == [(10, "x"), (11, "y")]


def test_word_bound_indices_cover_whole_text() -> None:
    text = "h\u00e9llo, w\u00f6rld"
    segments = list(word_bound_indices(text))

    assert "".join(segment for _, segment in segments) == text
    assert segments[0] == (0, "h\u00e9llo")
    words = [(index, segment) for index, segment in segments if not is_word_boundary(segment)]
    assert words == [(0, "h\u00e9llo"), (8, "w\u00f6rld")]


def test_word_bound_indices_empty_text() -> None:
    assert list(word_bound_indices("")) == []


def test_is_word_boundary() -> None:
    assert is_word_boundary(" ")
    assert is_word_boundary(",")
    assert not is_word_boundary("word")
    assert not is_word_boundary("42")
