from __future__ import annotations

import pytest

from line_engine.buffer import (
    BufferValidationError,
    LineBuffer,
    encode_text,
    ensure_insertion_point,
    ensure_valid,
)


def make_buffer(text: str) -> LineBuffer:
    return LineBuffer.from_text(text)


def test_encode_text_rejects_lone_surrogates() -> None:
    assert encode_text("ok") == b"ok"
    with pytest.raises(BufferValidationError):
        encode_text("bad \ud800")


@pytest.mark.parametrize(
    "mutate",
    [
        lambda buffer: buffer.insert_str("\udfff"),
        lambda buffer: buffer.set_buffer("x\ud800"),
        lambda buffer: buffer.replace_range(0, 1, "\ud800"),
    ],
)
def test_surrogate_text_is_rejected_without_mutation(mutate) -> None:
    buffer = make_buffer("abc")

    with pytest.raises(BufferValidationError):
        mutate(buffer)

    assert buffer == make_buffer("abc")


def test_constructor_rejects_surrogates() -> None:
    with pytest.raises(BufferValidationError):
        LineBuffer("\ud800")


@pytest.mark.parametrize(
    ("text", "offset", "reason"),
    [
        ("abc", 4, "out of range"),
        ("abc", -1, "out of range"),
        ("a😊", 2, "not on a code point boundary"),
        ("e\u0301", 1, "not on a grapheme boundary"),
        ("a\r\nb", 2, "not on a grapheme boundary"),
    ],
)
def test_ensure_insertion_point_names_broken_invariant(
    text: str, offset: int, reason: str
) -> None:
    buffer = make_buffer(text)

    with pytest.raises(BufferValidationError, match=reason) as excinfo:
        ensure_insertion_point(buffer, offset)

    assert excinfo.value.insertion_point == offset


def test_set_insertion_point_checked() -> None:
    buffer = make_buffer("a😊b")

    buffer.set_insertion_point_checked(5)
    assert buffer.insertion_point() == 5

    with pytest.raises(BufferValidationError):
        buffer.set_insertion_point_checked(3)
    assert buffer.insertion_point() == 5


def test_unchecked_setter_is_caught_by_ensure_valid() -> None:
    buffer = make_buffer("a😊")
    ensure_valid(buffer)

    buffer.set_insertion_point(3)

    assert not buffer.is_valid()
    with pytest.raises(BufferValidationError, match="code point"):
        ensure_valid(buffer)
