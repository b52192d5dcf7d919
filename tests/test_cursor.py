"""Tests for the field cursor."""

import pytest

import mcf
import mcftest


@mcftest.params(
    "text delimiters fields",
    simple=("a$b$c", "$", ["a", "b", "c"]),
    empty=("", "$", [""]),
    trailing=("a$", "$", ["a", ""]),
    adjacent=("a$$b", "$", ["a", "", "b"]),
    commas=("x,y", ",", ["x", "y"]),
    pairs=("x=xylo,y=yell", "=,", ["x", "xylo", "y", "yell"]),
    nosplit=("a$b,c", "", ["a$b,c"]),
)
def test_split_fields(key, text, delimiters, fields):
    cursor = mcf.FieldCursor(text, delimiters)
    assert list(cursor) == fields
    assert cursor.exhausted
    assert cursor.index == len(fields)


def test_toplevel_discards_leading_field():
    cursor = mcf.FieldCursor.toplevel("$12$5")
    assert cursor.index == 0
    assert cursor.next() == "12"
    assert cursor.next() == "5"
    assert cursor.exhausted


def test_toplevel_only_delimiter():
    cursor = mcf.FieldCursor.toplevel("$")
    assert cursor.next() == ""
    assert cursor.exhausted


@mcftest.params(
    "text",
    empty="",
    no_dollar="12$5",
    space=" $12",
)
def test_toplevel_requires_leading_delimiter(key, text):
    with pytest.raises(mcf.ParseError):
        mcf.FieldCursor.toplevel(text)


def test_exhausted_cursor_raises_missing_field():
    cursor = mcf.FieldCursor("only")
    assert cursor.next() == "only"
    with pytest.raises(mcf.MissingField):
        cursor.next()
    with pytest.raises(mcf.MissingField):
        cursor.remaining()


def test_remaining_returns_rest_verbatim():
    cursor = mcf.FieldCursor.toplevel("$argon2i$m=1,p=2$salt")
    assert cursor.next() == "argon2i"
    assert cursor.remaining() == "m=1,p=2$salt"
    assert cursor.exhausted


def test_single_field():
    cursor = mcf.FieldCursor.single("a,b=c$d")
    assert cursor.next() == "a,b=c$d"
    assert cursor.exhausted


def test_subcursor_splits_one_field():
    cursor = mcf.FieldCursor.toplevel("$1,2,3$tail")
    elements = cursor.subcursor(",")
    assert list(elements) == ["1", "2", "3"]
    assert cursor.next() == "tail"


def test_fields_consumed_once_in_order():
    cursor = mcf.FieldCursor("a$b")
    assert next(cursor) == "a"
    assert list(cursor) == ["b"]
    assert list(cursor) == []
