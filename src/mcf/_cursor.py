"""Field cursor over modular crypt format text."""

__all__ = [
    "FieldCursor",
    "FIELD_DELIMITER",
    "ELEMENT_DELIMITER",
    "PAIR_DELIMITER",
]

import re

import mcf


FIELD_DELIMITER = "$"
ELEMENT_DELIMITER = ","
PAIR_DELIMITER = "="

_patterns = {}


class FieldCursor:
    """Single pass producer of fields split from a string.

    The text is split lazily on any of the delimiter characters. Fields are
    handed out in order and each one only once; there is no rewinding.
    Splitting follows `str.split` rules, so an empty string is one empty
    field and adjacent delimiters produce empty fields between them.

    With no delimiters the cursor produces the whole text as a single field.

    Args:
        text: (str) Text to split
        delimiters: (str) Characters that separate fields

    Attributes:
        text: (str) The text being split
        delimiters: (str) Characters that separate fields
        index: (int) Number of fields consumed so far
    """

    __slots__ = ("text", "delimiters", "index", "_pos", "_pattern")

    def __init__(self, text, delimiters=FIELD_DELIMITER):
        self.text = text
        self.delimiters = delimiters
        self.index = 0
        self._pos = 0
        self._pattern = _delimiter_pattern(delimiters)

    @classmethod
    def toplevel(cls, text):
        """Create the cursor for a complete hash string.

        The text must begin with the field delimiter. The empty field in
        front of it is discarded.

        Args:
            text: (str) Complete modular crypt format string

        Returns:
            (FieldCursor) Cursor positioned on the first field

        Raises:
            mcf.ParseError: If the text does not start with the delimiter
        """
        if not isinstance(text, str):
            raise TypeError(f"Expected str, got {type(text).__name__}")
        if not text.startswith(FIELD_DELIMITER):
            raise mcf.ParseError(
                f"Expected text to start with {FIELD_DELIMITER!r}: {text!r}", field=text
            )
        cursor = cls(text)
        cursor.next()
        cursor.index = 0
        return cursor

    @classmethod
    def single(cls, text):
        """Create a cursor that produces `text` as its only field."""
        return cls(text, "")

    @property
    def exhausted(self):
        """(bool) No more fields remain."""
        return self._pos is None

    def next(self):
        """Consume the next field.

        Returns:
            (str) Field text, possibly empty

        Raises:
            mcf.MissingField: If the cursor is exhausted
        """
        if self._pos is None:
            raise mcf.MissingField(f"Missing field {self.index + 1} in {self.text!r}")
        match = self._pattern.search(self.text, self._pos) if self._pattern else None
        if match is None:
            field = self.text[self._pos :]
            self._pos = None
        else:
            field = self.text[self._pos : match.start()]
            self._pos = match.end()
        self.index += 1
        return field

    def remaining(self):
        """Consume everything left, delimiters included, as one field.

        Returns:
            (str) The unconsumed text

        Raises:
            mcf.MissingField: If the cursor is exhausted
        """
        if self._pos is None:
            raise mcf.MissingField(f"Missing field {self.index + 1} in {self.text!r}")
        field = self.text[self._pos :]
        self._pos = None
        self.index += 1
        return field

    def subcursor(self, delimiters):
        """Consume the next field and split it on other delimiters.

        Args:
            delimiters: (str) Characters that separate the sub-fields

        Returns:
            (FieldCursor) Cursor over the pieces of the consumed field
        """
        return FieldCursor(self.next(), delimiters)

    def __iter__(self):
        return self

    def __next__(self):
        if self._pos is None:
            raise StopIteration
        return self.next()

    def __repr__(self):
        rest = "" if self._pos is None else self.text[self._pos :]
        return f"FieldCursor<{self.delimiters!r} {rest!r}>"


def _delimiter_pattern(delimiters):
    """Get a shared compiled pattern matching any delimiter character."""
    if not delimiters:
        return None
    pattern = _patterns.get(delimiters)
    if pattern is None:
        pattern = re.compile("[" + re.escape(delimiters) + "]")
        _patterns[delimiters] = pattern
    return pattern
