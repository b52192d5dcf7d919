"""Error classes and helpers"""

__all__ = [
    "McfError",
    "MissingField",
    "ParseError",
    "EncodingError",
    "UnknownVariant",
    "UnsupportedConstruct",
    "CustomError",
    "ShapeError",
]


class McfError(Exception):
    """Base class for every error raised by the codec.

    Args:
        message: (str) Error description

    Attributes:
        message: (str) Error description
    """

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class MissingField(McfError):
    """Cursor exhausted where a field was required."""

    def __init__(self, message="no field to decode"):
        super().__init__(message)


class ParseError(McfError):
    """Field text did not lexically match the expected kind.

    Also raised for malformed shape notation, where `position` tells
    where the problem was found.

    Args:
        message: (str) Error description
        kind: (str | None) Expected scalar kind
        field: (str | None) Raw field text that failed
        cause: (Exception | None) Underlying conversion error
        position: (int | None) Character position in shape notation

    Attributes:
        kind: (str | None) Expected scalar kind
        field: (str | None) Raw field text that failed
        cause: (Exception | None) Underlying conversion error
        position: (int | None) Character position in shape notation
    """

    def __init__(self, message, kind=None, field=None, cause=None, position=None):
        self.kind = kind
        self.field = field
        self.cause = cause
        self.position = position
        super().__init__(message)


class EncodingError(McfError):
    """Malformed or wrong-length base64 input."""


class UnknownVariant(McfError):
    """Enum discriminant is not one of the declared variants.

    Args:
        name: (str) The discriminant text found

    Attributes:
        name: (str) The discriminant text found
    """

    def __init__(self, name, message=None):
        self.name = name
        super().__init__(message or f"unknown variant {name!r}")


class UnsupportedConstruct(McfError):
    """Value has no representation at its position in the format."""


class CustomError(McfError):
    """Contract violation between a value and its shape."""


class ShapeError(McfError):
    """Shape description is malformed."""
