"""Decode modular crypt format text into structured values.

Decoding is driven entirely by the shape. Each shape consumes fields from a
`FieldCursor` in declaration order:

- scalars, bytes and options take one field
- sequences, tuples and maps take one field and split it again
- structs take one field per declared field from the same cursor
- enums take the discriminant field and then whatever the variant needs
"""

__all__ = ["decode", "decode_first", "parse_scalar", "DUPLICATE_POLICIES"]

import math
import re

import mcf
from ._shape import F32_MAX, FLOAT_KINDS, INT_RANGES


DUPLICATE_POLICIES = ("reject", "last")

_int_text = re.compile(r"[+-]?[0-9]+")
_float_text = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def decode(source, shape, *, duplicates="reject"):
    """Decode a value of the given shape.

    Args:
        source: (str | FieldCursor) Complete hash text starting with `$`, or
            a cursor to continue consuming
        shape: (Shape) Expected structure
        duplicates: (str) Map key collision policy, "reject" raises
            `CustomError` and "last" keeps the last value

    Returns:
        The decoded value

    Raises:
        mcf.MissingField: A required field is missing
        mcf.ParseError: A scalar field has the wrong textual form
        mcf.EncodingError: A byte field is malformed
        mcf.UnknownVariant: An enum discriminant is not declared
        mcf.CustomError: Other mismatches, like duplicate map keys
    """
    if duplicates not in DUPLICATE_POLICIES:
        raise ValueError(f"Unknown duplicate key policy {duplicates!r}")
    if isinstance(source, mcf.FieldCursor):
        cursor = source
    else:
        cursor = mcf.FieldCursor.toplevel(source)
    return _Decoder(duplicates).decode(cursor, shape)


def decode_first(text, shapes, *, duplicates="reject"):
    """Decode with the first of several shapes that accepts the text.

    Each candidate gets a fresh cursor over the whole text.

    Args:
        text: (str) Complete hash text
        shapes: (Iterable[Shape]) Candidate shapes in order of preference
        duplicates: (str) Map key collision policy

    Returns:
        (tuple[Shape, object]) The matching shape and its decoded value

    Raises:
        mcf.McfError: The error from the last candidate when none match
    """
    error = None
    for shape in shapes:
        try:
            return shape, decode(text, shape, duplicates=duplicates)
        except mcf.McfError as e:
            error = e
    if error is None:
        raise ValueError("No candidate shapes given")
    raise error


class _Decoder:
    """Recursive decoder holding per-call options."""

    __slots__ = ("duplicates",)

    def __init__(self, duplicates):
        self.duplicates = duplicates

    def decode(self, cursor, shape):
        match shape:
            case mcf.Scalar():
                return parse_scalar(shape.kind, cursor.next())

            case mcf.Bytes():
                return shape.codec.decode(cursor.next())

            case mcf.Option():
                field = cursor.next()
                if field == "":
                    return None
                return self.decode(mcf.FieldCursor.single(field), shape.inner)

            case mcf.Sequence():
                field = cursor.next()
                if field == "" and shape.allow_empty:
                    return []
                elements = mcf.FieldCursor(field, mcf.ELEMENT_DELIMITER)
                return [self.decode(mcf.FieldCursor.single(item), shape.inner) for item in elements]

            case mcf.Tuple():
                elements = cursor.subcursor(mcf.ELEMENT_DELIMITER)
                values = tuple(
                    self.decode(mcf.FieldCursor.single(elements.next()), item)
                    for item in shape.items
                )
                if not elements.exhausted:
                    raise mcf.CustomError(
                        f"Expected {len(shape.items)} tuple elements in {elements.text!r}"
                    )
                return values

            case mcf.Map():
                return self._decode_map(cursor.next(), shape)

            case mcf.Struct():
                return self._decode_struct(cursor, shape)

            case mcf.Enum():
                return self._decode_enum(cursor, shape)

        raise mcf.ShapeError(f"Cannot decode unknown shape {shape!r}")

    def _decode_map(self, field, shape):
        result = {}
        if field == "":
            return result
        tokens = mcf.FieldCursor(field, mcf.PAIR_DELIMITER + mcf.ELEMENT_DELIMITER)
        for token in tokens:
            key = self.decode(mcf.FieldCursor.single(token), shape.key)
            if tokens.exhausted:
                raise mcf.MissingField(f"Missing value for map key {key!r} in {field!r}")
            value = self.decode(mcf.FieldCursor.single(tokens.next()), shape.value)
            if key in result and self.duplicates == "reject":
                raise mcf.CustomError(f"Duplicate map key {key!r} in {field!r}")
            result[key] = value
        return result

    def _decode_struct(self, cursor, shape):
        values = {}
        for name, field_shape in shape.fields:
            values[name] = self.decode(cursor, field_shape)
        if shape.record is not None:
            try:
                return shape.record(**values)
            except (TypeError, ValueError) as e:
                raise mcf.CustomError(f"Cannot build {shape.record!r}: {e}") from e
        return values

    def _decode_enum(self, cursor, shape):
        name = cursor.next()
        variant = shape.variants.get(name)
        if variant is None:
            raise mcf.UnknownVariant(name)

        match variant:
            case mcf.Unit():
                payload = None
            case mcf.Newtype():
                payload = self.decode(cursor, variant.inner)
            case mcf.TupleVariant():
                payload = tuple(self.decode(cursor, item) for item in variant.items)
            case mcf.StructVariant():
                payload = self._decode_struct(cursor, variant.struct)
            case _:
                raise mcf.ShapeError(f"Cannot decode unknown variant shape {variant!r}")
        return mcf.Variant(name, payload)


def parse_scalar(kind, text):
    """Parse the text of one field as a scalar kind.

    Args:
        kind: (str) Scalar kind name
        text: (str) Field text

    Returns:
        (bool | int | float | str) Parsed value

    Raises:
        mcf.ParseError: If the text does not match the kind
    """
    if kind == "str":
        return text

    if kind == "char":
        if len(text) != 1:
            raise mcf.ParseError(f"Expected a single character, got {text!r}", kind, text)
        return text

    if kind == "bool":
        if text == "true":
            return True
        if text == "false":
            return False
        raise mcf.ParseError(f"Expected true or false, got {text!r}", kind, text)

    bounds = INT_RANGES.get(kind)
    if bounds is not None:
        low, high = bounds
        if not _int_text.fullmatch(text) or (low == 0 and text.startswith("-")):
            raise mcf.ParseError(f"Invalid digit for {kind} in {text!r}", kind, text)
        try:
            value = int(text)
        except ValueError as e:
            raise mcf.ParseError(f"Cannot convert {text!r} to {kind}", kind, text, e) from e
        if (low is not None and value < low) or (high is not None and value > high):
            raise mcf.ParseError(f"Number {text!r} out of range for {kind}", kind, text)
        return value

    if kind in FLOAT_KINDS:
        if not _float_text.fullmatch(text):
            raise mcf.ParseError(f"Invalid float literal {text!r}", kind, text)
        try:
            value = float(text)
        except ValueError as e:
            raise mcf.ParseError(f"Cannot convert {text!r} to {kind}", kind, text, e) from e
        if kind == "f32" and math.isfinite(value) and abs(value) > F32_MAX:
            raise mcf.ParseError(f"Number {text!r} out of range for {kind}", kind, text)
        return value

    raise mcf.ShapeError(f"Unknown scalar kind {kind!r}")
