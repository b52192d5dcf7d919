"""Encode structured values as modular crypt format text.

The encoder mirrors the decoder. Delimiters are chosen from the shape alone:
struct fields and enum payloads are separated by `$`, sequence, tuple and
map elements by `,`, and map keys from their values by `=`. The format has
no escaping, so field text containing a delimiter that is significant at its
position is rejected rather than written ambiguously.
"""

__all__ = ["encode", "encode_into", "format_scalar", "OutputBuffer"]

import collections.abc
import math

import mcf
from ._shape import F32_MAX, FLOAT_KINDS, INT_RANGES


# Characters that may not appear in the text written at each position
_field_reserved = mcf.FIELD_DELIMITER
_element_reserved = mcf.FIELD_DELIMITER + mcf.ELEMENT_DELIMITER
_pair_reserved = mcf.FIELD_DELIMITER + mcf.ELEMENT_DELIMITER + mcf.PAIR_DELIMITER


class OutputBuffer:
    """Append-only collection of the fields written so far.

    Attributes:
        fields: (list[str]) Field texts in output order
    """

    __slots__ = ("fields",)

    def __init__(self):
        self.fields = []

    def field(self, text):
        """Append one complete field."""
        self.fields.append(text)

    def getvalue(self):
        """(str) Output text, with the leading delimiter."""
        return mcf.FIELD_DELIMITER + mcf.FIELD_DELIMITER.join(self.fields)


def encode(value, shape):
    """Encode a value of the given shape.

    Args:
        value: Value to encode
        shape: (Shape) Structure of the value

    Returns:
        (str) Modular crypt format text starting with `$`

    Raises:
        mcf.UnsupportedConstruct: A value has no place in the format
        mcf.UnknownVariant: An enum value names an undeclared variant
        mcf.CustomError: The value does not fit the shape
    """
    if value is None and isinstance(shape, mcf.Option):
        raise mcf.UnsupportedConstruct("An absent value needs an enclosing field")
    buffer = OutputBuffer()
    encode_into(buffer, value, shape)
    return buffer.getvalue()


def encode_into(buffer, value, shape):
    """Append the fields for a value to an existing buffer.

    Args:
        buffer: (OutputBuffer) Destination
        value: Value to encode
        shape: (Shape) Structure of the value
    """
    match shape:
        case mcf.Scalar() | mcf.Bytes():
            buffer.field(_render(value, shape, _field_reserved))

        case mcf.Option():
            if value is None:
                buffer.field("")
                return
            # The present value has to fit in the single field the decoder
            # will hand to the inner shape
            inner = OutputBuffer()
            encode_into(inner, value, shape.inner)
            if len(inner.fields) != 1:
                raise mcf.UnsupportedConstruct(
                    f"Optional {shape.inner!r} does not fit in a single field"
                )
            if inner.fields[0] == "":
                raise mcf.CustomError(f"Empty text for present {shape!r} would decode as absent")
            buffer.field(inner.fields[0])

        case mcf.Sequence():
            buffer.field(_render_sequence(value, shape))

        case mcf.Tuple():
            buffer.field(_render_tuple(value, shape))

        case mcf.Map():
            buffer.field(_render_map(value, shape))

        case mcf.Struct():
            _encode_struct(buffer, value, shape)

        case mcf.Enum():
            _encode_enum(buffer, value, shape)

        case _:
            raise mcf.ShapeError(f"Cannot encode unknown shape {shape!r}")


def _encode_struct(buffer, value, shape):
    if value is None:
        raise mcf.UnsupportedConstruct(f"Cannot encode None as {shape!r}")
    for name, field_shape in shape.fields:
        if isinstance(value, collections.abc.Mapping):
            if name not in value:
                raise mcf.CustomError(f"Missing struct field {name!r}")
            field_value = value[name]
        else:
            try:
                field_value = getattr(value, name)
            except AttributeError as e:
                raise mcf.CustomError(f"Missing struct field {name!r}") from e
        encode_into(buffer, field_value, field_shape)


def _encode_enum(buffer, value, shape):
    if not isinstance(value, mcf.Variant):
        raise mcf.CustomError(f"Expected a Variant for {shape!r}, got {value!r}")
    variant = shape.variants.get(value.name)
    if variant is None:
        raise mcf.UnknownVariant(value.name)

    buffer.field(value.name)
    match variant:
        case mcf.Unit():
            pass
        case mcf.Newtype():
            encode_into(buffer, value.payload, variant.inner)
        case mcf.TupleVariant():
            payload = value.payload
            if not isinstance(payload, (tuple, list)) or len(payload) != len(variant.items):
                raise mcf.CustomError(
                    f"Expected {len(variant.items)} payload values for {value.name!r}, got {payload!r}"
                )
            for item, item_shape in zip(payload, variant.items):
                encode_into(buffer, item, item_shape)
        case mcf.StructVariant():
            _encode_struct(buffer, value.payload, variant.struct)


def _render_sequence(value, shape):
    if isinstance(value, (str, bytes)) or not isinstance(value, collections.abc.Sequence):
        raise mcf.CustomError(f"Expected a list for {shape!r}, got {value!r}")
    items = [_render(item, shape.inner, _element_reserved) for item in value]
    if not items and not shape.allow_empty:
        raise mcf.CustomError(f"{shape!r} cannot be empty")
    if shape.allow_empty and items == [""]:
        raise mcf.CustomError(f"Single empty element in {shape!r} would decode as empty")
    return mcf.ELEMENT_DELIMITER.join(items)


def _render_tuple(value, shape):
    if not isinstance(value, (tuple, list)) or len(value) != len(shape.items):
        raise mcf.CustomError(f"Expected {len(shape.items)} values for {shape!r}, got {value!r}")
    items = [_render(item, item_shape, _element_reserved) for item, item_shape in zip(value, shape.items)]
    return mcf.ELEMENT_DELIMITER.join(items)


def _render_map(value, shape):
    if not isinstance(value, collections.abc.Mapping):
        raise mcf.CustomError(f"Expected a mapping for {shape!r}, got {value!r}")
    pairs = []
    for key, item in value.items():
        key_text = _render(key, shape.key, _pair_reserved)
        item_text = _render(item, shape.value, _pair_reserved)
        pairs.append(f"{key_text}{mcf.PAIR_DELIMITER}{item_text}")
    return mcf.ELEMENT_DELIMITER.join(pairs)


def _render(value, shape, reserved):
    """Render a leaf value as text for a position inside a field.

    Args:
        value: Value to render
        shape: (Shape) Leaf shape, scalar, bytes or option of those
        reserved: (str) Delimiters significant at this position

    Returns:
        (str) Text for the value
    """
    match shape:
        case mcf.Option():
            if value is None:
                return ""
            text = _render(value, shape.inner, reserved)
            if text == "":
                raise mcf.CustomError(f"Empty text for present {shape!r} would decode as absent")
            return text
        case mcf.Scalar():
            if value is None:
                raise mcf.UnsupportedConstruct(f"Cannot encode None as {shape!r}")
            text = format_scalar(shape.kind, value)
        case mcf.Bytes():
            if value is None:
                raise mcf.UnsupportedConstruct(f"Cannot encode None as {shape!r}")
            text = shape.codec.encode(value)
        case _:
            raise mcf.UnsupportedConstruct(f"{shape!r} cannot be nested inside a field")

    for char in reserved:
        if char in text:
            raise mcf.CustomError(f"Text {text!r} contains reserved delimiter {char!r}")
    return text


def format_scalar(kind, value):
    """Render a scalar in its canonical textual form.

    Args:
        kind: (str) Scalar kind name
        value: (bool | int | float | str) Value to render

    Returns:
        (str) Text for the value

    Raises:
        mcf.CustomError: If the value does not fit the kind
    """
    if kind == "bool":
        if not isinstance(value, bool):
            raise mcf.CustomError(f"Expected bool, got {value!r}")
        return "true" if value else "false"

    if kind in ("str", "char"):
        if not isinstance(value, str):
            raise mcf.CustomError(f"Expected {kind}, got {value!r}")
        if kind == "char" and len(value) != 1:
            raise mcf.CustomError(f"Expected a single character, got {value!r}")
        return value

    bounds = INT_RANGES.get(kind)
    if bounds is not None:
        if not isinstance(value, int) or isinstance(value, bool):
            raise mcf.CustomError(f"Expected {kind}, got {value!r}")
        low, high = bounds
        if (low is not None and value < low) or (high is not None and value > high):
            raise mcf.CustomError(f"Number {value} out of range for {kind}")
        return str(value)

    if kind in FLOAT_KINDS:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise mcf.CustomError(f"Expected {kind}, got {value!r}")
        try:
            value = float(value)
        except OverflowError as e:
            raise mcf.CustomError(f"Number {value} out of range for {kind}") from e
        if kind == "f32" and math.isfinite(value) and abs(value) > F32_MAX:
            raise mcf.CustomError(f"Number {value!r} out of range for {kind}")
        return repr(value)

    raise mcf.ShapeError(f"Unknown scalar kind {kind!r}")
