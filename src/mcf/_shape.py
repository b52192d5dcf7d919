"""Shape definitions

Shapes describe the structure a value takes in the modular crypt format.
They are supplied by calling code and interpreted by `decode` and `encode`,
which never look at anything other than the shape to pick delimiters.
"""

import mcf


__all__ = [
    "Shape",
    "Scalar",
    "Bytes",
    "Option",
    "Sequence",
    "Tuple",
    "Map",
    "Struct",
    "Enum",
    "VariantShape",
    "Unit",
    "Newtype",
    "TupleVariant",
    "StructVariant",
    "SCALAR_KINDS",
    "BOOL",
    "STR",
    "CHAR",
    "INT",
    "U8",
    "U16",
    "U32",
    "U64",
    "I8",
    "I16",
    "I32",
    "I64",
    "F32",
    "F64",
    "FLOAT",
]


# Inclusive bounds for the sized integer kinds, None means unbounded
INT_RANGES = {
    "int": (None, None),
    "u8": (0, 2**8 - 1),
    "u16": (0, 2**16 - 1),
    "u32": (0, 2**32 - 1),
    "u64": (0, 2**64 - 1),
    "i8": (-(2**7), 2**7 - 1),
    "i16": (-(2**15), 2**15 - 1),
    "i32": (-(2**31), 2**31 - 1),
    "i64": (-(2**63), 2**63 - 1),
}

FLOAT_KINDS = ("f32", "f64", "float")

# Largest finite single precision value
F32_MAX = 3.4028234663852886e38

SCALAR_KINDS = ("bool", "str", "char", *INT_RANGES, *FLOAT_KINDS)


class Shape:
    """Base class for all shapes.

    Shapes are immutable and compare equal when they describe the same
    structure.
    """

    __slots__ = ()

    def _key(self):
        raise NotImplementedError

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((type(self).__name__, self._key()))

    def __repr__(self):
        return f"{type(self).__name__}<{mcf.format_shape(self)}>"


class Scalar(Shape):
    """A single textual value: number, boolean, character or string.

    Args:
        kind: (str) One of `SCALAR_KINDS`

    Attributes:
        kind: (str) Scalar kind name
    """

    __slots__ = ("kind",)

    def __init__(self, kind):
        if kind not in SCALAR_KINDS:
            raise mcf.ShapeError(f"Unknown scalar kind {kind!r}")
        self.kind = kind

    def _key(self):
        return self.kind

    @property
    def bounds(self):
        """(tuple | None) Inclusive integer range, or None for non-integers."""
        return INT_RANGES.get(self.kind)


class Bytes(Shape):
    """A byte field rendered through a byte codec.

    Args:
        codec: (ByteCodec | None) Codec to use, defaults to `mcf.BASE64`

    Attributes:
        codec: (ByteCodec) Codec used for this field
    """

    __slots__ = ("codec",)

    def __init__(self, codec=None):
        self.codec = codec if codec is not None else mcf.BASE64

    def _key(self):
        return self.codec


class Option(Shape):
    """A value that may be absent, written as an empty field.

    Args:
        inner: (Shape) Shape of the present value
    """

    __slots__ = ("inner",)

    def __init__(self, inner):
        self.inner = _check_shape(inner)

    def _key(self):
        return self.inner


class Sequence(Shape):
    """A comma separated list of values within one field.

    Args:
        inner: (Shape) Shape of every element
        allow_empty: (bool) Empty field means an empty list. When False the
            empty field is decoded as one element.

    Attributes:
        inner: (Shape) Shape of every element
        allow_empty: (bool) Empty field means an empty list
    """

    __slots__ = ("inner", "allow_empty")

    def __init__(self, inner, allow_empty=True):
        self.inner = _check_shape(inner)
        self.allow_empty = allow_empty

    def _key(self):
        return (self.inner, self.allow_empty)


class Tuple(Shape):
    """A fixed number of comma separated values within one field.

    Args:
        items: (list[Shape]) Shapes of each position
    """

    __slots__ = ("items",)

    def __init__(self, items):
        self.items = tuple(_check_shape(item) for item in items)
        if not self.items:
            raise mcf.ShapeError("Tuple needs at least one item")

    def _key(self):
        return self.items


class Map(Shape):
    """Ordered `key=value` pairs joined by commas within one field.

    Args:
        key: (Shape) Shape of the keys
        value: (Shape) Shape of the values
    """

    __slots__ = ("key", "value")

    def __init__(self, key, value):
        self.key = _check_shape(key)
        self.value = _check_shape(value)

    def _key(self):
        return (self.key, self.value)


class Struct(Shape):
    """Named fields, each occupying its own `$` separated field.

    Field identity is positional. The names are only used to build the
    decoded value and to read the fields back out when encoding.

    Args:
        fields: (list[tuple[str, Shape]] | dict[str, Shape]) Ordered fields
        record: (callable | None) Called with the decoded fields as keyword
            arguments, such as a dataclass. Without it a dict is produced.

    Attributes:
        fields: (tuple[tuple[str, Shape]]) Ordered field definitions
        record: (callable | None) Record type built on decode
    """

    __slots__ = ("fields", "record")

    def __init__(self, fields, record=None):
        self.fields = _check_fields(fields)
        self.record = record

    def _key(self):
        return (self.fields, self.record)

    @property
    def names(self):
        """(list[str]) Field names in declared order."""
        return [name for name, _ in self.fields]


class VariantShape:
    """Base class for the payload description of an enum variant."""

    __slots__ = ()

    def _key(self):
        return ()

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((type(self).__name__, self._key()))

    def __repr__(self):
        return f"{type(self).__name__}<{mcf.format_variant(self)}>"


class Unit(VariantShape):
    """Variant with no payload, only the discriminant is written."""

    __slots__ = ()


class Newtype(VariantShape):
    """Variant wrapping exactly one value.

    Args:
        inner: (Shape) Shape of the payload
    """

    __slots__ = ("inner",)

    def __init__(self, inner):
        self.inner = _check_shape(inner)

    def _key(self):
        return self.inner


class TupleVariant(VariantShape):
    """Variant with positional payload fields, one `$` field each.

    Args:
        items: (list[Shape]) Shapes of each payload field
    """

    __slots__ = ("items",)

    def __init__(self, items):
        self.items = tuple(_check_shape(item) for item in items)

    def _key(self):
        return self.items


class StructVariant(VariantShape):
    """Variant with named payload fields, decoded like a `Struct`.

    Args:
        fields: (list[tuple[str, Shape]] | dict[str, Shape]) Ordered fields
        record: (callable | None) Record type built on decode

    Attributes:
        struct: (Struct) Equivalent struct shape for the payload
    """

    __slots__ = ("struct",)

    def __init__(self, fields, record=None):
        self.struct = Struct(fields, record)

    def _key(self):
        return self.struct


class Enum(Shape):
    """One of several named variants, selected by a discriminant field.

    Variants may be given as `VariantShape` instances, or as None for a unit
    variant, or as a plain `Shape` for a newtype variant.

    Args:
        variants: (list[tuple[str, VariantShape]] | dict) Declared variants

    Attributes:
        variants: (dict[str, VariantShape]) Variants by discriminant
    """

    __slots__ = ("variants",)

    def __init__(self, variants):
        if isinstance(variants, dict):
            variants = variants.items()
        self.variants = {}
        for name, variant in variants:
            if not isinstance(name, str) or not name:
                raise mcf.ShapeError(f"Invalid variant name {name!r}")
            if mcf.FIELD_DELIMITER in name:
                raise mcf.ShapeError(f"Variant name {name!r} contains a field delimiter")
            if name in self.variants:
                raise mcf.ShapeError(f"Duplicate variant {name!r}")
            if variant is None:
                variant = Unit()
            elif isinstance(variant, Shape):
                variant = Newtype(variant)
            elif not isinstance(variant, VariantShape):
                raise mcf.ShapeError(f"Variant {name!r} is not a shape: {variant!r}")
            self.variants[name] = variant
        if not self.variants:
            raise mcf.ShapeError("Enum needs at least one variant")

    def _key(self):
        return tuple(self.variants.items())


def _check_shape(shape):
    """Validate a nested shape argument."""
    if not isinstance(shape, Shape):
        raise mcf.ShapeError(f"Expected a shape, got {shape!r}")
    return shape


def _check_fields(fields):
    """Normalize struct field definitions to a tuple of pairs."""
    if isinstance(fields, dict):
        fields = fields.items()
    result = []
    seen = set()
    for name, shape in fields:
        if not isinstance(name, str) or not name.isidentifier():
            raise mcf.ShapeError(f"Invalid field name {name!r}")
        if name in seen:
            raise mcf.ShapeError(f"Duplicate field {name!r}")
        seen.add(name)
        result.append((name, _check_shape(shape)))
    return tuple(result)


# Builtin scalar shapes
BOOL = Scalar("bool")
STR = Scalar("str")
CHAR = Scalar("char")
INT = Scalar("int")
U8 = Scalar("u8")
U16 = Scalar("u16")
U32 = Scalar("u32")
U64 = Scalar("u64")
I8 = Scalar("i8")
I16 = Scalar("i16")
I32 = Scalar("i32")
I64 = Scalar("i64")
F32 = Scalar("f32")
F64 = Scalar("f64")
FLOAT = Scalar("float")
