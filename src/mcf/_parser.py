"""Parse and format the compact shape notation.

The notation is a convenient way for calling code to describe hash layouts
without building shape objects by hand.

    mcf.parse_shape("{p: u8, r: u8?, params: map<str, str>, hash: bytes}")

Forms:
- scalar kind names: `bool str char int u8 .. u64 i8 .. i64 f32 f64 float`
- `bytes`, or `bytes(codec)` with codec `base64`, `bcrypt64` or `bcrypt`
- `T?` or `option<T>`
- `[T]` or `seq<T>`, `seq1<T>` for sequences that are never empty
- `(T, U, ...)` for a comma separated tuple
- `map<K, V>`
- `{name: T, ...}` for structs
- `enum {Unit, Newtype(T), Tuple(T, U), Struct {name: T}}`
"""

__all__ = ["parse_shape", "format_shape", "format_variant", "CODECS"]

import lark

import mcf


CODECS = {
    "base64": mcf.BASE64,
    "bcrypt64": mcf.Base64Codec(mcf.BCRYPT_ALPHABET),
    "bcrypt": mcf.BCRYPT,
}

_parsers = {}


def parse_shape(text, record=None):
    """Parse shape notation into a Shape.

    Args:
        text: (str) Shape notation
        record: (callable | None) Record type for a top level struct

    Returns:
        (Shape) The described shape

    Raises:
        mcf.ParseError: If the text contains invalid syntax
        mcf.ShapeError: If the shape is invalid, like an unknown scalar kind
    """
    parser = _lark_parser("shape")
    try:
        tree = parser.parse(text)
    except lark.exceptions.LarkError as e:
        position = getattr(e, "pos_in_stream", None)
        raise mcf.ParseError(f"Invalid shape notation: {e}", position=position) from e

    shape = _convert_tree(tree.children[0])
    if record is not None:
        if not isinstance(shape, mcf.Struct):
            raise mcf.ShapeError(f"Record given for non-struct shape {text!r}")
        shape = mcf.Struct(shape.fields, record)
    return shape


def format_shape(shape):
    """Render a shape as notation.

    Record types are not part of the notation and are dropped.

    Args:
        shape: (Shape) Shape to render

    Returns:
        (str) Notation text
    """
    match shape:
        case mcf.Scalar():
            return shape.kind
        case mcf.Bytes():
            if shape.codec == mcf.BASE64:
                return "bytes"
            for name, codec in CODECS.items():
                if codec == shape.codec:
                    return f"bytes({name})"
            return f"bytes({shape.codec!r})"
        case mcf.Option():
            return f"{format_shape(shape.inner)}?"
        case mcf.Sequence():
            if shape.allow_empty:
                return f"[{format_shape(shape.inner)}]"
            return f"seq1<{format_shape(shape.inner)}>"
        case mcf.Tuple():
            return "(" + ", ".join(format_shape(item) for item in shape.items) + ")"
        case mcf.Map():
            return f"map<{format_shape(shape.key)}, {format_shape(shape.value)}>"
        case mcf.Struct():
            return _format_fields(shape.fields)
        case mcf.Enum():
            variants = []
            for name, variant in shape.variants.items():
                variants.append(name + format_variant(variant))
            return "enum {" + ", ".join(variants) + "}"
    raise mcf.ShapeError(f"Cannot format unknown shape {shape!r}")


def format_variant(variant):
    """Render the payload part of a variant, without its name."""
    match variant:
        case mcf.Unit():
            return ""
        case mcf.Newtype():
            return f"({format_shape(variant.inner)})"
        case mcf.TupleVariant():
            return "(" + ", ".join(format_shape(item) for item in variant.items) + ")"
        case mcf.StructVariant():
            return " " + _format_fields(variant.struct.fields)
    raise mcf.ShapeError(f"Cannot format unknown variant {variant!r}")


def _format_fields(fields):
    return "{" + ", ".join(f"{name}: {format_shape(shape)}" for name, shape in fields) + "}"


def _convert_tree(tree):
    """Convert a lark tree into a shape.

    Args:
        tree: (lark.Tree) Parsed shape node

    Returns:
        (Shape) Converted shape
    """
    kids = tree.children
    match tree.data:
        case "named":
            name = kids[0].value
            if name == "bytes":
                return mcf.Bytes()
            return mcf.Scalar(name)

        case "codec":
            name, codec_name = kids[0].value, kids[1].value
            if name != "bytes":
                raise mcf.ShapeError(f"Only bytes takes a codec, got {name!r}")
            codec = CODECS.get(codec_name)
            if codec is None:
                raise mcf.ShapeError(f"Unknown byte codec {codec_name!r}")
            return mcf.Bytes(codec)

        case "generic":
            name = kids[0].value
            inner = _convert_tree(kids[1])
            match name:
                case "option":
                    return mcf.Option(inner)
                case "seq":
                    return mcf.Sequence(inner)
                case "seq1":
                    return mcf.Sequence(inner, allow_empty=False)
            raise mcf.ShapeError(f"Unknown shape {name!r} with one parameter")

        case "generic_pair":
            name = kids[0].value
            if name != "map":
                raise mcf.ShapeError(f"Unknown shape {name!r} with two parameters")
            return mcf.Map(_convert_tree(kids[1]), _convert_tree(kids[2]))

        case "optional":
            return mcf.Option(_convert_tree(kids[0]))

        case "sequence":
            return mcf.Sequence(_convert_tree(kids[0]))

        case "tuple":
            return mcf.Tuple([_convert_tree(kid) for kid in kids])

        case "struct":
            return mcf.Struct(_convert_fields(kids))

        case "enum":
            return mcf.Enum([_convert_variant(kid) for kid in kids])

    raise ValueError(f"Unhandled grammar rule: {tree.data}")


def _convert_fields(kids):
    """Convert field trees into (name, shape) pairs."""
    return [(kid.children[0].value, _convert_tree(kid.children[1])) for kid in kids]


def _convert_variant(tree):
    """Convert a variant tree into a (name, VariantShape) pair."""
    name = tree.children[0].value
    kids = tree.children[1:]
    match tree.data:
        case "unit_variant":
            return name, mcf.Unit()
        case "tuple_variant":
            if len(kids) == 1:
                return name, mcf.Newtype(_convert_tree(kids[0]))
            return name, mcf.TupleVariant([_convert_tree(kid) for kid in kids])
        case "struct_variant":
            return name, mcf.StructVariant(_convert_fields(kids))
    raise ValueError(f"Unhandled grammar rule: {tree.data}")


def _lark_parser(name):
    """Load a grammar from the lark directory, built once per process."""
    parser = _parsers.get(name)
    if parser is None:
        parser = lark.Lark.open(
            f"lark/{name}.lark", rel_to=__file__, parser="lalr", propagate_positions=True
        )
        _parsers[name] = parser
    return parser
