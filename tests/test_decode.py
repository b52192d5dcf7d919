"""Tests for decoding hash text into values."""

import dataclasses

import pytest

import mcf
import mcftest


TEST_STRUCT = mcf.Struct([
    ("p", mcf.U8),
    ("r", mcf.Option(mcf.U8)),
    ("params", mcf.Map(mcf.STR, mcf.STR)),
    ("hash", mcf.Bytes()),
])

TEST_ENUM = mcf.Enum([
    ("First", mcf.StructVariant([("a", mcf.U8), ("b", mcf.U8)])),
    ("Second", mcf.Newtype(mcf.STR)),
    ("Third", mcf.TupleVariant([mcf.U8, mcf.BOOL])),
    ("Fourth", mcf.Unit()),
])


def test_decode_struct():
    value = mcf.decode("$12$5$x=xylo,y=yell$EiM0", TEST_STRUCT)
    assert value == {
        "p": 12,
        "r": 5,
        "params": {"x": "xylo", "y": "yell"},
        "hash": b"\x12\x23\x34",
    }
    assert list(value) == ["p", "r", "params", "hash"]
    assert list(value["params"]) == ["x", "y"]


def test_decode_struct_absent_option():
    value = mcf.decode("$12$$x=xylo$EiM0", TEST_STRUCT)
    assert value["r"] is None


def test_decode_struct_variant():
    value = mcf.decode("$First$38$128", TEST_ENUM)
    assert value == mcf.Variant("First", {"a": 38, "b": 128})


@mcftest.params(
    "text value",
    newtype=("$Second$hello", mcf.Variant("Second", "hello")),
    tuple=("$Third$7$true", mcf.Variant("Third", (7, True))),
    unit=("$Fourth", mcf.Variant("Fourth")),
    trailing=("$Fourth$ignored", mcf.Variant("Fourth")),
)
def test_decode_variants(key, text, value):
    assert mcf.decode(text, TEST_ENUM) == value


@mcftest.params(
    "text name",
    bogus=("$bogus$1", "bogus"),
    case=("$first$38$128", "first"),
    empty=("$$1", ""),
)
def test_decode_unknown_variant(key, text, name):
    with pytest.raises(mcf.UnknownVariant) as info:
        mcf.decode(text, TEST_ENUM)
    assert info.value.name == name


@mcftest.params(
    "shape text value",
    u8=(mcf.U8, "$255", 255),
    u8_plus=(mcf.U8, "$+7", 7),
    i8=(mcf.I8, "$-128", -128),
    u64=(mcf.U64, "$18446744073709551615", 2**64 - 1),
    int_big=(mcf.INT, "$123456789012345678901234567890", 123456789012345678901234567890),
    bool_true=(mcf.BOOL, "$true", True),
    bool_false=(mcf.BOOL, "$false", False),
    float=(mcf.F64, "$1.5", 1.5),
    float_exp=(mcf.F32, "$-2e3", -2000.0),
    float_int=(mcf.FLOAT, "$3", 3.0),
    float_inf=(mcf.F64, "$inf", float("inf")),
    f32_inf=(mcf.F32, "$-inf", float("-inf")),
    f32_max=(mcf.F32, "$3.4e38", 3.4e38),
    f64_beyond_f32=(mcf.F64, "$1e300", 1e300),
    char=(mcf.CHAR, "$x", "x"),
    str=(mcf.STR, "$hello world", "hello world"),
    str_empty=(mcf.STR, "$", ""),
)
def test_decode_scalars(key, shape, text, value):
    assert mcf.decode(text, shape) == value


@mcftest.params(
    "shape text",
    u8_overflow=(mcf.U8, "$256"),
    u8_negative=(mcf.U8, "$-1"),
    u8_negative_zero=(mcf.U8, "$-0"),
    u8_text=(mcf.U8, "$abc"),
    u8_empty=(mcf.U8, "$"),
    u8_space=(mcf.U8, "$ 1"),
    u8_underscore=(mcf.U8, "$1_0"),
    i8_underflow=(mcf.I8, "$-129"),
    bool_case=(mcf.BOOL, "$True"),
    bool_number=(mcf.BOOL, "$1"),
    float_text=(mcf.F64, "$1.5x"),
    float_underscore=(mcf.F64, "$1_000.0"),
    f32_overflow=(mcf.F32, "$1e39"),
    f32_overflow_negative=(mcf.F32, "$-3.5e38"),
    char_long=(mcf.CHAR, "$ab"),
    char_empty=(mcf.CHAR, "$"),
)
def test_decode_scalar_errors(key, shape, text):
    with pytest.raises(mcf.ParseError) as info:
        mcf.decode(text, shape)
    assert info.value.kind == shape.kind
    assert info.value.field == text[1:]


@mcftest.params(
    "text value",
    present=("$5", 5),
    absent=("$", None),
)
def test_decode_option(key, text, value):
    assert mcf.decode(text, mcf.Option(mcf.U8)) == value


def test_decode_option_of_sequence():
    shape = mcf.Option(mcf.Sequence(mcf.U8))
    assert mcf.decode("$1,2", shape) == [1, 2]
    assert mcf.decode("$", shape) is None


@mcftest.params(
    "text value",
    three=("$1,2,3", [1, 2, 3]),
    one=("$7", [7]),
    empty=("$", []),
)
def test_decode_sequence(key, text, value):
    assert mcf.decode(text, mcf.Sequence(mcf.U8)) == value


def test_decode_sequence_of_options():
    shape = mcf.Sequence(mcf.Option(mcf.U8))
    assert mcf.decode("$1,,3", shape) == [1, None, 3]


def test_decode_sequence_not_allowing_empty():
    shape = mcf.Sequence(mcf.STR, allow_empty=False)
    assert mcf.decode("$", shape) == [""]
    with pytest.raises(mcf.ParseError):
        mcf.decode("$", mcf.Sequence(mcf.U8, allow_empty=False))


def test_decode_sequence_bad_element():
    with pytest.raises(mcf.ParseError) as info:
        mcf.decode("$1,x,3", mcf.Sequence(mcf.U8))
    assert info.value.field == "x"


def test_decode_tuple():
    shape = mcf.Tuple([mcf.U8, mcf.STR, mcf.BOOL])
    assert mcf.decode("$1,a,true", shape) == (1, "a", True)
    with pytest.raises(mcf.MissingField):
        mcf.decode("$1,a", shape)
    with pytest.raises(mcf.CustomError):
        mcf.decode("$1,a,true,extra", shape)


@mcftest.params(
    "text value",
    pairs=("$m=262144,p=1,t=2", {"m": 262144, "p": 1, "t": 2}),
    single=("$m=1", {"m": 1}),
    empty=("$", {}),
)
def test_decode_map(key, text, value):
    assert mcf.decode(text, mcf.Map(mcf.STR, mcf.U32)) == value


def test_decode_map_preserves_order():
    value = mcf.decode("$z=1,a=2,m=3", mcf.Map(mcf.STR, mcf.STR))
    assert list(value) == ["z", "a", "m"]


def test_decode_map_optional_values():
    value = mcf.decode("$a=,b=2", mcf.Map(mcf.STR, mcf.Option(mcf.U8)))
    assert value == {"a": None, "b": 2}


@mcftest.params(
    "text",
    dangling_key="$a=1,b",
    only_key="$a",
)
def test_decode_map_missing_value(key, text):
    with pytest.raises(mcf.MissingField):
        mcf.decode(text, mcf.Map(mcf.STR, mcf.STR))


def test_decode_map_duplicate_keys():
    shape = mcf.Map(mcf.STR, mcf.U8)
    with pytest.raises(mcf.CustomError):
        mcf.decode("$a=1,a=2", shape)
    assert mcf.decode("$a=1,a=2", shape, duplicates="last") == {"a": 2}
    with pytest.raises(ValueError):
        mcf.decode("$a=1", shape, duplicates="first")


@mcftest.params(
    "shape text",
    struct_short=(TEST_STRUCT, "$12"),
    struct_no_params=(TEST_STRUCT, "$12$5"),
    struct_variant=(TEST_ENUM, "$First$38"),
    newtype=(TEST_ENUM, "$Second"),
)
def test_decode_missing_fields(key, shape, text):
    with pytest.raises(mcf.MissingField):
        mcf.decode(text, shape)


def test_decode_bytes_error():
    with pytest.raises(mcf.EncodingError):
        mcf.decode("$12$5$x=1$Ei*0", TEST_STRUCT)


def test_decode_requires_leading_delimiter():
    with pytest.raises(mcf.ParseError):
        mcf.decode("12$5", mcf.U8)


def test_decode_nested_struct_is_flat():
    shape = mcf.Struct([
        ("head", mcf.U8),
        ("inner", mcf.Struct([("a", mcf.STR), ("b", mcf.STR)])),
        ("tail", mcf.U8),
    ])
    value = mcf.decode("$1$x$y$2", shape)
    assert value == {"head": 1, "inner": {"a": "x", "b": "y"}, "tail": 2}


def test_decode_record():
    @dataclasses.dataclass
    class Params:
        p: int
        name: str

    shape = mcf.Struct([("p", mcf.U8), ("name", mcf.STR)], record=Params)
    assert mcf.decode("$3$abc", shape) == Params(3, "abc")


@dataclasses.dataclass
class Costed:
    cost: int

    def __post_init__(self):
        if self.cost < 4:
            raise ValueError("cost too low")


@dataclasses.dataclass
class Paired:
    a: int
    b: int


def test_decode_record_rejects_value():
    shape = mcf.Struct([("cost", mcf.U8)], record=Costed)
    assert mcf.decode("$10", shape) == Costed(10)
    with pytest.raises(mcf.CustomError) as info:
        mcf.decode("$2", shape)
    assert isinstance(info.value.__cause__, ValueError)


def test_decode_record_field_mismatch():
    shape = mcf.Struct([("a", mcf.U8)], record=Paired)
    with pytest.raises(mcf.CustomError) as info:
        mcf.decode("$1", shape)
    assert isinstance(info.value.__cause__, TypeError)


def test_decode_first_skips_rejecting_record():
    strict = mcf.Struct([("cost", mcf.U8)], record=Costed)
    loose = mcf.Struct([("cost", mcf.U8)])

    shape, value = mcf.decode_first("$2", [strict, loose])
    assert shape is loose
    assert value == {"cost": 2}

    with pytest.raises(mcf.CustomError):
        mcf.decode_first("$2", [strict])


def test_decode_from_cursor():
    cursor = mcf.FieldCursor.toplevel("$1$2$rest")
    assert mcf.decode(cursor, mcf.U8) == 1
    assert mcf.decode(cursor, mcf.U8) == 2
    assert cursor.next() == "rest"


def test_decode_is_repeatable():
    text = "$12$5$x=xylo,y=yell$EiM0"
    assert mcf.decode(text, TEST_STRUCT) == mcf.decode(text, TEST_STRUCT)


def test_decode_first():
    numbers = mcf.Struct([("a", mcf.U8), ("b", mcf.U8)])
    words = mcf.Struct([("a", mcf.STR), ("b", mcf.STR)])

    shape, value = mcf.decode_first("$1$2", [numbers, words])
    assert shape is numbers
    assert value == {"a": 1, "b": 2}

    shape, value = mcf.decode_first("$x$y", [numbers, words])
    assert shape is words

    with pytest.raises(mcf.MissingField):
        mcf.decode_first("$x", [numbers, words])
    with pytest.raises(ValueError):
        mcf.decode_first("$x", [])
