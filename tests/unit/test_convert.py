# tests/unit/test_convert.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""Tests for the scalar coercion matrix."""

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from anyvalue.core.convert import (
    coerce,
    format_double,
    from_native,
    integer_bounds,
    parse_double,
    parse_integer,
    round_float32,
    saturate_float,
    to_double,
    to_integer,
    to_text,
    wrap_integer,
)
from anyvalue.core.errors import BadAnyAccessError
from anyvalue.core.kinds import Kind
from anyvalue.core.tagged import SequenceSlots, TaggedValue

# -----------------------------------------------------------------------------
# INTEGER NARROWING
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,width,signed,expected",
    [
        (2**31, 32, True, -(2**31)),
        (-1, 8, False, 255),
        (300, 8, True, 44),
        (300, 8, False, 44),
        (200, 8, True, -56),
        (2**64 + 5, 64, True, 5),
        (2**63, 64, True, -(2**63)),
        (2**63, 64, False, 2**63),
        (-(2**15) - 1, 16, True, 2**15 - 1),
    ],
)
def test_wrap_integer(value, width, signed, expected):
    assert wrap_integer(value, width, signed) == expected


@pytest.mark.property
@given(st.integers(), st.sampled_from([8, 16, 32, 64]), st.booleans())
def test_wrap_integer_is_twos_complement(value, width, signed):
    low, high = integer_bounds(width, signed)
    wrapped = wrap_integer(value, width, signed)
    assert low <= wrapped <= high
    assert (wrapped - value) % (1 << width) == 0


# -----------------------------------------------------------------------------
# FLOAT TO INTEGER
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,width,signed,expected",
    [
        (3.9, 64, True, 3),
        (-3.9, 64, True, -3),
        (1e30, 32, True, 2**31 - 1),
        (-1e30, 32, True, -(2**31)),
        (math.inf, 64, True, 2**63 - 1),
        (-math.inf, 64, True, -(2**63)),
        (-5.0, 8, False, 0),
        (255.99, 8, False, 255),
    ],
)
def test_saturate_float(value, width, signed, expected):
    assert saturate_float(value, width, signed) == expected


def test_saturate_float_rejects_nan():
    with pytest.raises(BadAnyAccessError):
        saturate_float(math.nan)


# -----------------------------------------------------------------------------
# SINGLE PRECISION
# -----------------------------------------------------------------------------


def test_round_float32():
    assert round_float32(0.1) != 0.1
    assert round_float32(0.1) == pytest.approx(0.1, rel=1e-7)
    assert round_float32(123.0) == 123.0


def test_round_float32_overflows_to_infinity():
    assert round_float32(1e40) == math.inf
    assert round_float32(-1e40) == -math.inf


@pytest.mark.parametrize(
    "value,width,expected",
    [
        (0.1, 64, "0.1"),
        (100.0, 64, "100.0"),
        (-2.5, 64, "-2.5"),
        (1e300, 64, "1e+300"),
        (round_float32(0.1), 32, "0.1"),
        (round_float32(123.0), 32, "123.0"),
        (round_float32(3.14159), 32, "3.14159"),
        (math.inf, 32, "inf"),
    ],
)
def test_format_double(value, width, expected):
    assert format_double(value, width) == expected


# -----------------------------------------------------------------------------
# TEXT PARSING
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("text,expected", [("42", 42), ("-7", -7), ("+3", 3), ("007", 7)])
def test_parse_integer(text, expected):
    assert parse_integer(text) == expected


@pytest.mark.parametrize("text", ["4.2", "", " 1", "0x10", "1_000", "abc", "--1"])
def test_parse_integer_rejects_malformed_text(text):
    with pytest.raises(BadAnyAccessError):
        parse_integer(text)


@pytest.mark.parametrize(
    "text,expected", [("3.5", 3.5), ("1e3", 1000.0), (".5", 0.5), ("-2.", -2.0), ("42", 42.0), ("inf", math.inf)]
)
def test_parse_double(text, expected):
    assert parse_double(text) == expected


@pytest.mark.parametrize("text", ["abc", "1.2.3", "", "1_0", "e5", "0x1p3"])
def test_parse_double_rejects_malformed_text(text):
    with pytest.raises(BadAnyAccessError):
        parse_double(text)


# -----------------------------------------------------------------------------
# READ ACCESSORS
# -----------------------------------------------------------------------------


def test_to_integer_by_kind():
    assert to_integer(TaggedValue(Kind.INT64, -9)) == -9
    assert to_integer(TaggedValue(Kind.UINT64, 2**64 - 1)) == 2**64 - 1
    assert to_integer(TaggedValue(Kind.DOUBLE, -2.7)) == -2
    assert to_integer(TaggedValue(Kind.CHAR, ord("A"))) == 65
    assert to_integer(TaggedValue(Kind.STRING, "12")) == 12


def test_to_integer_of_wide_text_wraps_to_64_bits():
    assert to_integer(TaggedValue(Kind.STRING, str(2**63))) == -(2**63)


def test_to_double_by_kind():
    assert to_double(TaggedValue(Kind.INT64, 3)) == 3.0
    assert to_double(TaggedValue(Kind.CHAR, 66)) == 66.0
    assert to_double(TaggedValue(Kind.STRING, "2.25")) == 2.25


def test_to_text_by_kind():
    assert to_text(TaggedValue(Kind.INT64, -(2**31))) == "-2147483648"
    assert to_text(TaggedValue(Kind.DOUBLE, 0.5)) == "0.5"
    assert to_text(TaggedValue(Kind.CHAR, ord("A"))) == "A"
    assert to_text(TaggedValue(Kind.STRING, "Jungle Book")) == "Jungle Book"


@pytest.mark.parametrize("accessor", [to_integer, to_double, to_text])
@pytest.mark.parametrize(
    "value",
    [
        TaggedValue(),
        TaggedValue(Kind.SEQUENCE, SequenceSlots()),
        TaggedValue(Kind.MAP, {}),
        TaggedValue(Kind.OBJECT, b"", adapter_id="x"),
    ],
)
def test_accessors_reject_non_scalars(accessor, value):
    with pytest.raises(BadAnyAccessError) as info:
        accessor(value)
    assert info.value.kind == value.kind


def test_malformed_text_is_never_zero():
    with pytest.raises(BadAnyAccessError):
        to_integer(TaggedValue(Kind.STRING, "twelve"))
    with pytest.raises(BadAnyAccessError):
        to_double(TaggedValue(Kind.STRING, "twelve"))


# -----------------------------------------------------------------------------
# NATIVE VALUES
# -----------------------------------------------------------------------------


def test_from_native_kinds():
    assert from_native(True).kind == Kind.INT64
    assert from_native(-5).kind == Kind.INT64
    assert from_native(2**63).kind == Kind.UINT64
    assert from_native(1.5).kind == Kind.DOUBLE
    assert from_native("x").kind == Kind.STRING
    assert from_native([1, 2]).kind == Kind.SEQUENCE
    assert from_native({"a": 1}).kind == Kind.MAP


@pytest.mark.parametrize("value", [2**64, -(2**63) - 1, None, b"raw", object(), {1: "a"}])
def test_from_native_rejects_values_without_a_kind(value):
    with pytest.raises(BadAnyAccessError):
        from_native(value)


def test_from_native_copies_tagged_values():
    original = TaggedValue(Kind.MAP, {"a": TaggedValue(Kind.INT64, 1)})
    copied = from_native(original)
    copied.payload["a"].payload = 2
    assert original.payload["a"].payload == 1


# -----------------------------------------------------------------------------
# COERCION INTO DECLARED TAGS
# -----------------------------------------------------------------------------


def test_coerce_into_integer_tags(registry):
    int32 = registry.resolve("int")
    assert coerce("42", int32).payload == 42
    assert coerce(3.99, int32).payload == 3
    assert coerce(-3.99, int32).payload == -3
    assert coerce(2**40, int32).payload == 0
    assert coerce(True, int32).payload == 1
    assert coerce(TaggedValue(Kind.CHAR, 65), int32).payload == 65
    assert coerce(300, registry.resolve("uchar")).payload == 44
    assert coerce(-1, registry.resolve("uchar")).payload == 255


def test_coerce_into_integer_keeps_declared_tag(registry):
    value = coerce(7, registry.resolve("short"))
    assert value.tag is registry.resolve("short")
    assert value.kind == Kind.INT64
    assert value.width == 16


def test_coerce_into_double_tags(registry):
    assert coerce(1, registry.resolve("double")).payload == 1.0
    assert coerce("2.5", registry.resolve("double")).payload == 2.5
    assert coerce(0.1, registry.resolve("float")).payload == round_float32(0.1)


def test_coerce_into_char(registry):
    char = registry.resolve("char")
    assert coerce("A", char).payload == 65
    assert coerce(66, char).payload == 66
    assert coerce(67.8, char).payload == 67
    for bad in ("AB", "", -1, 0x110000):
        with pytest.raises(BadAnyAccessError):
            coerce(bad, char)


def test_coerce_into_string(registry):
    string = registry.resolve("string")
    assert coerce(5, string).payload == "5"
    assert coerce(2.5, string).payload == "2.5"
    assert coerce(TaggedValue(Kind.CHAR, 90), string).payload == "Z"


def test_coerce_into_containers(registry):
    ints = coerce([1, "2", 3.5], registry.resolve("intvec"))
    assert [child.payload for _, child in ints.payload.items()] == [1, 2, 3]
    strings = coerce({"a": 1}, registry.resolve("smap"))
    assert strings.payload["a"].payload == "1"


@pytest.mark.parametrize(
    "value,tag_name",
    [
        ("x", "int"),
        ([1], "int"),
        (5, "dblvec"),
        ([1], "smap"),
        ({"a": 1}, "strvec"),
        (["x"], "intvec"),
        (TaggedValue(), "double"),
        (5, "geo_point"),
    ],
)
def test_coerce_failures(registry, value, tag_name):
    with pytest.raises(BadAnyAccessError):
        coerce(value, registry.resolve(tag_name))


def test_coerce_untyped_keeps_own_kind():
    assert coerce("5", None).kind == Kind.STRING
    assert coerce(5, None).kind == Kind.INT64
