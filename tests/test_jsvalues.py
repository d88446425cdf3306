"""Tests for the JavaScript value model used in constant folding."""

import math

import pytest

from estree_analyzer import jsvalues as js
from estree_analyzer.jsvalues import UNDEFINED, JSThrow, Symbol


def test_typeof():
    assert js.typeof(UNDEFINED) == "undefined"
    assert js.typeof(None) == "object"
    assert js.typeof(True) == "boolean"
    assert js.typeof(1.5) == "number"
    assert js.typeof("s") == "string"
    assert js.typeof(Symbol("s")) == "symbol"
    assert js.typeof(len) == "function"
    assert js.typeof([]) == "object"


def test_truthy():
    assert not js.truthy("")
    assert not js.truthy(math.nan)
    assert not js.truthy(0)
    assert not js.truthy(UNDEFINED)
    assert js.truthy([])
    assert js.truthy({})
    assert js.truthy("0")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("", 0),
        ("  42\n", 42),
        ("0x1F", 31),
        ("0b101", 5),
        ("1e3", 1000),
        ("-Infinity", -math.inf),
        (True, 1),
        (None, 0),
        ([5], 5),
    ],
)
def test_to_number(value, expected):
    assert js.to_number(value) == expected


def test_to_number_nan():
    for value in ["abc", "1,2", UNDEFINED, [1, 2], {}]:
        assert math.isnan(js.to_number(value))
    with pytest.raises(JSThrow):
        js.to_number(Symbol())


@pytest.mark.parametrize(
    "value,expected",
    [
        (0.1, "0.1"),
        (1.5, "1.5"),
        (-2.0, "-2"),
        (-0.0, "0"),
        (1e21, "1e+21"),
        (1e-7, "1e-7"),
        (123.456, "123.456"),
        (math.nan, "NaN"),
        (-math.inf, "-Infinity"),
    ],
)
def test_number_to_string(value, expected):
    assert js.number_to_string(value) == expected


def test_to_string():
    assert js.to_string(UNDEFINED) == "undefined"
    assert js.to_string(None) == "null"
    assert js.to_string(False) == "false"
    assert js.to_string([None, UNDEFINED, 1, [2, 3]]) == ",,1,2,3"
    assert js.to_string({"a": 1}) == "[object Object]"


def test_int32_conversions():
    assert js.to_int32(2**31) == -(2**31)
    assert js.to_int32(math.inf) == 0
    assert js.to_uint32(-1) == 2**32 - 1
    assert js.to_int32(-1.7) == -1


def test_property_access():
    assert js.get_property("abc", 1) == "b"
    assert js.get_property([1, 2], "length") == 2
    with pytest.raises(KeyError):
        js.get_property([1, 2], "5")
    with pytest.raises(KeyError):
        js.get_property("abc", "toUpperCase")
    with pytest.raises(KeyError):
        js.get_property({"a": 1}, "hasOwnProperty")
    assert js.get_property({"a": 1}, "a") == 1
    with pytest.raises(JSThrow):
        js.get_property(None, "x")
    assert js.has_property("a", {"a": 1})
    assert js.has_property(0, [1])
    with pytest.raises(JSThrow):
        js.has_property("a", "abc")
    with pytest.raises(JSThrow):
        js.instance_of(1, 2)


def test_equality():
    assert js.loose_equals(None, UNDEFINED)
    assert js.loose_equals("1", True)
    assert js.loose_equals(0, "")
    assert not js.strict_equals(None, UNDEFINED)
    assert not js.strict_equals(math.nan, math.nan)
    items = [1]
    assert js.strict_equals(items, items)
    assert not js.strict_equals([1], [1])


def test_relational():
    assert js.less_than("a", "b")
    assert js.less_than("2", 10)
    assert not js.less_equal(UNDEFINED, 1)
    assert not js.greater_equal(math.nan, 1)
    assert js.greater_equal(2, 2)


def test_arithmetic():
    assert js.add([1, 2], "x") == "1,2x"
    assert js.add(1, None) == 1
    assert math.isnan(js.add(1, UNDEFINED))
    assert js.divide(6, 3) == 2
    assert js.divide(1, -0.0) == -math.inf
    assert js.remainder(-7, 3) == -1
    assert js.exponent(2, 10) == 1024
    assert js.exponent(2, -1) == 0.5
    assert isinstance(js.multiply(2**30, 2**30), float)


def test_bitwise():
    assert js.bit_not(5) == -6
    assert js.shift_left(1, 31) == -(2**31)
    assert js.shift_right(-8, 1) == -4
    assert js.shift_right_unsigned(-1, 28) == 15
    assert js.bit_and(0xFF, "0x0F") == 15


def _is_negative_zero(n):
    return n == 0 and math.copysign(1.0, n) < 0


def test_negative_zero():
    assert _is_negative_zero(js.negate(0))
    assert not _is_negative_zero(js.negate(-0.0))
    assert _is_negative_zero(js.multiply(0, -1))
    assert _is_negative_zero(js.multiply(-3, 0))
    assert not _is_negative_zero(js.multiply(0, 0))
    assert _is_negative_zero(js.remainder(-4, 2))
    assert js.remainder(4, 2) == 0 and not _is_negative_zero(js.remainder(4, 2))
    assert _is_negative_zero(js.divide(0, -5))
    assert _is_negative_zero(js.to_number("-0"))
    assert js.divide(1, js.negate(0)) == -math.inf
    assert js.to_string(js.negate(0)) == "0"
