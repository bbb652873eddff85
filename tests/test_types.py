import math

import pytest

from minilang.errors import MiniError
from minilang.types import (
    Float32, INT_MAX, INT_MIN, TypeSpec, coerce, format_literal, format_value,
    to_bool, type_name, wrap_int32,
)


def test_type_names_of_runtime_values():
    assert type_name(1) == 'int'
    assert type_name(Float32(1.5)) == 'float'
    assert type_name(1.5) == 'double'
    assert type_name('x') == 'string'
    assert type_name(None) is None


def test_wrap_int32():
    assert wrap_int32(INT_MAX + 1) == INT_MIN
    assert wrap_int32(INT_MIN - 1) == INT_MAX
    assert wrap_int32(42) == 42


def test_float32_is_single_precision():
    assert Float32(0.1) != 0.1
    assert Float32(0.5) == 0.5
    assert Float32(1e39) == math.inf


def test_coerce_double_to_int_rounds_half_to_even():
    assert coerce(TypeSpec.integer(), 2.5) == 2
    assert coerce(TypeSpec.integer(), 3.5) == 4
    assert coerce(TypeSpec.integer(), -2.5) == -2
    assert coerce(TypeSpec.integer(), 2.7) == 3


def test_coerce_numeric_widening():
    value = coerce(TypeSpec.double(), 3)
    assert value == 3.0 and type_name(value) == 'double'
    value = coerce(TypeSpec.single(), 3)
    assert type_name(value) == 'float'


def test_coerce_out_of_range_to_int_overflows():
    with pytest.raises(MiniError) as excinfo:
        coerce(TypeSpec.integer(), 1e10)
    assert excinfo.value.kind == 'Overflow'
    with pytest.raises(MiniError) as excinfo:
        coerce(TypeSpec.integer(), math.nan)
    assert excinfo.value.kind == 'Overflow'


def test_coerce_string_and_number_do_not_mix():
    with pytest.raises(MiniError) as excinfo:
        coerce(TypeSpec.integer(), 'abc')
    assert excinfo.value.kind == 'TypeMismatch'
    with pytest.raises(MiniError) as excinfo:
        coerce(TypeSpec.string(), 5)
    assert excinfo.value.kind == 'TypeMismatch'


def test_coerce_absent_value_gives_zero():
    assert coerce(TypeSpec.integer(), None) == 0
    assert coerce(TypeSpec.double(), None) == 0.0
    assert coerce(TypeSpec.string(), None) == ''
    assert coerce(TypeSpec.void(), 5) is None


def test_truthiness():
    assert to_bool(1)
    assert not to_bool(0)
    assert not to_bool(0.0)
    assert to_bool('')
    assert not to_bool(None)


@pytest.mark.parametrize('value, text', [
    (42, '42'),
    (-7, '-7'),
    (3.5, '3.5'),
    (1024.0, '1024'),
    (0.0, '0'),
    (1.0 / 3.0, '0.333333333333333'),
    (0.1 + 0.2, '0.3'),
    (1e20, '1E+20'),
    (0.0001, '0.0001'),
    (0.00001, '1E-05'),
    (math.inf, 'Infinity'),
    (-math.inf, '-Infinity'),
    (math.nan, 'NaN'),
    (Float32(1.0 / 3.0), '0.3333333'),
    (Float32(0.1), '0.1'),
    ('text', 'text'),
    (None, ''),
])
def test_format_value(value, text):
    assert format_value(value) == text


def test_format_literal_quotes_strings():
    assert format_literal('hi') == '"hi"'
    assert format_literal(5) == '5'
