"""Type definitions and value helpers for MiniLang.

A MiniLang value is one of four scalar variants, represented by plain Python
objects so that they can be stored in environments without wrapping:

* ``int``      -> Int32, always kept inside the signed 32-bit range
* ``Float32``  -> single precision float (a ``float`` subclass)
* ``float``    -> Float64
* ``str``      -> String

``None`` stands for the absent value produced by calling a ``void``
function. This module also holds the conversion rules used for declarations,
assignments, parameter binding and return values, plus the formatting used
when values are printed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
import math
import struct

from .errors import ErrorVal, MiniError, OVERFLOW, TYPE_MISMATCH

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

# Significant digits used when printing floating point values.
FLOAT_DIGITS = 7
DOUBLE_DIGITS = 15


@dataclass(frozen=True)
class TypeSpec:
    """A declared MiniLang type.

    `kind` is one of 'int', 'float', 'double', 'string' or 'void'. Only
    function return types may be 'void'.
    """
    kind: str

    def __str__(self) -> str:
        return self.kind

    def __repr__(self) -> str:
        return self.kind

    @property
    def is_void(self) -> bool:
        return self.kind == 'void'

    # Convenience constructors
    @staticmethod
    def integer() -> 'TypeSpec':
        return TypeSpec('int')

    @staticmethod
    def single() -> 'TypeSpec':
        return TypeSpec('float')

    @staticmethod
    def double() -> 'TypeSpec':
        return TypeSpec('double')

    @staticmethod
    def string() -> 'TypeSpec':
        return TypeSpec('string')

    @staticmethod
    def void() -> 'TypeSpec':
        return TypeSpec('void')


def _round_to_single(x: float) -> float:
    try:
        return struct.unpack('f', struct.pack('f', x))[0]
    except OverflowError:
        return math.copysign(math.inf, x)


class Float32(float):
    """A float whose payload is rounded to IEEE single precision.

    Arithmetic on Float32 instances yields plain floats; callers re-wrap the
    result when the operation is defined to stay in single precision.
    """
    def __new__(cls, value: float = 0.0):
        return super().__new__(cls, _round_to_single(float(value)))

    def __repr__(self) -> str:
        return f"Float32({format_value(self)})"


Value = Union[int, float, str, None]


def wrap_int32(n: int) -> int:
    """Wrap an arbitrary integer into the signed 32-bit range."""
    return (n - INT_MIN) % 2 ** 32 + INT_MIN


def type_name(value: Value) -> Optional[str]:
    """Return the MiniLang type name of a runtime value (None when absent)."""
    if value is None:
        return None
    if isinstance(value, str):
        return 'string'
    if isinstance(value, Float32):
        return 'float'
    if isinstance(value, float):
        return 'double'
    if isinstance(value, int):
        return 'int'
    raise TypeError(f"not a MiniLang value: {value!r}")


def type_of(value: Value) -> TypeSpec:
    name = type_name(value)
    if name is None:
        return TypeSpec.void()
    return TypeSpec(name)


def _to_int32(value: float) -> int:
    # Convert.ToInt32 semantics: round half to even, overflow is an error.
    if math.isnan(value) or math.isinf(value):
        raise MiniError(ErrorVal(OVERFLOW, f'{format_value(value)} is out of range for int'))
    result = round(value)
    if result < INT_MIN or result > INT_MAX:
        raise MiniError(ErrorVal(OVERFLOW, f'{format_value(value)} is out of range for int'))
    return result


def coerce(target: TypeSpec, value: Value) -> Value:
    """Convert a value to the declared type `target`.

    Strings only convert to 'string' and numbers only convert to numeric
    types; anything else is a TypeMismatch. The absent value converts to the
    zero of the target type. Converting to 'void' always discards the value.
    """
    kind = target.kind
    if kind == 'void':
        return None
    if kind == 'string':
        if value is None:
            return ''
        if not isinstance(value, str):
            raise MiniError(ErrorVal(TYPE_MISMATCH, f'cannot convert {format_value(value)} to string'))
        return value
    if isinstance(value, str):
        raise MiniError(ErrorVal(TYPE_MISMATCH, f'cannot convert "{value}" to {kind}'))
    if kind == 'int':
        if value is None:
            return 0
        if isinstance(value, float):
            return _to_int32(value)
        return value
    if kind == 'float':
        if value is None:
            return Float32(0.0)
        return Float32(value)
    if kind == 'double':
        if value is None:
            return 0.0
        return float(value)
    raise MiniError(ErrorVal(TYPE_MISMATCH, f'unknown type {kind}'))


def to_bool(value: Value) -> bool:
    """Truthiness used by conditions.

    Any string is true, even the empty one; the absent value is false;
    numbers are true when nonzero.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return True
    return bool(value)


def _format_real(x: float, digits: int) -> str:
    if math.isnan(x):
        return 'NaN'
    if math.isinf(x):
        return 'Infinity' if x > 0 else '-Infinity'
    if x == 0:
        return '0'
    mantissa, exponent = ('%.*E' % (digits - 1, x)).split('E')
    exponent = int(exponent)
    if -5 < exponent < digits:
        text = '%.*f' % (max(digits - 1 - exponent, 0), x)
        if '.' in text:
            text = text.rstrip('0').rstrip('.')
        return text
    if '.' in mantissa:
        mantissa = mantissa.rstrip('0').rstrip('.')
    sign = '-' if exponent < 0 else '+'
    return f"{mantissa}E{sign}{abs(exponent):02d}"


def format_value(value: Value) -> str:
    """Convert a value to the text written by `print`."""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, Float32):
        return _format_real(value, FLOAT_DIGITS)
    if isinstance(value, float):
        return _format_real(value, DOUBLE_DIGITS)
    return str(value)


def format_literal(value: Value) -> str:
    """Like `format_value` but with strings quoted, as in the globals dump."""
    if isinstance(value, str):
        return f'"{value}"'
    return format_value(value)
