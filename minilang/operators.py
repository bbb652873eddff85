"""Operator semantics for MiniLang values.

Every binary operation picks its computation type from the promotion ladder
double > float > int. Strings only take part in concatenation.
"""

from __future__ import annotations

import math

from .errors import ErrorVal, MiniError, DIVISION_BY_ZERO, INVALID_OPERATION, OVERFLOW, TYPE_MISMATCH
from .types import Float32, INT_MIN, TypeSpec, Value, coerce, type_name, wrap_int32

ARITHMETIC_OPS = ('+', '-', '*', '/', '%', '^', '**')
RELATIONAL_OPS = ('<', '>', '<=', '>=', '==', '!=')
LOGICAL_OPS = ('&&', '||')


def promote(a: Value, b: Value) -> TypeSpec:
    """Result type of a numeric binary operation."""
    kinds = (type_name(a), type_name(b))
    if 'double' in kinds:
        return TypeSpec.double()
    if 'float' in kinds:
        return TypeSpec.single()
    return TypeSpec.integer()


def _require_present(op: str, a: Value, b: Value):
    if a is None or b is None:
        raise MiniError(ErrorVal(INVALID_OPERATION, f'operator {op} applied to a void value'))


def _int_div(a: int, b: int) -> int:
    if b == 0:
        raise MiniError(ErrorVal(DIVISION_BY_ZERO, 'attempted to divide by zero'))
    if a == INT_MIN and b == -1:
        raise MiniError(ErrorVal(OVERFLOW, 'integer division overflow'))
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


def _int_mod(a: int, b: int) -> int:
    # The remainder takes the sign of the dividend.
    return a - b * _int_div(a, b)


def _real_div(x: float, y: float) -> float:
    if y == 0:
        if x == 0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    return x / y


def power(x: float, y: float) -> float:
    """Math.Pow: NaN and infinities instead of exceptions."""
    try:
        return math.pow(x, y)
    except OverflowError:
        if x < 0 and y == int(y) and int(y) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if x == 0:
            return math.copysign(math.inf, x) if y == int(y) and int(y) % 2 == 1 else math.inf
        return math.nan


def _compute(op: str, x, y, kind: str) -> Value:
    if kind == 'int':
        if op == '+':
            return wrap_int32(x + y)
        if op == '-':
            return wrap_int32(x - y)
        if op == '*':
            return wrap_int32(x * y)
        if op == '/':
            return _int_div(x, y)
        raise MiniError(ErrorVal(INVALID_OPERATION, f'unknown operator {op}'))
    if op == '+':
        result = x + y
    elif op == '-':
        result = x - y
    elif op == '*':
        result = x * y
    elif op == '/':
        result = _real_div(x, y)
    else:
        raise MiniError(ErrorVal(INVALID_OPERATION, f'unknown operator {op}'))
    return Float32(result) if kind == 'float' else float(result)


def binary_op(op: str, a: Value, b: Value) -> Value:
    """Apply an arithmetic operator to two values."""
    _require_present(op, a, b)
    if op in ('^', '**'):
        if isinstance(a, str) or isinstance(b, str):
            raise MiniError(ErrorVal(INVALID_OPERATION, 'cannot exponentiate a string'))
        return power(float(a), float(b))
    if op in ('+', '-'):
        if isinstance(a, str) and isinstance(b, str):
            if op == '+':
                return a + b
            raise MiniError(ErrorVal(INVALID_OPERATION, 'cannot subtract strings'))
        if isinstance(a, str) or isinstance(b, str):
            raise MiniError(ErrorVal(TYPE_MISMATCH, f'cannot apply {op} between string and {type_name(b) if isinstance(a, str) else type_name(a)}'))
    elif op in ('*', '/', '%'):
        if isinstance(a, str) or isinstance(b, str):
            raise MiniError(ErrorVal(INVALID_OPERATION, 'cannot multiply, divide or modulo a string'))
    else:
        raise MiniError(ErrorVal(INVALID_OPERATION, f'unknown operator {op}'))
    if op == '%':
        if type_name(a) != 'int' or type_name(b) != 'int':
            raise MiniError(ErrorVal(TYPE_MISMATCH, f'modulo requires int operands, got {type_name(a)} and {type_name(b)}'))
        return _int_mod(a, b)
    target = promote(a, b)
    return _compute(op, coerce(target, a), coerce(target, b), target.kind)


def compare(op: str, a: Value, b: Value) -> bool:
    """Apply a relational operator; strings cannot be compared."""
    _require_present(op, a, b)
    if isinstance(a, str) or isinstance(b, str):
        raise MiniError(ErrorVal(INVALID_OPERATION, f'cannot use relational operator {op} on a string'))
    target = promote(a, b)
    x, y = coerce(target, a), coerce(target, b)
    if op == '<':
        return x < y
    if op == '>':
        return x > y
    if op == '<=':
        return x <= y
    if op == '>=':
        return x >= y
    if op == '==':
        return x == y
    if op == '!=':
        return x != y
    raise MiniError(ErrorVal(INVALID_OPERATION, f'unknown relational operator {op}'))


def negate(value: Value) -> Value:
    """Unary minus in the operand's own type."""
    if value is None:
        raise MiniError(ErrorVal(INVALID_OPERATION, 'cannot negate a void value'))
    if isinstance(value, str):
        raise MiniError(ErrorVal(INVALID_OPERATION, 'cannot negate a string'))
    if isinstance(value, Float32):
        return Float32(-value)
    if isinstance(value, float):
        return -value
    return wrap_int32(-value)
