from __future__ import annotations

import math

from ..token_types import TT, Tok
from ..types import LoxNumber, LoxString, LoxTypeError, LoxValue
from .helpers import from_bool, is_truthy, lox_equals

def require_number(op: Tok, value: LoxValue) -> float:
    if isinstance(value, LoxNumber):
        return value.value
    raise LoxTypeError(op, "Operand must be a number.")

def require_numbers(op: Tok, lhs: LoxValue, rhs: LoxValue) -> tuple[float, float]:
    if isinstance(lhs, LoxNumber) and isinstance(rhs, LoxNumber):
        return lhs.value, rhs.value
    raise LoxTypeError(op, "Operands must be numbers.")

def divide(a: float, b: float) -> float:
    """IEEE 754 division: x/0 is a signed infinity and 0/0 is NaN."""
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)

def apply_unary(op: Tok, rhs: LoxValue) -> LoxValue:
    match op.type:
        case TT.MINUS:
            return LoxNumber(-require_number(op, rhs))
        case TT.NEG:
            return from_bool(not is_truthy(rhs))
        case _:
            raise LoxTypeError(op, f"Unsupported unary operator '{op.lexeme}'.")

def apply_binary(op: Tok, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match op.type:
        case TT.EQ:
            return from_bool(lox_equals(lhs, rhs))
        case TT.NEQ:
            return from_bool(not lox_equals(lhs, rhs))
        case TT.PLUS:
            return _add(op, lhs, rhs)
        case TT.MINUS:
            a, b = require_numbers(op, lhs, rhs)
            return LoxNumber(a - b)
        case TT.STAR:
            a, b = require_numbers(op, lhs, rhs)
            return LoxNumber(a * b)
        case TT.SLASH:
            a, b = require_numbers(op, lhs, rhs)
            return LoxNumber(divide(a, b))
        case TT.GT:
            a, b = require_numbers(op, lhs, rhs)
            return from_bool(a > b)
        case TT.GTE:
            a, b = require_numbers(op, lhs, rhs)
            return from_bool(a >= b)
        case TT.LT:
            a, b = require_numbers(op, lhs, rhs)
            return from_bool(a < b)
        case TT.LTE:
            a, b = require_numbers(op, lhs, rhs)
            return from_bool(a <= b)
        case _:
            raise LoxTypeError(op, f"Unsupported binary operator '{op.lexeme}'.")

def _add(op: Tok, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match (lhs, rhs):
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return LoxNumber(a + b)
        case (LoxString(value=a), LoxString(value=b)):
            return LoxString(a + b)
        case _:
            raise LoxTypeError(op, "Operands must be two numbers or two strings.")
