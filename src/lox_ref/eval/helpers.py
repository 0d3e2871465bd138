from __future__ import annotations

from typing import Union

from ..token_types import Literal as LiteralValue
from ..types import FALSE, NIL, TRUE, LoxBool, LoxNil, LoxNumber, LoxString, LoxValue

def is_truthy(val: LoxValue) -> bool:
    match val:
        case LoxNil():
            return False
        case LoxBool(value=b):
            return b
        case _:
            return True

def lox_equals(lhs: LoxValue, rhs: LoxValue) -> bool:
    match (lhs, rhs):
        case (LoxNil(), LoxNil()):
            return True
        case (LoxBool(value=a), LoxBool(value=b)):
            return a == b
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return a == b
        case (LoxString(value=a), LoxString(value=b)):
            return a == b
        case _:
            # callables compare by identity; mixed kinds are never equal
            return lhs is rhs

def from_bool(flag: bool) -> LoxBool:
    return TRUE if flag else FALSE

def from_literal(value: Union[bool, LiteralValue]) -> LoxValue:
    match value:
        case None:
            return NIL
        case bool():
            return from_bool(value)
        case float():
            return LoxNumber(value)
        case str():
            return LoxString(value)
        case _:
            raise TypeError(f"Unexpected literal {value!r}")

def stringify(val: LoxValue) -> str:
    """Text written by `print`: nil, true/false, integral numbers without '.0'."""
    return repr(val)
