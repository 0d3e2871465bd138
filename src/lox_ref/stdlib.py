"""Built-in native functions registered via lox_ref.runtime."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .runtime import LoxNumber, LoxValue, register_native

if TYPE_CHECKING:
    from .evaluator import Interpreter

@register_native("clock", arity=0)
def std_clock(interp: Interpreter, _args: List[LoxValue]) -> LoxNumber:
    # Whole milliseconds since the epoch.
    return LoxNumber(float(int(interp.clock() * 1000)))
