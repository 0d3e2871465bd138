from __future__ import annotations

import importlib
from typing import Callable

from .types import (
    NIL, TRUE, FALSE,
    LoxNil, LoxBool, LoxNumber, LoxString, LoxValue,
    LoxCallable, LoxFunction, NativeFunction, NativeFn, NativeSpec,
    Environment, Builtins,
    LoxRuntimeError, LoxTypeError, LoxArityError, LoxNameError,
    is_lox_value,
)

__all__ = [
    "NIL", "TRUE", "FALSE",
    "LoxNil", "LoxBool", "LoxNumber", "LoxString", "LoxValue",
    "LoxCallable", "LoxFunction", "NativeFunction",
    "Environment", "Builtins",
    "LoxRuntimeError", "LoxTypeError", "LoxArityError", "LoxNameError",
    "is_lox_value", "init_stdlib", "register_native", "make_globals",
]

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_native hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("lox_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_native(name: str, *, arity: int) -> Callable[[NativeFn], NativeFn]:
    def dec(fn: NativeFn) -> NativeFn:
        Builtins.natives[name] = NativeSpec(fn=fn, arity=arity)
        return fn

    return dec

def make_globals() -> Environment:
    """Fresh global environment with every registered native installed."""
    init_stdlib()
    env = Environment()
    Builtins.install(env)
    return env
