from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from typing_extensions import TypeAlias, TypeGuard

from .diagnostics import LoxError
from .token_types import Tok
from .tree import Function

if TYPE_CHECKING:
    from .evaluator import Interpreter

# ---------- Value Model ----------

@dataclass(frozen=True)
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass(frozen=True)
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class LoxNumber:
    value: float
    def __repr__(self) -> str:
        text = str(self.value)
        return text[:-2] if text.endswith(".0") else text

@dataclass(frozen=True)
class LoxString:
    value: str
    def __repr__(self) -> str:
        return self.value

NIL = LoxNil()
TRUE = LoxBool(True)
FALSE = LoxBool(False)

class LoxCallable:
    """Capability shared by every invokable value."""

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: 'Interpreter', args: List['LoxValue']) -> 'LoxValue':
        raise NotImplementedError

NativeFn = Callable[['Interpreter', List['LoxValue']], 'LoxValue']

class NativeFunction(LoxCallable):
    def __init__(self, name: str, arity: int, fn: NativeFn):
        self.name = name
        self._arity = arity
        self.fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: 'Interpreter', args: List['LoxValue']) -> 'LoxValue':
        result = self.fn(interpreter, args)
        if not is_lox_value(result):
            raise TypeError(f"native '{self.name}' returned non-Lox value {result!r}")
        return result

    def __repr__(self) -> str:
        return "<native fn>"

class LoxFunction(LoxCallable):
    """User function: its declaration plus the environment it closed over."""

    def __init__(self, declaration: Function, closure: 'Environment'):
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', args: List['LoxValue']) -> 'LoxValue':
        env = Environment(self.closure)

        for param, arg in zip(self.declaration.params, args):
            env.define(param.lexeme, arg)

        # the body is a block nested inside the parameter scope
        return interpreter.call_body(self.declaration.body, Environment(env))

    def __repr__(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"

LoxValue: TypeAlias = (
    LoxNil
    | LoxBool
    | LoxNumber
    | LoxString
    | LoxCallable
)

_LOX_VALUE_TYPES: Tuple[type, ...] = (LoxNil, LoxBool, LoxNumber, LoxString, LoxCallable)

def is_lox_value(value: object) -> TypeGuard[LoxValue]:
    return isinstance(value, _LOX_VALUE_TYPES)

# ---------- Environment ----------

class Environment:
    """One lexical scope. ``enclosing`` always leads toward the globals."""

    def __init__(self, enclosing: Optional['Environment'] = None):
        self.values: Dict[str, LoxValue] = {}
        self.enclosing = enclosing

    def define(self, name: str, value: LoxValue) -> None:
        self.values[name] = value

    def ancestor(self, distance: int) -> 'Environment':
        env = self

        for _ in range(distance):
            if env.enclosing is None:
                raise LoxRuntimeError(None, f"Scope distance {distance} exceeds environment depth")
            env = env.enclosing

        return env

    def get(self, name: Tok) -> LoxValue:
        env: Optional[Environment] = self

        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing

        raise LoxNameError(name)

    def assign(self, name: Tok, value: LoxValue) -> None:
        env: Optional[Environment] = self

        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing

        raise LoxNameError(name)

    def get_at(self, distance: int, name: Tok) -> LoxValue:
        scope = self.ancestor(distance).values
        if name.lexeme not in scope:
            raise LoxNameError(name)
        return scope[name.lexeme]

    def assign_at(self, distance: int, name: Tok, value: LoxValue) -> None:
        self.ancestor(distance).values[name.lexeme] = value

    def depth(self) -> int:
        n = 0
        env = self.enclosing

        while env is not None:
            n += 1
            env = env.enclosing

        return n

    def __repr__(self) -> str:
        return f"<env {sorted(self.values)} depth={self.depth()}>"

# ---------- Exceptions ----------

class LoxRuntimeError(LoxError):
    def __init__(self, token: Optional[Tok], message: str):
        super().__init__(message, token=token)

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"

class LoxTypeError(LoxRuntimeError):
    pass

class LoxArityError(LoxRuntimeError):
    def __init__(self, token: Tok, expected: int, got: int):
        super().__init__(token, f"Expected {expected} arguments but got {got}.")
        self.expected = expected
        self.got = got

class LoxNameError(LoxRuntimeError):
    def __init__(self, name: Tok):
        super().__init__(name, f"Undefined variable '{name.lexeme}'.")
        self.name = name.lexeme

# ---------- Natives registry ----------

@dataclass(frozen=True)
class NativeSpec:
    fn: NativeFn
    arity: int

class Builtins:
    natives: Dict[str, NativeSpec] = {}

    @classmethod
    def install(cls, env: Environment) -> None:
        for name, spec in cls.natives.items():
            env.define(name, NativeFunction(name, spec.arity, spec.fn))
