from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Union

from typing_extensions import TypeAlias, assert_never

from .diagnostics import BufferOutput, ErrorSink, OutputSink
from .eval.expr import apply_binary, apply_unary
from .eval.helpers import from_literal, is_truthy, stringify
from .runtime import (
    NIL,
    Environment,
    LoxArityError,
    LoxCallable,
    LoxFunction,
    LoxRuntimeError,
    LoxValue,
    make_globals,
)
from .token_types import TT, Tok
from .tree import (
    Assign,
    Binary,
    Block,
    Call,
    Expr,
    Expression,
    Function,
    Grouping,
    If,
    Literal,
    Logical,
    Print,
    Return,
    Stmt,
    Unary,
    Var,
    Variable,
    While,
)

# ---------------- Execution outcomes ----------------

class Normal:
    """Statement finished; continue with the next one."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "NORMAL"

NORMAL = Normal()

@dataclass(frozen=True)
class Returning:
    """A `return` is unwinding toward the nearest call boundary."""
    value: LoxValue

ExecResult: TypeAlias = Union[Normal, Returning]

ClockSource = Callable[[], float]

# ---------------- Interpreter ----------------

class Interpreter:
    def __init__(
        self,
        output: Optional[OutputSink] = None,
        errors: Optional[ErrorSink] = None,
        clock: ClockSource = time.time,
    ):
        self.output: OutputSink = output if output is not None else BufferOutput()
        self.errors = errors
        self.clock = clock
        self.globals = make_globals()
        self.environment = self.globals
        self.locals: Dict[Expr, int] = {}
        self.last_error: Optional[LoxRuntimeError] = None

    # ---------------- Public API ----------------

    def resolve(self, table: Dict[Expr, int]) -> None:
        """Merge a resolver side table (REPL lines accumulate)."""
        self.locals.update(table)

    def interpret(self, statements: Sequence[Stmt]) -> bool:
        """Run a top-level statement list; report and stop at the first runtime error."""
        try:
            for stmt in statements:
                self.execute(stmt)
        except LoxRuntimeError as err:
            self.last_error = err
            if self.errors is None:
                raise
            self.errors.runtime_error(err.token or _UNKNOWN_TOKEN, err.message)
            return False
        return True

    def execute_block(self, statements: Sequence[Stmt], env: Environment) -> ExecResult:
        previous = self.environment
        self.environment = env

        try:
            for stmt in statements:
                result = self.execute(stmt)
                if isinstance(result, Returning):
                    return result
            return NORMAL
        finally:
            self.environment = previous

    def call_body(self, body: Sequence[Stmt], env: Environment) -> LoxValue:
        """Run a function body in its call environment; yields the returned value or nil."""
        result = self.execute_block(body, env)
        if isinstance(result, Returning):
            return result.value
        return NIL

    # ---------------- Statements ----------------

    def execute(self, stmt: Stmt) -> ExecResult:
        match stmt:
            case Expression(expr=expr):
                self.evaluate(expr)
                return NORMAL
            case Print(expr=expr):
                self.output.write_line(stringify(self.evaluate(expr)))
                return NORMAL
            case Var(name=name, initializer=init):
                value = self.evaluate(init) if init is not None else NIL
                self.environment.define(name.lexeme, value)
                return NORMAL
            case Block(statements=stmts):
                return self.execute_block(stmts, Environment(self.environment))
            case If(cond=cond, then_branch=then_branch, else_branch=else_branch):
                if is_truthy(self.evaluate(cond)):
                    return self.execute(then_branch)
                if else_branch is not None:
                    return self.execute(else_branch)
                return NORMAL
            case While(cond=cond, body=body):
                while is_truthy(self.evaluate(cond)):
                    result = self.execute(body)
                    if isinstance(result, Returning):
                        return result
                return NORMAL
            case Function(name=name):
                self.environment.define(name.lexeme, LoxFunction(stmt, self.environment))
                return NORMAL
            case Return(value=value):
                return Returning(self.evaluate(value) if value is not None else NIL)
            case _:
                assert_never(stmt)

    # ---------------- Expressions ----------------

    def evaluate(self, expr: Expr) -> LoxValue:
        match expr:
            case Literal(value=value):
                return from_literal(value)
            case Grouping(inner=inner):
                return self.evaluate(inner)
            case Variable(name=name):
                return self.look_up_variable(name, expr)
            case Assign(name=name, value=value_expr):
                value = self.evaluate(value_expr)
                distance = self.locals.get(expr)
                if distance is not None:
                    self.environment.assign_at(distance, name, value)
                else:
                    self.globals.assign(name, value)
                return value
            case Unary(op=op, right=right):
                return apply_unary(op, self.evaluate(right))
            case Binary(left=left, op=op, right=right):
                lhs = self.evaluate(left)
                rhs = self.evaluate(right)
                return apply_binary(op, lhs, rhs)
            case Logical(left=left, op=op, right=right):
                lhs = self.evaluate(left)
                if op.type == TT.OR:
                    if is_truthy(lhs):
                        return lhs
                elif not is_truthy(lhs):
                    return lhs
                return self.evaluate(right)
            case Call(callee=callee_expr, paren=paren, args=arg_exprs):
                callee = self.evaluate(callee_expr)
                args = [self.evaluate(a) for a in arg_exprs]
                return self.call_value(callee, args, paren)
            case _:
                assert_never(expr)

    def look_up_variable(self, name: Tok, expr: Expr) -> LoxValue:
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name)
        return self.globals.get(name)

    def call_value(self, callee: LoxValue, args: List[LoxValue], paren: Tok) -> LoxValue:
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(paren, "Can only call functions and classes.")

        if len(args) != callee.arity():
            raise LoxArityError(paren, callee.arity(), len(args))

        try:
            return callee.call(self, args)
        except RecursionError:
            raise LoxRuntimeError(paren, "Stack overflow.") from None

_UNKNOWN_TOKEN = Tok(TT.EOF, '', None, 0)
