"""
Static scope resolution for Lox.

Walks the statement list once before execution and records, for every local
variable read or assignment, how many scopes separate the use from its
definition. Globals are left unannotated and looked up by name at run time.

Errors are fail-fast: the first one raises ``ResolveError`` and the rest of
the pass is abandoned.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Dict, List, Optional, Sequence

from typing_extensions import assert_never

from .diagnostics import LoxError
from .token_types import Tok
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

# name -> defined? (False while its initializer is still being resolved)
Scope = Dict[str, bool]
Locals = Dict[Expr, int]


class ResolveError(LoxError):
    def __init__(self, token: Tok, message: str):
        super().__init__(message, token=token)

    def __str__(self) -> str:
        return f"{self.message} at line {self.line}"


class FunctionKind(Enum):
    NONE = auto()
    FUNCTION = auto()


class Resolver:
    def __init__(self) -> None:
        self.scopes: List[Scope] = []
        self.locals: Locals = {}
        self.current_function = FunctionKind.NONE

    def resolve(self, statements: Sequence[Stmt]) -> Locals:
        for stmt in statements:
            self.resolve_stmt(stmt)
        return self.locals

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def resolve_stmt(self, stmt: Stmt) -> None:
        match stmt:
            case Block(statements=stmts):
                self.begin_scope()
                try:
                    self.resolve(stmts)
                finally:
                    self.end_scope()
            case Var(name=name, initializer=init):
                self.declare(name)
                if init is not None:
                    self.resolve_expr(init)
                self.define(name)
            case Function(name=name):
                self.declare(name)
                self.define(name)
                self.resolve_function(stmt, FunctionKind.FUNCTION)
            case Expression(expr=expr) | Print(expr=expr):
                self.resolve_expr(expr)
            case If(cond=cond, then_branch=then_branch, else_branch=else_branch):
                self.resolve_expr(cond)
                self.resolve_stmt(then_branch)
                if else_branch is not None:
                    self.resolve_stmt(else_branch)
            case While(cond=cond, body=body):
                self.resolve_expr(cond)
                self.resolve_stmt(body)
            case Return(keyword=keyword, value=value):
                if self.current_function is FunctionKind.NONE:
                    raise ResolveError(keyword, "Can't return from top-level code.")
                if value is not None:
                    self.resolve_expr(value)
            case _:
                assert_never(stmt)

    def resolve_function(self, fn: Function, kind: FunctionKind) -> None:
        enclosing = self.current_function
        self.current_function = kind

        self.begin_scope()
        try:
            for param in fn.params:
                self.declare(param)
                self.define(param)
            self.begin_scope()
            try:
                self.resolve(fn.body)
            finally:
                self.end_scope()
        finally:
            self.end_scope()
            self.current_function = enclosing

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def resolve_expr(self, expr: Expr) -> None:
        match expr:
            case Variable(name=name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    raise ResolveError(name, "Can't read local variable in its own initializer.")
                self.resolve_local(expr, name)
            case Assign(name=name, value=value):
                self.resolve_expr(value)
                self.resolve_local(expr, name)
            case Binary(left=left, right=right) | Logical(left=left, right=right):
                self.resolve_expr(left)
                self.resolve_expr(right)
            case Unary(right=right):
                self.resolve_expr(right)
            case Grouping(inner=inner):
                self.resolve_expr(inner)
            case Call(callee=callee, args=args):
                self.resolve_expr(callee)
                for arg in args:
                    self.resolve_expr(arg)
            case Literal():
                pass
            case _:
                assert_never(expr)

    # ------------------------------------------------------------------
    # Scope bookkeeping
    # ------------------------------------------------------------------

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Tok) -> None:
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            raise ResolveError(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name: Tok) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: Tok) -> None:
        for hops, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = hops
                return
        # not found: global, resolved by name at run time


def resolve(statements: Sequence[Stmt], locals_: Optional[Locals] = None) -> Locals:
    """Resolve ``statements``; new entries are merged into ``locals_`` when given."""
    table = Resolver().resolve(statements)
    if locals_ is not None:
        locals_.update(table)
        return locals_
    return table
