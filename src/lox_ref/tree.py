"""AST node model for Lox plus helpers for rendering it as a Lark tree.

Nodes are plain frozen dataclasses with identity equality (``eq=False``) so
they can key the resolver's side table. ``as_tree`` converts any node into a
``lark.Tree`` for debug dumps (``Tree.pretty()``) and structural comparison.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from lark import Token, Tree
from typing_extensions import TypeAlias, assert_never

from .token_types import Literal as LiteralValue, Tok

# ---------- Expressions ----------

@dataclass(frozen=True, eq=False)
class Literal:
    value: Union[bool, LiteralValue]

@dataclass(frozen=True, eq=False)
class Variable:
    name: Tok

@dataclass(frozen=True, eq=False)
class Assign:
    name: Tok
    value: 'Expr'

@dataclass(frozen=True, eq=False)
class Binary:
    left: 'Expr'
    op: Tok
    right: 'Expr'

@dataclass(frozen=True, eq=False)
class Logical:
    left: 'Expr'
    op: Tok
    right: 'Expr'

@dataclass(frozen=True, eq=False)
class Unary:
    op: Tok
    right: 'Expr'

@dataclass(frozen=True, eq=False)
class Grouping:
    inner: 'Expr'

@dataclass(frozen=True, eq=False)
class Call:
    callee: 'Expr'
    paren: Tok
    args: Sequence['Expr']

Expr: TypeAlias = Union[Literal, Variable, Assign, Binary, Logical, Unary, Grouping, Call]

# ---------- Statements ----------

@dataclass(frozen=True, eq=False)
class Expression:
    expr: Expr

@dataclass(frozen=True, eq=False)
class Print:
    expr: Expr

@dataclass(frozen=True, eq=False)
class Var:
    name: Tok
    initializer: Optional[Expr] = None

@dataclass(frozen=True, eq=False)
class Block:
    statements: Sequence['Stmt']

@dataclass(frozen=True, eq=False)
class If:
    cond: Expr
    then_branch: 'Stmt'
    else_branch: Optional['Stmt'] = None

@dataclass(frozen=True, eq=False)
class While:
    cond: Expr
    body: 'Stmt'

@dataclass(frozen=True, eq=False)
class Function:
    name: Tok
    params: Sequence[Tok]
    body: Sequence['Stmt']

@dataclass(frozen=True, eq=False)
class Return:
    keyword: Tok
    value: Optional[Expr] = None

Stmt: TypeAlias = Union[Expression, Print, Var, Block, If, While, Function, Return]
Node: TypeAlias = Union[Expr, Stmt]

# ---------- Lark rendering ----------

def _tok(t: Tok) -> Token:
    return Token(t.type.name, t.lexeme, line=t.line, column=t.column)

def _literal_text(value: Union[bool, LiteralValue]) -> str:
    if value is None:
        return "nil"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        text = str(value)
        return text[:-2] if text.endswith(".0") else text
    return repr(value)

def as_tree(node: Node) -> Tree:
    """Render one AST node (recursively) as a ``lark.Tree``."""
    match node:
        case Literal(value=value):
            return Tree('literal', [Token('VALUE', _literal_text(value))])
        case Variable(name=name):
            return Tree('variable', [_tok(name)])
        case Assign(name=name, value=value):
            return Tree('assign', [_tok(name), as_tree(value)])
        case Binary(left=left, op=op, right=right):
            return Tree('binary', [as_tree(left), _tok(op), as_tree(right)])
        case Logical(left=left, op=op, right=right):
            return Tree('logical', [as_tree(left), _tok(op), as_tree(right)])
        case Unary(op=op, right=right):
            return Tree('unary', [_tok(op), as_tree(right)])
        case Grouping(inner=inner):
            return Tree('grouping', [as_tree(inner)])
        case Call(callee=callee, args=args):
            return Tree('call', [as_tree(callee), Tree('args', [as_tree(a) for a in args])])
        case Expression(expr=expr):
            return Tree('exprstmt', [as_tree(expr)])
        case Print(expr=expr):
            return Tree('printstmt', [as_tree(expr)])
        case Var(name=name, initializer=init):
            children: List[Union[Tree, Token]] = [_tok(name)]
            if init is not None:
                children.append(as_tree(init))
            return Tree('vardecl', children)
        case Block(statements=stmts):
            return Tree('block', [as_tree(s) for s in stmts])
        case If(cond=cond, then_branch=then_branch, else_branch=else_branch):
            children = [as_tree(cond), as_tree(then_branch)]
            if else_branch is not None:
                children.append(as_tree(else_branch))
            return Tree('ifstmt', children)
        case While(cond=cond, body=body):
            return Tree('whilestmt', [as_tree(cond), as_tree(body)])
        case Function(name=name, params=params, body=body):
            return Tree('fundecl', [
                _tok(name),
                Tree('params', [_tok(p) for p in params]),
                Tree('body', [as_tree(s) for s in body]),
            ])
        case Return(value=value):
            return Tree('returnstmt', [] if value is None else [as_tree(value)])
        case _:
            assert_never(node)

def program_tree(statements: Sequence[Stmt]) -> Tree:
    return Tree('program', [as_tree(s) for s in statements])

def pretty(statements: Sequence[Stmt], indent: str = '  ') -> str:
    """Return the indented Lark rendering of a whole program."""
    return program_tree(statements).pretty(indent)
