"""
Token Types for Lox

Shared between lexer, parser and the REPL highlighter to avoid circular
dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union


class TT(Enum):
    """Token Types"""

    # Single-character punctuation
    LPAR = auto()
    RPAR = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMI = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character operators
    NEG = auto()  # !
    NEQ = auto()
    ASSIGN = auto()  # =
    EQ = auto()
    GT = auto()
    GTE = auto()
    LT = auto()
    LTE = auto()

    # Literals
    IDENT = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    EOF = auto()


Literal = Union[float, str, None]


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    lexeme: str
    literal: Literal = None
    line: int = 1
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.lexeme!r}, {self.line}:{self.column})"


# Tokens that begin a declaration or statement; the parser resynchronizes here.
STATEMENT_STARTS = frozenset({
    TT.CLASS, TT.FOR, TT.FUN, TT.IF, TT.PRINT, TT.RETURN, TT.VAR, TT.WHILE,
})


def is_keyword(tok: Optional[Tok]) -> bool:
    return tok is not None and tok.type in _KEYWORD_TYPES


_KEYWORD_TYPES = frozenset({
    TT.AND, TT.CLASS, TT.ELSE, TT.FALSE, TT.FOR, TT.FUN, TT.IF, TT.NIL, TT.OR,
    TT.PRINT, TT.RETURN, TT.SUPER, TT.THIS, TT.TRUE, TT.VAR, TT.WHILE,
})
