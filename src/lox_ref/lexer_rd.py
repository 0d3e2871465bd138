"""
Lexer for Lox

Tokenizes Lox source code into a stream of tokens.

Features:
- Single-pass tokenization, maximal munch for two-character operators
- Position tracking (line, column)
- Errors are reported and scanning continues; the token stream is always
  terminated by EOF
"""

from __future__ import annotations

from typing import List, Optional

from .diagnostics import ErrorSink, LoxError
from .token_types import TT, Literal, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================


class LexError(LoxError):
    """Lexical analysis error"""

    def __init__(self, message: str, line: int):
        super().__init__(message, line=line)

    def __str__(self) -> str:
        return f"{self.message} at line {self.line}"


class Lexer:
    """
    Lox lexer.

    Lexical errors never abort scanning: they are handed to the error sink
    (when one is given) and collected on ``self.errors``.
    """

    KEYWORDS = {
        'and': TT.AND,
        'class': TT.CLASS,
        'else': TT.ELSE,
        'false': TT.FALSE,
        'for': TT.FOR,
        'fun': TT.FUN,
        'if': TT.IF,
        'nil': TT.NIL,
        'or': TT.OR,
        'print': TT.PRINT,
        'return': TT.RETURN,
        'super': TT.SUPER,
        'this': TT.THIS,
        'true': TT.TRUE,
        'var': TT.VAR,
        'while': TT.WHILE,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('!=', TT.NEQ),
        ('==', TT.EQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),

        # Single-character operators
        ('!', TT.NEG),
        ('=', TT.ASSIGN),
        ('<', TT.LT),
        ('>', TT.GT),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (',', TT.COMMA),
        ('.', TT.DOT),
        ('-', TT.MINUS),
        ('+', TT.PLUS),
        (';', TT.SEMI),
        ('*', TT.STAR),
        ('/', TT.SLASH),
    ]

    def __init__(self, source: str, errors: Optional[ErrorSink] = None):
        self.source = source
        self.sink = errors
        self.pos = 0
        self.start = 0
        self.line = 1
        self.column = 1
        self.start_line = 1
        self.start_column = 1
        self.tokens: List[Tok] = []
        self.errors: List[LexError] = []

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while not self.at_end():
            self.mark_start()
            self.scan_token()

        self.mark_start()
        self.emit(TT.EOF)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        ch = self.peek()

        if ch in (' ', '\r', '\t'):
            self.advance()
            return

        if ch == '\n':
            self.scan_newline()
            return

        # Line comments
        if ch == '/' and self.peek(1) == '/':
            self.skip_comment()
            return

        if ch == '"':
            self.scan_string()
            return

        if is_digit(ch):
            self.scan_number()
            return

        if is_ident_start(ch):
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        self.advance()
        self.line += 1
        self.column = 1

    def scan_string(self):
        """Scan string literal: "..." (no escape sequences)"""
        self.advance()  # opening quote

        while not self.at_end() and self.peek() != '"':
            if self.peek() == '\n':
                self.scan_newline()
            else:
                self.advance()

        if self.at_end():
            self.error("Unterminated string.")
            return

        self.advance()  # closing quote
        text = self.source[self.start + 1:self.pos - 1]
        self.emit(TT.STRING, text)

    def scan_number(self):
        """Scan number literal: digits with an optional fractional part"""
        while is_digit(self.peek()):
            self.advance()

        # A trailing '.' belongs to the number only when a digit follows it
        if self.peek() == '.' and is_digit(self.peek(1)):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.emit(TT.NUMBER, float(self.current_text()))

    def scan_identifier(self):
        """Scan identifier or keyword"""
        while is_ident_char(self.peek()):
            self.advance()

        token_type = self.KEYWORDS.get(self.current_text(), TT.IDENT)
        self.emit(token_type)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type)
                return

        ch = self.advance()
        self.error(f"Unexpected character '{ch}'.")

    # ========================================================================
    # Utilities
    # ========================================================================

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = self.source[self.pos:self.pos + n]
        self.pos += n
        self.column += n
        return result

    def skip_comment(self):
        """Skip comment until end of line"""
        while not self.at_end() and self.peek() != '\n':
            self.advance()

    def mark_start(self):
        self.start = self.pos
        self.start_line = self.line
        self.start_column = self.column

    def current_text(self) -> str:
        return self.source[self.start:self.pos]

    def emit(self, token_type: TT, literal: Literal = None):
        """Emit a token"""
        tok = Tok(
            type=token_type,
            lexeme=self.current_text(),
            literal=literal,
            line=self.start_line,
            column=self.start_column,
        )
        self.tokens.append(tok)

    def error(self, message: str):
        err = LexError(message, self.line)
        self.errors.append(err)
        if self.sink is not None:
            self.sink.lex_error(self.line, message)


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def is_ident_start(ch: str) -> bool:
    return ch == '_' or ('a' <= ch <= 'z') or ('A' <= ch <= 'Z')


def is_ident_char(ch: str) -> bool:
    return is_ident_start(ch) or is_digit(ch)


def tokenize(source: str, errors: Optional[ErrorSink] = None) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, errors)
    return lexer.tokenize()
