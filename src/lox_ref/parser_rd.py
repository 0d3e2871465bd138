"""
Recursive Descent Parser for Lox

Structure:
- Lexer: Token stream from source
- Parser: Recursive descent, one token of lookahead
- AST: Frozen dataclass nodes from ``tree``

Error recovery is panic-and-synchronize: a parse error is reported, the
parser discards tokens up to a probable statement boundary and resumes, so a
single run surfaces every independent syntax error.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from .diagnostics import ErrorSink, LoxError
from .token_types import STATEMENT_STARTS, TT, Tok
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

MAX_ARGS = 255

# ============================================================================
# Parser
# ============================================================================

class ParseError(LoxError):
    """Parse error with position info"""
    def __init__(self, message: str, token: Tok):
        super().__init__(message, token=token)

    def __str__(self) -> str:
        return f"{self.message} at line {self.line}"

class Parser:
    """
    Recursive descent parser for Lox.

    Expression precedence (lowest to highest):
    1. assignment (=, right associative)
    2. or
    3. and
    4. equality (==, !=)
    5. comparison (>, >=, <, <=)
    6. term (+, -)
    7. factor (*, /)
    8. unary (!, -)
    9. call (f(...))
    10. primary (literals, identifiers, parens)
    """

    def __init__(self, tokens: List[Tok], errors: Optional[ErrorSink] = None):
        if not tokens or tokens[-1].type != TT.EOF:
            last_line = tokens[-1].line if tokens else 1
            tokens = list(tokens) + [Tok(TT.EOF, '', None, last_line)]
        self.tokens = tokens
        self.pos = 0
        self.sink = errors
        self.errors: List[ParseError] = []

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self) -> Tok:
        return self.tokens[self.pos]

    def previous(self) -> Tok:
        return self.tokens[self.pos - 1]

    def at_end(self) -> bool:
        return self.peek().type == TT.EOF

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        if not self.at_end():
            self.pos += 1
        return self.previous()

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        if self.at_end():
            return False
        return self.peek().type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: str) -> Tok:
        """Consume token of expected type or raise error"""
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    # ========================================================================
    # Error Handling
    # ========================================================================

    def error(self, token: Tok, message: str) -> ParseError:
        """Report an error and return (not raise) it; callers decide whether to unwind."""
        err = ParseError(message, token)
        self.errors.append(err)
        if self.sink is not None:
            self.sink.syntax_error(token, message)
        return err

    def synchronize(self) -> None:
        """Discard tokens until a probable statement boundary."""
        self.advance()

        while not self.at_end():
            if self.previous().type == TT.SEMI:
                return
            if self.peek().type in STATEMENT_STARTS:
                return
            self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Stmt]:
        """Parse entire program; declarations that failed to parse are dropped."""
        statements: List[Stmt] = []

        while not self.at_end():
            try:
                decl = self.declaration()
            except RecursionError:
                # the host stack is unwound by now; report where it gave out
                self.error(self.peek(), "Expression nesting too deep.")
                self.synchronize()
                continue
            if decl is not None:
                statements.append(decl)

        return statements

    def declaration(self) -> Optional[Stmt]:
        try:
            if self.match(TT.FUN):
                return self.function("function")
            if self.match(TT.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def function(self, kind: str) -> Function:
        """fun NAME ( params? ) { body }"""
        name = self.expect(TT.IDENT, f"Expect {kind} name.")
        self.expect(TT.LPAR, f"Expect '(' after {kind} name.")

        params: List[Tok] = []
        if not self.check(TT.RPAR):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self.expect(TT.IDENT, "Expect parameter name."))
                if not self.match(TT.COMMA):
                    break
        self.expect(TT.RPAR, "Expect ')' after parameters.")

        self.expect(TT.LBRACE, f"Expect '{{' before {kind} body.")
        body = self.block_statements()
        return Function(name, params, body)

    def var_declaration(self) -> Var:
        name = self.expect(TT.IDENT, "Expect variable name.")
        initializer = self.expression() if self.match(TT.ASSIGN) else None
        self.expect(TT.SEMI, "Expect ';' after variable declaration.")
        return Var(name, initializer)

    # ========================================================================
    # Statements
    # ========================================================================

    def statement(self) -> Stmt:
        if self.match(TT.FOR):
            return self.for_statement()
        if self.match(TT.IF):
            return self.if_statement()
        if self.match(TT.PRINT):
            return self.print_statement()
        if self.match(TT.RETURN):
            return self.return_statement()
        if self.match(TT.WHILE):
            return self.while_statement()
        if self.match(TT.LBRACE):
            return Block(self.block_statements())

        return self.expression_statement()

    def for_statement(self) -> Stmt:
        """
        Desugar for loop:
        for (init; cond; incr) body  =>  { init; while (cond) { body; incr; } }
        """
        self.expect(TT.LPAR, "Expect '(' after 'for'.")

        initializer: Optional[Stmt]
        if self.match(TT.SEMI):
            initializer = None
        elif self.match(TT.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition: Expr = Literal(True)
        if not self.check(TT.SEMI):
            condition = self.expression()
        self.expect(TT.SEMI, "Expect ';' after loop condition.")

        increment: Optional[Expr] = None
        if not self.check(TT.RPAR):
            increment = self.expression()
        self.expect(TT.RPAR, "Expect ')' after for clauses.")

        body = self.statement()

        loop_body: List[Stmt] = [body]
        if increment is not None:
            loop_body.append(Expression(increment))

        outer: List[Stmt] = []
        if initializer is not None:
            outer.append(initializer)
        outer.append(While(condition, Block(loop_body)))

        return Block(outer)

    def if_statement(self) -> If:
        self.expect(TT.LPAR, "Expect '(' after 'if'.")
        condition = self.expression()
        self.expect(TT.RPAR, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = self.statement() if self.match(TT.ELSE) else None
        return If(condition, then_branch, else_branch)

    def print_statement(self) -> Print:
        value = self.expression()
        self.expect(TT.SEMI, "Expect ';' after value.")
        return Print(value)

    def return_statement(self) -> Return:
        keyword = self.previous()
        value = None if self.check(TT.SEMI) else self.expression()
        self.expect(TT.SEMI, "Expect ';' after return value.")
        return Return(keyword, value)

    def while_statement(self) -> While:
        self.expect(TT.LPAR, "Expect '(' after 'while'.")
        condition = self.expression()
        self.expect(TT.RPAR, "Expect ')' after condition.")
        return While(condition, self.statement())

    def block_statements(self) -> List[Stmt]:
        """Declarations up to the closing brace (the opening one is consumed)."""
        statements: List[Stmt] = []

        while not self.check(TT.RBRACE) and not self.at_end():
            decl = self.declaration()
            if decl is not None:
                statements.append(decl)

        self.expect(TT.RBRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self) -> Expression:
        expr = self.expression()
        self.expect(TT.SEMI, "Expect ';' after expression.")
        return Expression(expr)

    # ========================================================================
    # Expressions
    # ========================================================================

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.logical_or()

        if self.match(TT.ASSIGN):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, Variable):
                return Assign(expr.name, value)

            # Reported, not raised: the left side is kept as a plain expression
            self.error(equals, "Invalid assignment target.")

        return expr

    def logical_or(self) -> Expr:
        expr = self.logical_and()

        while self.match(TT.OR):
            op = self.previous()
            right = self.logical_and()
            expr = Logical(expr, op, right)

        return expr

    def logical_and(self) -> Expr:
        expr = self.equality()

        while self.match(TT.AND):
            op = self.previous()
            right = self.equality()
            expr = Logical(expr, op, right)

        return expr

    def equality(self) -> Expr:
        return self.binary_left_assoc(self.comparison, TT.NEQ, TT.EQ)

    def comparison(self) -> Expr:
        return self.binary_left_assoc(self.term, TT.GT, TT.GTE, TT.LT, TT.LTE)

    def term(self) -> Expr:
        return self.binary_left_assoc(self.factor, TT.MINUS, TT.PLUS)

    def factor(self) -> Expr:
        return self.binary_left_assoc(self.unary, TT.SLASH, TT.STAR)

    def binary_left_assoc(self, operand: Callable[[], Expr], *ops: TT) -> Expr:
        expr = operand()

        while self.match(*ops):
            op = self.previous()
            right = operand()
            expr = Binary(expr, op, right)

        return expr

    def unary(self) -> Expr:
        if self.match(TT.NEG, TT.MINUS):
            op = self.previous()
            return Unary(op, self.unary())

        return self.call()

    def call(self) -> Expr:
        expr = self.primary()

        while self.match(TT.LPAR):
            expr = self.finish_call(expr)

        return expr

    def finish_call(self, callee: Expr) -> Call:
        args: List[Expr] = []

        if not self.check(TT.RPAR):
            while True:
                if len(args) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} arguments.")
                args.append(self.expression())
                if not self.match(TT.COMMA):
                    break

        paren = self.expect(TT.RPAR, "Expect ')' after arguments.")
        return Call(callee, paren, args)

    def primary(self) -> Expr:
        if self.match(TT.FALSE):
            return Literal(False)
        if self.match(TT.TRUE):
            return Literal(True)
        if self.match(TT.NIL):
            return Literal(None)
        if self.match(TT.NUMBER, TT.STRING):
            return Literal(self.previous().literal)
        if self.match(TT.IDENT):
            return Variable(self.previous())

        if self.match(TT.LPAR):
            expr = self.expression()
            self.expect(TT.RPAR, "Expect ')' after expression.")
            return Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")


def parse_tokens(tokens: List[Tok], errors: Optional[ErrorSink] = None) -> List[Stmt]:
    return Parser(tokens, errors).parse()


def parse_source(source: str, errors: Optional[ErrorSink] = None) -> List[Stmt]:
    """
    Parse Lox source code to a statement list.

    Lexical and syntax errors are reported to ``errors`` (if given); the
    returned list holds only the declarations that parsed cleanly.
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source, errors)
    return Parser(tokens, errors).parse()
