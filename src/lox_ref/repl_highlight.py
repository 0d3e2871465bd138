"""prompt_toolkit lexer for live Lox syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as LoxLexer
from .token_types import TT, Tok, is_keyword

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "constant": "ansicyan",
    "reserved": "italic ansiblue",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_CONSTANTS = {TT.TRUE, TT.FALSE, TT.NIL}
# Lexed but given no meaning by the interpreter.
_RESERVED = {TT.CLASS, TT.THIS, TT.SUPER}


def token_group(tokens: list[Tok], i: int) -> str:
    tok = tokens[i]

    if tok.type in _CONSTANTS:
        return "constant"
    if tok.type in _RESERVED:
        return "reserved"
    if is_keyword(tok):
        return "keyword"
    if tok.type == TT.NUMBER:
        return "number"
    if tok.type == TT.STRING:
        return "string"
    if tok.type == TT.IDENT:
        prev = tokens[i - 1] if i > 0 else None
        nxt = tokens[i + 1] if i + 1 < len(tokens) else None
        if (prev is not None and prev.type == TT.FUN) or (nxt is not None and nxt.type == TT.LPAR):
            return "function"
        return "identifier"
    if tok.type in (TT.LPAR, TT.RPAR, TT.LBRACE, TT.RBRACE, TT.COMMA, TT.SEMI, TT.DOT):
        return "punctuation"
    return "operator"


def _gap_spans(gap: str) -> StyleAndTextTuples:
    """Unstyled text between tokens; only comments and stray characters get a style."""
    idx = gap.find("//")
    if idx >= 0:
        spans: StyleAndTextTuples = []
        if idx > 0:
            spans.append(("", gap[:idx]))
        spans.append((GROUP_STYLE["comment"], gap[idx:]))
        return spans

    if gap.strip():
        if gap.lstrip().startswith('"'):
            return [(GROUP_STYLE["string"], gap)]
        return [(GROUP_STYLE["error"], gap)]

    return [("", gap)]


def highlight_line(text: str) -> StyleAndTextTuples:
    tokens = [t for t in LoxLexer(text).tokenize() if t.type != TT.EOF]
    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        start = tok.column - 1
        if start < pos:
            continue

        if start > pos:
            result.extend(_gap_spans(text[pos:start]))

        style = GROUP_STYLE.get(token_group(tokens, i), "")
        result.append((style, tok.lexeme))
        pos = start + len(tok.lexeme)

    # Trailing text: whitespace, a comment or an unterminated string.
    if pos < len(text):
        result.extend(_gap_spans(text[pos:]))

    return result if result else [("", text)]


class LoxHighlighter(Lexer):
    """prompt_toolkit Lexer that highlights Lox source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
