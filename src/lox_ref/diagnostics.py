"""Error/output sinks shared by every pipeline stage.

The core only reports; formatting and routing live here so an embedder can
swap in its own sink without touching the lexer, parser or interpreter.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from typing_extensions import Protocol

from .token_types import TT, Tok


class LoxError(Exception):
    """Base class for every error the pipeline reports."""

    def __init__(self, message: str, token: Optional[Tok] = None, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.token = token
        self.line = line if line is not None else (token.line if token is not None else None)


class ErrorSink(Protocol):
    def lex_error(self, line: int, message: str) -> None: ...

    def syntax_error(self, token: Tok, message: str) -> None: ...

    def runtime_error(self, token: Tok, message: str) -> None: ...


class OutputSink(Protocol):
    def write_line(self, text: str) -> None: ...


@dataclass(frozen=True)
class Diagnostic:
    kind: str  # "lex" | "syntax" | "runtime"
    line: int
    message: str
    where: str = ""

    def render(self) -> str:
        if self.kind == "runtime":
            return f"{self.message}\n[line {self.line}]"
        return f"[line {self.line}] Error{self.where}: {self.message}"


def token_where(token: Tok) -> str:
    if token.type == TT.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


@dataclass
class ErrorReporter:
    """Default error sink: records every report and prints it to a stream."""

    stream: Optional[TextIO] = None
    had_error: bool = False
    had_runtime_error: bool = False
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def lex_error(self, line: int, message: str) -> None:
        self._emit(Diagnostic("lex", line, message))
        self.had_error = True

    def syntax_error(self, token: Tok, message: str) -> None:
        self._emit(Diagnostic("syntax", token.line, message, token_where(token)))
        self.had_error = True

    def runtime_error(self, token: Tok, message: str) -> None:
        self._emit(Diagnostic("runtime", token.line, message))
        self.had_runtime_error = True

    def reset(self) -> None:
        """Clear the error flags (between REPL lines); history is kept."""
        self.had_error = False
        self.had_runtime_error = False

    def messages(self, kind: Optional[str] = None) -> List[str]:
        return [d.message for d in self.diagnostics if kind is None or d.kind == kind]

    def _emit(self, diag: Diagnostic) -> None:
        self.diagnostics.append(diag)
        out = self.stream if self.stream is not None else sys.stderr
        print(diag.render(), file=out)


@dataclass
class StreamOutput:
    """Writes printed values to a text stream (stdout by default)."""

    stream: Optional[TextIO] = None

    def write_line(self, text: str) -> None:
        out = self.stream if self.stream is not None else sys.stdout
        print(text, file=out)


@dataclass
class BufferOutput:
    lines: List[str] = field(default_factory=list)

    def write_line(self, text: str) -> None:
        self.lines.append(text)

    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)
