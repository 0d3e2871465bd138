"""Explicit pipeline context: lexer -> parser -> resolver -> interpreter.

A ``Session`` is constructed by whichever entry point drives execution (the
file runner, the REPL, a test) and owns the error flags and the interpreter
state that persists across REPL lines.
"""

from __future__ import annotations

import sys
import time
import traceback
from enum import Enum
from typing import List, Optional

from .diagnostics import ErrorReporter, OutputSink, StreamOutput
from .evaluator import ClockSource, Interpreter
from .lexer_rd import Lexer
from .parser_rd import Parser
from .resolver import ResolveError, Resolver
from .tree import Stmt, pretty
from .utils import debug_py_trace_enabled, dump_ast_enabled, ensure_recursion_limit, recursion_limit


class RunStatus(Enum):
    OK = "ok"
    STATIC_ERROR = "static_error"
    RUNTIME_ERROR = "runtime_error"


class Session:
    def __init__(
        self,
        output: Optional[OutputSink] = None,
        errors: Optional[ErrorReporter] = None,
        clock: ClockSource = time.time,
        dump_ast: Optional[bool] = None,
    ):
        self.errors = errors if errors is not None else ErrorReporter()
        self.output: OutputSink = output if output is not None else StreamOutput()
        self.interpreter = Interpreter(self.output, self.errors, clock)
        self.dump_ast = dump_ast_enabled() if dump_ast is None else dump_ast
        ensure_recursion_limit(recursion_limit())

    @property
    def had_error(self) -> bool:
        return self.errors.had_error

    @property
    def had_runtime_error(self) -> bool:
        return self.errors.had_runtime_error

    def parse(self, source: str) -> Optional[List[Stmt]]:
        """Scan and parse; None if any lexical or syntax error was reported."""
        self.errors.reset()
        tokens = Lexer(source, self.errors).tokenize()
        statements = Parser(tokens, self.errors).parse()

        if self.errors.had_error:
            return None
        return statements

    def run(self, source: str) -> RunStatus:
        """One top-level execution call (a whole file or one REPL line)."""
        statements = self.parse(source)
        if statements is None:
            return RunStatus.STATIC_ERROR

        try:
            table = Resolver().resolve(statements)
        except ResolveError as err:
            self.errors.syntax_error(err.token, err.message)
            return RunStatus.STATIC_ERROR

        if self.dump_ast:
            print(pretty(statements), file=sys.stderr)

        self.interpreter.resolve(table)
        if not self.interpreter.interpret(statements):
            self._maybe_print_py_trace()
            return RunStatus.RUNTIME_ERROR

        return RunStatus.OK

    def reset(self) -> None:
        """Drop every global definition and start over with a fresh interpreter."""
        interp = self.interpreter
        self.interpreter = Interpreter(self.output, self.errors, interp.clock)
        self.errors.reset()

    def _maybe_print_py_trace(self) -> None:
        err = self.interpreter.last_error
        if err is None or not debug_py_trace_enabled():
            return

        tb = err.__traceback__
        if tb is not None:
            print("\nPython traceback:", file=sys.stderr)
            print("".join(traceback.format_tb(tb)), file=sys.stderr, end="")


def run_source(source: str, output: Optional[OutputSink] = None, errors: Optional[ErrorReporter] = None) -> RunStatus:
    """Run ``source`` in a fresh session."""
    return Session(output=output, errors=errors).run(source)
