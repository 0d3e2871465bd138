"""Interactive REPL for Lox, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .diagnostics import ErrorReporter
from .lexer_rd import Lexer
from .repl_highlight import LoxHighlighter
from .session import Session
from .token_types import TT
from .tree import pretty
from .utils import debug_py_trace_enabled

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/ast": ("Show the syntax tree of a snippet", "<code>"),
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}

_DEPTH_OPEN = {TT.LPAR, TT.LBRACE}
_DEPTH_CLOSE = {TT.RPAR, TT.RBRACE}


def open_depth(text: str) -> int:
    """Unclosed ``(`` / ``{`` nesting at the end of *text*."""
    depth = 0
    for tok in Lexer(text).tokenize():
        if tok.type in _DEPTH_OPEN:
            depth += 1
        elif tok.type in _DEPTH_CLOSE:
            depth = max(depth - 1, 0)
    return depth


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=f"{desc} {hint}".rstrip(),
                )


def handle_slash(line: str, session: Session) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/ast":
        if not arg:
            print("Usage: /ast <code>", file=sys.stderr)
            return True

        statements = session.parse(arg)
        if statements is not None:
            print(pretty(statements))
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ["LOX_DEBUG_PY_TRACE"] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop("LOX_DEBUG_PY_TRACE", None)
        elif arg == "":
            # Toggle.
            if debug_py_trace_enabled():
                os.environ.pop("LOX_DEBUG_PY_TRACE", None)
            else:
                os.environ["LOX_DEBUG_PY_TRACE"] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        session.reset()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl(dump_ast: Optional[bool] = None) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    session = Session(errors=ErrorReporter(), dump_ast=dump_ast)

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # Keep reading while a block or call is still open.
        if not text.startswith("/") and open_depth(text) > 0:
            buf.insert_text("\n" + "    " * open_depth(text))
            return

        buf.validate_and_handle()

    prompt: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=LoxHighlighter(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("lox repl - Ctrl-D to exit, / for commands")

    while True:
        try:
            text = prompt.prompt("> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, session):
            continue

        # An error on one line never ends the session.
        session.run(text)
        session.errors.reset()
