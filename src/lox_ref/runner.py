from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from .session import RunStatus, Session

USAGE = "Usage: lox-ref [--dump-ast] [script]"

# sysexits.h
EX_USAGE = 64
EX_DATAERR = 65
EX_SOFTWARE = 70

def exit_code(status: RunStatus) -> int:
    match status:
        case RunStatus.OK:
            return 0
        case RunStatus.STATIC_ERROR:
            return EX_DATAERR
        case RunStatus.RUNTIME_ERROR:
            return EX_SOFTWARE

def _load_source(arg: str) -> str:
    """
    Resolve CLI input into source text.
    - "-" => read stdin.
    - Otherwise the argument must name a readable file.
    """

    if arg == "-":
        return sys.stdin.read()

    return Path(arg).read_text(encoding="utf-8")

def run_file(path: str, dump_ast: Optional[bool] = None) -> int:
    try:
        source = _load_source(path)
    except OSError as exc:
        print(f"Could not read {path}: {exc.strerror or exc}", file=sys.stderr)
        return EX_USAGE
    except UnicodeDecodeError as exc:
        print(f"Could not decode {path}: not valid UTF-8 (byte {exc.start})", file=sys.stderr)
        return EX_DATAERR

    session = Session(dump_ast=dump_ast)
    return exit_code(session.run(source))

def main(argv: Optional[List[str]] = None) -> None:
    dump_ast: Optional[bool] = None
    arg = None

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--dump-ast":
            dump_ast = True
            continue

        if token in ("-h", "--help"):
            print(USAGE)
            raise SystemExit(0)

        if token.startswith("--"):
            print(f"Unknown option: {token}\n{USAGE}", file=sys.stderr)
            raise SystemExit(EX_USAGE)

        if arg is None:
            arg = token
        else:
            print(USAGE, file=sys.stderr)
            raise SystemExit(EX_USAGE)

    if arg is None:
        from .repl import repl

        repl(dump_ast=dump_ast)
        return

    code = run_file(arg, dump_ast=dump_ast)
    if code:
        raise SystemExit(code)

if __name__ == "__main__":
    main()
