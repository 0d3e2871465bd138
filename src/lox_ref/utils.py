from __future__ import annotations

import os as _os
import sys as _sys

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_RECURSION_LIMIT = 20000


def _flag(name: str) -> bool:
    raw = _os.environ.get(name)
    return raw is not None and raw.strip().lower() in _TRUTHY


def debug_py_trace_enabled() -> bool:
    """Append the Python traceback to reported runtime errors."""
    return _flag("LOX_DEBUG_PY_TRACE")


def dump_ast_enabled() -> bool:
    """Print the parsed program as a Lark tree before running it."""
    return _flag("LOX_DUMP_AST")


def recursion_limit() -> int:
    raw = _os.environ.get("LOX_RECURSION_LIMIT")
    if raw is None:
        return DEFAULT_RECURSION_LIMIT

    try:
        return max(1000, int(raw))
    except ValueError:
        return DEFAULT_RECURSION_LIMIT


def ensure_recursion_limit(limit: int) -> None:
    """Raise the host recursion limit; every Lox call costs several Python frames."""
    if _sys.getrecursionlimit() < limit:
        _sys.setrecursionlimit(limit)
