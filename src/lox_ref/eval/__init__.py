"""Evaluator helper modules for the Lox interpreter."""

__all__ = [
    "helpers",
    "expr",
]
