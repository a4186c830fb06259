"""Evaluator helper modules for the toylang runtime."""

__all__ = [
    "bind",
    "blocks",
    "common",
    "control",
    "expr",
    "fn",
    "loops",
    "output",
    "typecast",
]
