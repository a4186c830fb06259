from __future__ import annotations

import os as _os
import re
from typing import Optional

from .types import InvalidIdentifier

RESERVED_WORDS = frozenset({
    "let", "func", "return", "if", "elif", "else", "while",
    "print", "println", "exit", "true", "false", "and", "or", "as",
    "typeof", "length", "to_upper", "to_lower",
    "num", "string", "bool", "array", "type", "void",
})

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")

DEBUG_PY_TRACE_ENV = "TOYLANG_DEBUG_PY_TRACE"
HISTORY_ENV = "TOYLANG_HISTORY"
MAX_LOOP_ITERATIONS_ENV = "TOYLANG_MAX_LOOP_ITERATIONS"


def validate_ident(text: str) -> str:
    if not _IDENT_RE.match(text) or text in RESERVED_WORDS:
        raise InvalidIdentifier(text)

    return text


def _env_flag(name: str) -> bool:
    raw = _os.environ.get(name, "")
    return raw.strip().lower() in ("1", "true", "yes", "on")


def debug_py_trace_enabled() -> bool:
    return _env_flag(DEBUG_PY_TRACE_ENV)


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        _os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        _os.environ.pop(DEBUG_PY_TRACE_ENV, None)


def history_path() -> Optional[str]:
    raw = _os.environ.get(HISTORY_ENV)
    return raw if raw else None


def max_loop_iterations() -> Optional[int]:
    """Loop budget from the environment; unset, malformed or non-positive means unbounded."""
    raw = _os.environ.get(MAX_LOOP_ITERATIONS_ENV)
    if raw is None:
        return None

    try:
        value = int(raw.strip())
    except ValueError:
        return None

    return value if value > 0 else None
