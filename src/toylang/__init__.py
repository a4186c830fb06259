"""toylang: a small dynamically typed scripting language with a tree-walking evaluator."""

from .evaluator import eval_expr, exec_block, exec_stmt
from .parser import parse_line, parse_program
from .runner import repl_eval, run, run_program, run_script
from .types import ExitSignal, Frame, ToylangError, ToylangRuntimeError, ToylangSyntaxError

__version__ = "0.1.0"

__all__ = [
    "ExitSignal",
    "Frame",
    "ToylangError",
    "ToylangRuntimeError",
    "ToylangSyntaxError",
    "eval_expr",
    "exec_block",
    "exec_stmt",
    "parse_line",
    "parse_program",
    "repl_eval",
    "run",
    "run_program",
    "run_script",
]
