from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .evaluator import eval_expr, exec_block
from .parser import parse_line, parse_program
from .runtime import init_stdlib, to_toy_strings
from .tree import Line, Statement, is_statement
from .types import ExitSignal, Frame, ToyValue, ToylangRuntimeError, ToylangSyntaxError
from .utils import debug_py_trace_enabled, max_loop_iterations

USAGE = "Usage: toylang [FILE [ARGS...]]"

def new_root_frame(argv: Optional[Sequence[str]]=None) -> Frame:
    """Fresh top-level frame; ``argv`` (script path first) becomes ARGV when given."""
    frame = Frame(max_loop_iterations=max_loop_iterations())

    if argv is not None:
        frame.define("ARGV", to_toy_strings(list(argv)))

    return frame

def run_program(statements: Sequence[Statement], frame: Frame) -> Optional[ToyValue]:
    """Run top-level statements; a top-level `return` stops the program and yields its value."""
    init_stdlib()
    return exec_block(statements, frame)

def run(src: str, argv: Optional[Sequence[str]]=None, frame: Optional[Frame]=None) -> Frame:
    """Parse and run ``src``, returning the frame it ran in.

    ``ExitSignal`` and toylang errors propagate to the caller.
    """
    if frame is None:
        frame = new_root_frame(argv)

    run_program(parse_program(src), frame)
    return frame

def repl_eval(text: str, frame: Frame) -> Tuple[Optional[ToyValue], bool]:
    """Run one REPL entry against ``frame``.

    Returns ``(value, is_statement)``; the value is only meaningful for a bare
    expression. A failed entry leaves ``frame`` as it was before the entry.
    """
    line: Line = parse_line(text)
    saved = frame.snapshot()

    try:
        if is_statement(line):
            run_program((line,), frame)
            return None, True

        return eval_expr(line, frame), False
    except ToylangRuntimeError:
        frame.restore(saved)
        raise
    except RecursionError:
        frame.restore(saved)
        raise ToylangRuntimeError("maximum call depth exceeded") from None

def report_error(exc: BaseException, prefix: str="Error") -> None:
    print(f"{prefix}: {exc}", file=sys.stderr)

    if debug_py_trace_enabled() and exc.__traceback__ is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def exit_status(sig: ExitSignal) -> int:
    if sig.diagnostic:
        print(f"Error: {sig.diagnostic}", file=sys.stderr)

    return sig.code

def _load_source(arg: str) -> str:
    """
    Resolve a CLI script argument into source text.
    - "-" => read stdin.
    - anything else => read the file; OSError propagates.
    """
    if arg == "-":
        return sys.stdin.read()

    return Path(arg).read_text(encoding="utf-8")

def run_script(path: str, args: Sequence[str]=()) -> int:
    """Run a script file and return the process exit status."""
    try:
        source = _load_source(path)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: cannot read {path}: {exc}", file=sys.stderr)
        return 1

    try:
        statements = parse_program(source)
    except ToylangSyntaxError as exc:
        report_error(exc, "Syntax error")
        return 1

    frame = new_root_frame([path, *args])

    try:
        run_program(statements, frame)
    except ExitSignal as sig:
        return exit_status(sig)
    except ToylangRuntimeError as exc:
        report_error(exc)
        return 1
    except RecursionError:
        print("Error: maximum call depth exceeded", file=sys.stderr)
        return 1

    return 0

def main(argv: Optional[Sequence[str]]=None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)

    if args and args[0] in ("-h", "--help"):
        print(USAGE)
        raise SystemExit(0)

    if not args:
        from .repl import repl

        raise SystemExit(repl())

    raise SystemExit(run_script(args[0], args[1:]))

if __name__ == "__main__":
    main()
