from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from toylang.parser import parse_line, parse_program
from toylang.runner import run_program
from toylang.tree import Literal
from toylang.types import (
    CannotNegate,
    ExitSignal,
    ExpectedBoolean,
    Frame,
    IndexOutOfBounds,
    InvalidBooleanOperands,
    InvalidComparison,
    InvalidCompoundAssign,
    InvalidIdentifier,
    InvalidIndexType,
    InvalidOperation,
    InvalidTypecast,
    LoopLimitExceeded,
    NoLength,
    NotCallable,
    NotIndexable,
    ParseError,
    ToyArray,
    ToyBool,
    ToyFunc,
    ToyNum,
    ToyString,
    ToyType,
    ToyValue,
    ToyVoid,
    ToylangArityError,
    ToylangNameError,
    ToylangRuntimeError,
    ToylangSyntaxError,
    ToylangTypeError,
    UndeclaredVariable,
    UndefinedVariable,
    WrongArgCount,
    WrongArgType,
    WrongType,
)

RuntimeExpectation = Optional[Tuple[str, object]]

# Every harness frame gets a loop budget so a runaway `while` fails instead of hanging.
LOOP_LIMIT = 10_000


def make_frame(argv: Optional[Sequence[str]] = None) -> Frame:
    frame = Frame(max_loop_iterations=LOOP_LIMIT)
    if argv is not None:
        frame.define("ARGV", ToyArray(tuple(ToyString(a) for a in argv)))
    return frame


def run_source(source: str, frame: Optional[Frame] = None) -> Optional[ToyValue]:
    """Parse and run a program; the value of a top-level `return` is the result."""
    if frame is None:
        frame = make_frame()
    return run_program(parse_program(source), frame)


def literal_value(text: str) -> ToyValue:
    node = parse_line(text)
    assert isinstance(node, Literal), f"expected a literal, got {node!r}"
    return node.value


def values_equal(lhs: ToyValue, rhs: ToyValue) -> bool:
    """Structural equality; functions compare by identity."""
    match (lhs, rhs):
        case (ToyNum(value=a), ToyNum(value=b)):
            return a == b
        case (ToyString(value=a), ToyString(value=b)):
            return a == b
        case (ToyBool(value=a), ToyBool(value=b)):
            return a == b
        case (ToyType(tag=a), ToyType(tag=b)):
            return a == b
        case (ToyVoid(), ToyVoid()):
            return True
        case (ToyArray(items=items_a), ToyArray(items=items_b)):
            return len(items_a) == len(items_b) and all(
                values_equal(a, b) for a, b in zip(items_a, items_b)
            )
        case _:
            return lhs is rhs


def _to_python(value: ToyValue) -> object:
    match value:
        case ToyNum(value=v) | ToyString(value=v) | ToyBool(value=v):
            return v
        case ToyArray(items=items):
            return [_to_python(item) for item in items]
        case ToyType(tag=tag):
            return str(tag)
        case ToyVoid():
            return None
    return value


def verify_result(value: object, kind: str, expected: object) -> None:
    """Assert runtime result shape/value compatibility with scenario expectations."""
    match kind:
        case "string":
            assert isinstance(
                value, ToyString
            ), f"expected ToyString, got {type(value).__name__}"
            assert (
                value.value == expected
            ), f"expected {expected!r}, got {value.value!r}"
            return
        case "number":
            assert isinstance(
                value, ToyNum
            ), f"expected number, got {type(value).__name__}"
            assert (
                abs(value.value - float(expected)) <= 1e-9
            ), f"expected {expected}, got {value.value}"
            return
        case "bool":
            assert isinstance(
                value, ToyBool
            ), f"expected bool, got {type(value).__name__}"
            assert value.value is bool(
                expected
            ), f"expected {expected}, got {value.value}"
            return
        case "void":
            assert isinstance(
                value, ToyVoid
            ), f"expected ToyVoid, got {type(value).__name__}"
            return
        case "type":
            assert isinstance(
                value, ToyType
            ), f"expected ToyType, got {type(value).__name__}"
            assert str(value.tag) == expected, f"expected {expected!r}, got {value.tag}"
            return
        case "array":
            assert isinstance(
                value, ToyArray
            ), f"expected ToyArray, got {type(value).__name__}"
            got = _to_python(value)
            assert got == expected, f"expected {expected!r}, got {got!r}"
            return
        case "display":
            assert str(value) == expected, f"expected {expected!r}, got {value}"
            return

    raise AssertionError(f"unknown expectation kind {kind!r}")


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
) -> None:
    """Execute one runtime scenario with optional expected exception."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_source(source)
        return

    result = run_source(source)
    if expectation is not None:
        verify_result(result, expectation[0], expectation[1])


def run_cli(
    *args: str,
    stdin: Optional[str] = None,
    env: Optional[dict] = None,
) -> subprocess.CompletedProcess:
    """Run `python -m toylang` in a subprocess with src/ on PYTHONPATH."""
    child_env = dict(os.environ)
    child_env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(SRC_DIR), child_env.get("PYTHONPATH", "")) if p
    )
    for name in ("TOYLANG_DEBUG_PY_TRACE", "TOYLANG_MAX_LOOP_ITERATIONS"):
        child_env.pop(name, None)
    if env:
        child_env.update(env)

    return subprocess.run(
        [sys.executable, "-m", "toylang", *args],
        input=stdin,
        capture_output=True,
        text=True,
        env=child_env,
        timeout=60,
    )
