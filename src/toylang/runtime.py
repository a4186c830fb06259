from __future__ import annotations

import importlib
from typing import Callable, Dict, List, Sequence

from .types import (
    ExitSignal, Frame, ToyArray, ToyBool, ToyFunc, ToyNum, ToyString, ToyType, ToyValue,
    ToyVoid, ToylangArityError, ToylangError, ToylangNameError, ToylangRuntimeError,
    ToylangSyntaxError, ToylangTypeError, TypeTag, WrongArgCount, WrongArgType, type_of,
)
from .utils import validate_ident

__all__ = [
    "Builtins", "call_function", "init_stdlib", "register_builtin",
    "ExitSignal", "Frame", "ToyArray", "ToyBool", "ToyFunc", "ToyNum", "ToyString",
    "ToyType", "ToyValue", "ToyVoid", "ToylangArityError", "ToylangError",
    "ToylangNameError", "ToylangRuntimeError", "ToylangSyntaxError", "ToylangTypeError",
    "TypeTag",
]

BuiltinFn = Callable[[Frame, ToyValue], ToyValue]

class Builtins:
    """Built-in operators keyed by the AST node class that invokes them."""
    expr_builtins: Dict[type, BuiltinFn] = {}

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_builtin hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("toylang.stdlib")
    _STDLIB_INITIALIZED = True

def register_builtin(node_type: type):
    def dec(fn: BuiltinFn):
        Builtins.expr_builtins[node_type] = fn
        return fn

    return dec

def call_function(fn: ToyFunc, args: Sequence[ToyValue], caller: Frame) -> ToyValue:
    """Invoke ``fn`` with already-evaluated ``args``.

    The callee frame is built from the captured environment first, then every
    binding visible in ``caller`` is written over it, so a caller variable
    shadows a captured one of the same name. Parameters are bound last.
    Returns the first returned value, or void when the body falls off the end.
    """
    from .evaluator import exec_block

    if len(args) != len(fn.params):
        raise WrongArgCount(len(fn.params), len(args))

    bindings: Dict[str, ToyValue] = dict(fn.captured or {})
    bindings.update(caller.vars)
    callee = caller.child(bindings)

    for (name, expected), value in zip(fn.params, args):
        actual = type_of(value)
        if actual != expected:
            raise WrongArgType(expected, actual)
        callee.define(validate_ident(name), value)

    result = exec_block(fn.body, callee)
    return ToyVoid() if result is None else result

def to_toy_strings(items: List[str]) -> ToyArray:
    return ToyArray(tuple(ToyString(s) for s in items))
