from __future__ import annotations

from dataclasses import replace
from types import MappingProxyType

from ..tree import CallFunc
from ..types import Frame, NotCallable, ToyFunc, ToyValue, type_of
from .common import EvalFunc, eval_all

def capture_closure(fn: ToyFunc, frame: Frame) -> ToyFunc:
    """Bind a function literal to a copy of the frame it is evaluated in.

    The copy is taken once; later changes to ``frame`` are not visible to the
    function, and values that already carry an environment are returned as is.
    """
    if fn.captured is not None:
        return fn

    return replace(fn, captured=MappingProxyType(frame.snapshot()))

def eval_call(n: CallFunc, frame: Frame, eval_func: EvalFunc) -> ToyValue:
    from ..runtime import call_function

    callee = eval_func(n.callee, frame)
    if not isinstance(callee, ToyFunc):
        raise NotCallable(type_of(callee))

    args = eval_all(n.args, frame, eval_func)
    return call_function(callee, args, frame)
