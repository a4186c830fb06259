from __future__ import annotations

import math

from ..tree import Exit, Return
from ..types import ExitSignal, Frame, ToyNum, ToyValue, type_of
from .common import EvalFunc

_I32_MIN = -(2 ** 31)
_I32_MAX = 2 ** 31 - 1

def exit_code(value: float) -> int:
    """Truncate toward zero and saturate to a 32-bit status; NaN maps to 0."""
    if math.isnan(value):
        return 0
    if value >= _I32_MAX:
        return _I32_MAX
    if value <= _I32_MIN:
        return _I32_MIN
    return math.trunc(value)

def exec_return(n: Return, frame: Frame, eval_func: EvalFunc) -> ToyValue:
    return eval_func(n.expr, frame)

def exec_exit(n: Exit, frame: Frame, eval_func: EvalFunc) -> None:
    value = eval_func(n.expr, frame)

    if isinstance(value, ToyNum):
        raise ExitSignal(exit_code(value.value))

    raise ExitSignal(0, f"exit expects num, found {type_of(value)}")
