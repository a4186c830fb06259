from __future__ import annotations

from typing import Callable, Optional, Tuple
from typing_extensions import TypeAlias

from ..tree import Expr, Statement
from ..types import ExpectedBoolean, Frame, ToyBool, ToyValue, type_of

EvalFunc: TypeAlias = Callable[[Expr, Frame], ToyValue]
ExecBlockFunc: TypeAlias = Callable[[Tuple[Statement, ...], Frame], Optional[ToyValue]]

def eval_condition(cond: Expr, frame: Frame, eval_func: EvalFunc) -> bool:
    value = eval_func(cond, frame)

    if isinstance(value, ToyBool):
        return value.value

    raise ExpectedBoolean(type_of(value))

def eval_all(exprs: Tuple[Expr, ...], frame: Frame, eval_func: EvalFunc) -> list[ToyValue]:
    """Evaluate left to right; the first failure aborts the rest."""
    return [eval_func(e, frame) for e in exprs]
