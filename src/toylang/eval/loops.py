from __future__ import annotations

from typing import Optional

from ..tree import If, While
from ..types import Frame, LoopLimitExceeded, ToyValue
from .common import EvalFunc, ExecBlockFunc, eval_condition

def exec_if(n: If, frame: Frame, eval_func: EvalFunc, exec_block: ExecBlockFunc) -> Optional[ToyValue]:
    for branch in (n.branch, *n.elifs):
        if eval_condition(branch.cond, frame, eval_func):
            return exec_block(branch.body, frame)

    if n.else_body is not None:
        return exec_block(n.else_body, frame)

    return None

def exec_while(n: While, frame: Frame, eval_func: EvalFunc, exec_block: ExecBlockFunc) -> Optional[ToyValue]:
    limit = frame.max_loop_iterations
    iterations = 0

    while eval_condition(n.cond, frame, eval_func):
        if limit is not None:
            iterations += 1
            if iterations > limit:
                raise LoopLimitExceeded(limit)

        result = exec_block(n.body, frame)
        if result is not None:
            return result

    return None
