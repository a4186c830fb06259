from __future__ import annotations

from ..tree import Print, Println
from ..types import Frame, stringify
from .common import EvalFunc, eval_all

def _render(n: Print | Println, frame: Frame, eval_func: EvalFunc) -> str:
    # Everything is evaluated before anything is written.
    return "".join(stringify(v) for v in eval_all(n.exprs, frame, eval_func))

def exec_print(n: Print, frame: Frame, eval_func: EvalFunc) -> None:
    print(_render(n, frame, eval_func), end="", flush=True)

def exec_println(n: Println, frame: Frame, eval_func: EvalFunc) -> None:
    print(_render(n, frame, eval_func), flush=True)
