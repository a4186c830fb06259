from __future__ import annotations

from ..tree import DeclareVar, MutateVar
from ..types import Frame, InvalidCompoundAssign, ToyNum, UndeclaredVariable, type_of
from ..utils import validate_ident
from .common import EvalFunc
from .expr import apply_arith

def exec_declare(n: DeclareVar, frame: Frame, eval_func: EvalFunc) -> None:
    """`let` binds or silently rebinds in the current frame."""
    name = validate_ident(n.name)
    frame.define(name, eval_func(n.expr, frame))

def exec_mutate(n: MutateVar, frame: Frame, eval_func: EvalFunc) -> None:
    name = validate_ident(n.name)

    if name not in frame:
        raise UndeclaredVariable(name)

    new = eval_func(n.expr, frame)
    arith = n.op.arith

    if arith is None:
        frame.set(name, new)
        return

    old = frame.get(name)
    if not isinstance(old, ToyNum):
        raise InvalidCompoundAssign(type_of(old))
    if not isinstance(new, ToyNum):
        raise InvalidCompoundAssign(type_of(new))

    frame.set(name, ToyNum(apply_arith(arith, old.value, new.value)))
