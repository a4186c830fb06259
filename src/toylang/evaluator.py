from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from .runtime import Builtins, init_stdlib
from .tree import (
    ArrayLiteral, BinOp, BoolChain, CallFunc, Comparison, DeclareVar, Exit, Expr, Expression,
    If, Index, Literal, MutateVar, Print, Println, Reference, Return, Statement,
    TypeOf, Typecast, UnOp, While, node_line,
)
from .types import Frame, ToyFunc, ToyValue, ToylangRuntimeError
from .utils import validate_ident
from .eval.bind import exec_declare, exec_mutate
from .eval.blocks import exec_statements
from .eval.control import exec_exit, exec_return
from .eval.expr import eval_array, eval_binop, eval_bool_chain, eval_comparison, eval_index, eval_unop
from .eval.fn import capture_closure, eval_call
from .eval.loops import exec_if, exec_while
from .eval.output import exec_print, exec_println
from .eval.typecast import eval_typecast, eval_typeof

def _maybe_attach_location(exc: ToylangRuntimeError, node: Any) -> None:
    # The innermost statement wins; outer statements leave it alone.
    if exc.line is not None:
        return

    line = node_line(node)
    if line is not None:
        exc.line = line

# ---------------- Public API ----------------

def eval_expr(expr: Expr, frame: Optional[Frame]=None) -> ToyValue:
    init_stdlib()

    if frame is None:
        frame = Frame()

    return eval_node(expr, frame)

def exec_stmt(stmt: Statement, frame: Optional[Frame]=None) -> Optional[ToyValue]:
    """Execute one statement; a value means the enclosing block returned it."""
    init_stdlib()

    if frame is None:
        frame = Frame()

    return exec_node(stmt, frame)

def exec_block(stmts: Iterable[Statement], frame: Frame) -> Optional[ToyValue]:
    return exec_statements(stmts, frame, exec_node)

# ---------------- Core evaluator ----------------

def eval_node(n: Expr, frame: Frame) -> ToyValue:
    handler = _EXPR_DISPATCH.get(type(n))
    if handler is not None:
        return handler(n, frame)

    builtin = Builtins.expr_builtins.get(type(n))
    if builtin is not None:
        return builtin(frame, eval_node(n.expr, frame))

    match n:
        case Literal(value=ToyFunc() as fn):
            return capture_closure(fn, frame)
        case Literal(value=value):
            return value
        case Reference(name=name):
            return frame.get(validate_ident(name))
        case _:
            raise ToylangRuntimeError(f"Unknown expression node: {type(n).__name__}")

def exec_node(stmt: Statement, frame: Frame) -> Optional[ToyValue]:
    try:
        return _exec_node_inner(stmt, frame)
    except ToylangRuntimeError as e:
        _maybe_attach_location(e, stmt)
        raise

def _exec_node_inner(stmt: Statement, frame: Frame) -> Optional[ToyValue]:
    handler = _STMT_DISPATCH.get(type(stmt))
    if handler is not None:
        return handler(stmt, frame)

    match stmt:
        case Expression(expr=expr):
            eval_node(expr, frame)
            return None
        case _:
            raise ToylangRuntimeError(f"Unknown statement node: {type(stmt).__name__}")

_EXPR_DISPATCH: dict[type, Callable[[Any, Frame], ToyValue]] = {
    ArrayLiteral: lambda n, frame: eval_array(n, frame, eval_node),
    Index: lambda n, frame: eval_index(n, frame, eval_node),
    BinOp: lambda n, frame: eval_binop(n, frame, eval_node),
    Comparison: lambda n, frame: eval_comparison(n, frame, eval_node),
    BoolChain: lambda n, frame: eval_bool_chain(n, frame, eval_node),
    UnOp: lambda n, frame: eval_unop(n, frame, eval_node),
    Typecast: lambda n, frame: eval_typecast(n, frame, eval_node),
    TypeOf: lambda n, frame: eval_typeof(n, frame, eval_node),
    CallFunc: lambda n, frame: eval_call(n, frame, eval_node),
}

_STMT_DISPATCH: dict[type, Callable[[Any, Frame], Optional[ToyValue]]] = {
    DeclareVar: lambda n, frame: exec_declare(n, frame, eval_node),
    MutateVar: lambda n, frame: exec_mutate(n, frame, eval_node),
    Return: lambda n, frame: exec_return(n, frame, eval_node),
    If: lambda n, frame: exec_if(n, frame, eval_node, exec_block),
    While: lambda n, frame: exec_while(n, frame, eval_node, exec_block),
    Print: lambda n, frame: exec_print(n, frame, eval_node),
    Println: lambda n, frame: exec_println(n, frame, eval_node),
    Exit: lambda n, frame: exec_exit(n, frame, eval_node),
}
