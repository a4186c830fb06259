from __future__ import annotations

import math

from ..tree import ArrayLiteral, BinOp, BinaryOp, BoolChain, BoolLogic, CompOp, Comparison, Index, UnOp, UnaryOp
from ..types import (
    CannotNegate, Frame, IndexOutOfBounds, InvalidBooleanOperands, InvalidComparison,
    InvalidIndexType, InvalidOperation, NotIndexable, ToyArray, ToyBool, ToyNum,
    ToyString, ToyValue, format_number, type_of,
)
from .common import EvalFunc, eval_all

# ---------------- Arithmetic ----------------

def _fmod(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        # fmod(inf, x) and fmod(x, 0)
        return math.nan

def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and b.is_integer() and int(b) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0:
            # 0 ** negative
            if math.copysign(1.0, a) < 0 and b.is_integer() and int(b) % 2 == 1:
                return -math.inf
            return math.inf
        # negative base, fractional exponent
        return math.nan

def _div(a: float, b: float) -> float:
    if b != 0:
        return a / b

    if math.isnan(a) or a == 0:
        return math.nan

    negative = (a < 0) != (math.copysign(1.0, b) < 0)
    return -math.inf if negative else math.inf

def apply_arith(op: BinaryOp, a: float, b: float) -> float:
    """IEEE-754 double arithmetic; never raises."""
    match op:
        case BinaryOp.ADD:
            return a + b
        case BinaryOp.SUB:
            return a - b
        case BinaryOp.MUL:
            return a * b
        case BinaryOp.DIV:
            return _div(a, b)
        case BinaryOp.MOD:
            return _fmod(a, b)
        case BinaryOp.EXP:
            return _pow(a, b)

    raise ValueError(f"Unknown arithmetic operator {op!r}")

def apply_binary_operator(op: BinaryOp, lhs: ToyValue, rhs: ToyValue) -> ToyValue:
    match (lhs, rhs):
        case (ToyNum(value=a), ToyNum(value=b)):
            return ToyNum(apply_arith(op, a, b))
        case (ToyString(value=a), ToyString(value=b)) if op is BinaryOp.ADD:
            return ToyString(a + b)

    raise InvalidOperation(type_of(lhs), type_of(rhs), op.value)

def eval_binop(n: BinOp, frame: Frame, eval_func: EvalFunc) -> ToyValue:
    lhs = eval_func(n.left, frame)
    rhs = eval_func(n.right, frame)
    return apply_binary_operator(n.op, lhs, rhs)

# ---------------- Comparison and logic ----------------

def _compare(op: CompOp, a, b) -> bool:
    match op:
        case CompOp.EQUAL:
            return a == b
        case CompOp.NOT_EQ:
            return a != b
        case CompOp.GT:
            return a > b
        case CompOp.GE:
            return a >= b
        case CompOp.LT:
            return a < b
        case CompOp.LE:
            return a <= b

    raise ValueError(f"Unknown comparison operator {op!r}")

def eval_comparison(n: Comparison, frame: Frame, eval_func: EvalFunc) -> ToyBool:
    lhs = eval_func(n.left, frame)
    rhs = eval_func(n.right, frame)

    match (lhs, rhs):
        case (ToyNum(value=a), ToyNum(value=b)) | (ToyString(value=a), ToyString(value=b)):
            return ToyBool(_compare(n.op, a, b))

    raise InvalidComparison(type_of(lhs), type_of(rhs))

def eval_bool_chain(n: BoolChain, frame: Frame, eval_func: EvalFunc) -> ToyBool:
    # Both sides run even when the left one decides the result.
    lhs = eval_func(n.left, frame)
    rhs = eval_func(n.right, frame)

    if not (isinstance(lhs, ToyBool) and isinstance(rhs, ToyBool)):
        raise InvalidBooleanOperands(type_of(lhs), type_of(rhs))

    if n.op is BoolLogic.AND:
        return ToyBool(lhs.value and rhs.value)

    return ToyBool(lhs.value or rhs.value)

def eval_unop(n: UnOp, frame: Frame, eval_func: EvalFunc) -> ToyValue:
    value = eval_func(n.expr, frame)

    if n.op is UnaryOp.NOT:
        if isinstance(value, ToyBool):
            return ToyBool(not value.value)
        raise CannotNegate(type_of(value))

    raise ValueError(f"Unknown unary operator {n.op!r}")

# ---------------- Arrays ----------------

def eval_array(n: ArrayLiteral, frame: Frame, eval_func: EvalFunc) -> ToyArray:
    return ToyArray(tuple(eval_all(n.items, frame, eval_func)))

def checked_index(raw: float, length: int) -> int:
    if not math.isfinite(raw):
        raise IndexOutOfBounds(format_number(raw), length)

    idx = math.trunc(raw)
    if idx < 0 or idx >= length:
        raise IndexOutOfBounds(idx, length)

    return idx

def eval_index(n: Index, frame: Frame, eval_func: EvalFunc) -> ToyValue:
    base = eval_func(n.base, frame)
    idx = eval_func(n.index, frame)

    if not isinstance(idx, ToyNum):
        raise InvalidIndexType(type_of(idx))

    if not isinstance(base, ToyArray):
        raise NotIndexable(type_of(base))

    return base.items[checked_index(idx.value, len(base.items))]
