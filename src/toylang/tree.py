"""AST node classes produced by the parser and consumed by the evaluator.

Expressions and statements are frozen dataclasses so a parsed program can be
shared between function values without copying. ``line`` is diagnostic
metadata only and does not take part in equality.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union
from typing_extensions import TypeAlias

from .types import ToyValue

# ---------- Operators ----------

class BinaryOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    EXP = "**"

class CompOp(Enum):
    EQUAL = "=="
    NOT_EQ = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="

class BoolLogic(Enum):
    AND = "and"
    OR = "or"

class UnaryOp(Enum):
    NOT = "!"

class AssignOp(Enum):
    EQUALS = "="
    ADD_EQ = "+="
    SUB_EQ = "-="
    MUL_EQ = "*="
    DIV_EQ = "/="
    MOD_EQ = "%="
    EXP_EQ = "**="

    @property
    def arith(self) -> Optional[BinaryOp]:
        """Arithmetic operator behind a compound assignment."""
        if self is AssignOp.EQUALS:
            return None
        return BinaryOp(self.value[:-1])

# ---------- Expressions ----------

@dataclass(frozen=True)
class Literal:
    value: ToyValue

@dataclass(frozen=True)
class Reference:
    name: str

@dataclass(frozen=True)
class Typecast:
    value: 'Expr'
    target: 'Expr'

@dataclass(frozen=True)
class TypeOf:
    expr: 'Expr'

@dataclass(frozen=True)
class CallFunc:
    callee: 'Expr'
    args: Tuple['Expr', ...] = ()

@dataclass(frozen=True)
class ArrayLiteral:
    items: Tuple['Expr', ...] = ()

@dataclass(frozen=True)
class Index:
    base: 'Expr'
    index: 'Expr'

@dataclass(frozen=True)
class BinOp:
    op: BinaryOp
    left: 'Expr'
    right: 'Expr'

@dataclass(frozen=True)
class Comparison:
    op: CompOp
    left: 'Expr'
    right: 'Expr'

@dataclass(frozen=True)
class BoolChain:
    op: BoolLogic
    left: 'Expr'
    right: 'Expr'

@dataclass(frozen=True)
class UnOp:
    op: UnaryOp
    expr: 'Expr'

@dataclass(frozen=True)
class Length:
    expr: 'Expr'

@dataclass(frozen=True)
class ToUpper:
    expr: 'Expr'

@dataclass(frozen=True)
class ToLower:
    expr: 'Expr'

Expr: TypeAlias = Union[
    Literal, Reference, Typecast, TypeOf, CallFunc, ArrayLiteral, Index,
    BinOp, Comparison, BoolChain, UnOp, Length, ToUpper, ToLower,
]

# ---------- Statements ----------

@dataclass(frozen=True)
class DeclareVar:
    name: str
    expr: Expr
    line: Optional[int] = field(default=None, compare=False)

@dataclass(frozen=True)
class MutateVar:
    op: AssignOp
    name: str
    expr: Expr
    line: Optional[int] = field(default=None, compare=False)

@dataclass(frozen=True)
class Expression:
    expr: Expr
    line: Optional[int] = field(default=None, compare=False)

@dataclass(frozen=True)
class Return:
    expr: Expr
    line: Optional[int] = field(default=None, compare=False)

@dataclass(frozen=True)
class Branch:
    cond: Expr
    body: Tuple['Statement', ...]

@dataclass(frozen=True)
class If:
    branch: Branch
    elifs: Tuple[Branch, ...] = ()
    else_body: Optional[Tuple['Statement', ...]] = None
    line: Optional[int] = field(default=None, compare=False)

@dataclass(frozen=True)
class While:
    cond: Expr
    body: Tuple['Statement', ...]
    line: Optional[int] = field(default=None, compare=False)

@dataclass(frozen=True)
class Print:
    exprs: Tuple[Expr, ...]
    line: Optional[int] = field(default=None, compare=False)

@dataclass(frozen=True)
class Println:
    exprs: Tuple[Expr, ...] = ()
    line: Optional[int] = field(default=None, compare=False)

@dataclass(frozen=True)
class Exit:
    expr: Expr
    line: Optional[int] = field(default=None, compare=False)

Statement: TypeAlias = Union[DeclareVar, MutateVar, Expression, Return, If, While, Print, Println, Exit]

Line: TypeAlias = Union[Statement, Expr]

_STATEMENT_TYPES = (DeclareVar, MutateVar, Expression, Return, If, While, Print, Println, Exit)

def is_statement(node: object) -> bool:
    return isinstance(node, _STATEMENT_TYPES)

def node_line(node: object) -> Optional[int]:
    return getattr(node, "line", None)
