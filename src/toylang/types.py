from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Tuple, Union
from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from .tree import Statement

# ---------- Type tags ----------

class Kind(Enum):
    NUM = "num"
    STRING = "string"
    BOOLEAN = "bool"
    ARRAY = "array"
    TYPE = "type"
    VOID = "void"
    FUNC = "func"

@dataclass(frozen=True)
class TypeTag:
    kind: Kind
    params: Tuple['TypeTag', ...] = ()

    def __str__(self) -> str:
        if self.kind is Kind.FUNC:
            return "func(" + ", ".join(str(p) for p in self.params) + ")"
        return self.kind.value

TYPE_NUM = TypeTag(Kind.NUM)
TYPE_STRING = TypeTag(Kind.STRING)
TYPE_BOOLEAN = TypeTag(Kind.BOOLEAN)
TYPE_ARRAY = TypeTag(Kind.ARRAY)
TYPE_TYPE = TypeTag(Kind.TYPE)
TYPE_VOID = TypeTag(Kind.VOID)

# Keyword spelling -> tag, for every tag that has no parameters.
TYPE_NAMES: Dict[str, TypeTag] = {
    tag.kind.value: tag
    for tag in (TYPE_NUM, TYPE_STRING, TYPE_BOOLEAN, TYPE_ARRAY, TYPE_TYPE, TYPE_VOID)
}

def func_type(params: Tuple[TypeTag, ...]) -> TypeTag:
    return TypeTag(Kind.FUNC, tuple(params))

# ---------- Value Model ----------

def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    # shortest round-trip digits, written out without an exponent
    return format(Decimal(repr(value)), "f")

@dataclass(frozen=True)
class ToyNum:
    value: float
    def __str__(self) -> str:
        return format_number(self.value)

@dataclass(frozen=True)
class ToyString:
    value: str
    def __str__(self) -> str:
        return self.value

@dataclass(frozen=True)
class ToyBool:
    value: bool
    def __str__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class ToyArray:
    items: Tuple['ToyValue', ...] = ()
    def __str__(self) -> str:
        return "[" + ", ".join(str(x) for x in self.items) + "]"

@dataclass(frozen=True)
class ToyType:
    tag: TypeTag
    def __str__(self) -> str:
        return str(self.tag)

@dataclass(frozen=True)
class ToyVoid:
    def __str__(self) -> str:
        return "void"

@dataclass(frozen=True, eq=False)
class ToyFunc:
    params: Tuple[Tuple[str, TypeTag], ...]
    body: Tuple['Statement', ...]
    captured: Optional[Mapping[str, 'ToyValue']] = None  # snapshot taken when the literal is evaluated

    @property
    def param_types(self) -> Tuple[TypeTag, ...]:
        return tuple(tag for _, tag in self.params)

    def __str__(self) -> str:
        return "func(" + ", ".join(str(t) for t in self.param_types) + ")"

    def __repr__(self) -> str:
        names = ", ".join(f"{name}: {tag}" for name, tag in self.params)
        return f"<func ({names}) body={len(self.body)} stmts>"

ToyValue: TypeAlias = Union[ToyNum, ToyString, ToyBool, ToyArray, ToyType, ToyVoid, ToyFunc]

def type_of(value: ToyValue) -> TypeTag:
    match value:
        case ToyNum():
            return TYPE_NUM
        case ToyString():
            return TYPE_STRING
        case ToyBool():
            return TYPE_BOOLEAN
        case ToyArray():
            return TYPE_ARRAY
        case ToyType():
            return TYPE_TYPE
        case ToyVoid():
            return TYPE_VOID
        case ToyFunc():
            return func_type(value.param_types)
    raise ToylangTypeError(f"Unexpected value type {type(value).__name__}")

def stringify(value: ToyValue) -> str:
    return str(value)

# ---------- Environment ----------

class Frame:
    """Flat identifier -> value mapping for one call frame or session.

    There are no parent links: a call gets its own materialized copy of
    every binding it can see (see ``runtime.call_function``).
    """

    def __init__(self, bindings: Optional[Mapping[str, ToyValue]]=None, max_loop_iterations: Optional[int]=None):
        self.vars: Dict[str, ToyValue] = dict(bindings) if bindings else {}
        self.max_loop_iterations = max_loop_iterations

    def define(self, name: str, val: ToyValue) -> None:
        self.vars[name] = val

    def get(self, name: str) -> ToyValue:
        if name in self.vars:
            return self.vars[name]

        raise UndefinedVariable(name)

    def set(self, name: str, val: ToyValue) -> None:
        if name not in self.vars:
            raise UndeclaredVariable(name)

        self.vars[name] = val

    def snapshot(self) -> Dict[str, ToyValue]:
        return dict(self.vars)

    def restore(self, bindings: Mapping[str, ToyValue]) -> None:
        self.vars = dict(bindings)

    def child(self, bindings: Mapping[str, ToyValue]) -> 'Frame':
        """New frame with ``bindings`` and this frame's settings."""
        return Frame(bindings, max_loop_iterations=self.max_loop_iterations)

    def __contains__(self, name: object) -> bool:
        return name in self.vars

    def __repr__(self) -> str:
        return f"Frame({sorted(self.vars)})"

# ---------- Exceptions ----------

class ToylangError(Exception):
    pass

class ToylangSyntaxError(ToylangError):
    def __init__(self, message: str, line: Optional[int]=None, column: Optional[int]=None):
        super().__init__(message)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        msg = super().__str__()

        if self.line is None:
            return msg

        if self.column is None:
            return f"{msg} (line {self.line})"

        return f"{msg} (line {self.line}, col {self.column})"

class ToylangRuntimeError(ToylangError):
    line: Optional[int]

    def __init__(self, message: str):
        super().__init__(message)
        self.line = None

    def __str__(self) -> str:
        msg = super().__str__()

        if self.line is None:
            return msg

        return f"{msg} (line {self.line})"

class ToylangNameError(ToylangRuntimeError):
    pass

class ToylangTypeError(ToylangRuntimeError):
    pass

class ToylangArityError(ToylangRuntimeError):
    pass

class UndefinedVariable(ToylangNameError):
    def __init__(self, name: str):
        super().__init__(f"Undefined variable: {name}")
        self.name = name

class UndeclaredVariable(ToylangNameError):
    def __init__(self, name: str):
        super().__init__(f"undeclared variable: {name}")
        self.name = name

class InvalidIdentifier(ToylangNameError):
    def __init__(self, name: str):
        super().__init__(f"invalid identifier: {name!r}")
        self.name = name

class InvalidOperation(ToylangTypeError):
    def __init__(self, left: TypeTag, right: TypeTag, op: str=""):
        detail = f" {op}" if op else ""
        super().__init__(f"invalid operation{detail} ({left} with {right})")
        self.left = left
        self.right = right
        self.op = op

class InvalidComparison(ToylangTypeError):
    def __init__(self, left: TypeTag, right: TypeTag):
        super().__init__(f"invalid comparison ({left} with {right})")
        self.left = left
        self.right = right

class InvalidBooleanOperands(ToylangTypeError):
    def __init__(self, left: TypeTag, right: TypeTag):
        super().__init__(f"invalid boolean logic (expected two booleans, found {left} and {right})")
        self.left = left
        self.right = right

class CannotNegate(ToylangTypeError):
    def __init__(self, found: TypeTag):
        super().__init__(f"cannot negate {found}")
        self.found = found

class InvalidIndexType(ToylangTypeError):
    def __init__(self, found: TypeTag):
        super().__init__(f"array index must be num, found {found}")
        self.found = found

class NotIndexable(ToylangTypeError):
    def __init__(self, found: TypeTag):
        super().__init__(f"cannot index into {found}")
        self.found = found

class IndexOutOfBounds(ToylangRuntimeError):
    def __init__(self, index: Union[int, float], length: int):
        super().__init__(f"index out of bounds: the length is {length} but the index is {index}")
        self.index = index
        self.length = length

class InvalidTypecast(ToylangTypeError):
    def __init__(self, source: TypeTag, target: TypeTag):
        super().__init__(f"cannot cast {source} to {target}")
        self.source = source
        self.target = target

class ParseError(ToylangRuntimeError):
    def __init__(self, text: str, target: TypeTag):
        super().__init__(f"cannot parse {text!r} as {target}")
        self.text = text
        self.target = target

class WrongArgCount(ToylangArityError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"function expects {expected} argument(s); got {actual}")
        self.expected = expected
        self.actual = actual

class WrongArgType(ToylangTypeError):
    def __init__(self, expected: TypeTag, actual: TypeTag):
        super().__init__(f"wrong argument type: expected {expected}, found {actual}")
        self.expected = expected
        self.actual = actual

class NotCallable(ToylangTypeError):
    def __init__(self, found: TypeTag):
        super().__init__(f"{found} is not callable")
        self.found = found

class ExpectedBoolean(ToylangTypeError):
    def __init__(self, found: TypeTag):
        super().__init__(f"expected boolean, found {found}")
        self.found = found

class InvalidCompoundAssign(ToylangTypeError):
    def __init__(self, found: TypeTag):
        super().__init__(f"= is only valid assignment for {found}")
        self.found = found

class NoLength(ToylangTypeError):
    def __init__(self, found: TypeTag):
        super().__init__(f"{found} has no length")
        self.found = found

class WrongType(ToylangTypeError):
    def __init__(self, expected: TypeTag, actual: TypeTag, context: str=""):
        prefix = f"{context}: " if context else ""
        super().__init__(f"{prefix}expected {expected}, found {actual}")
        self.expected = expected
        self.actual = actual

class LoopLimitExceeded(ToylangRuntimeError):
    def __init__(self, limit: int):
        super().__init__(f"while loop exceeded {limit} iterations")
        self.limit = limit

class ExitSignal(Exception):
    """Internal control flow for `exit`; unwinds to the program driver."""
    def __init__(self, code: int, diagnostic: Optional[str]=None):
        super().__init__(code)
        self.code = code
        self.diagnostic = diagnostic
