from __future__ import annotations

import math
import re

from lark.exceptions import UnexpectedCharacters

from ..tree import Literal, TypeOf, Typecast
from ..types import (
    InvalidTypecast, Kind, ParseError, ToyArray, ToyBool, ToyNum, ToyString, ToyType,
    ToyValue, ToylangSyntaxError, TypeTag, TYPE_BOOLEAN, TYPE_NUM, TYPE_TYPE, Frame, WrongType,
    stringify, type_of,
)
from .common import EvalFunc

_TYPE_KEYWORDS = frozenset(("num", "string", "bool", "array", "type", "void", "func"))

_DECIMAL_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\Z")

_SPECIAL_NUMBERS = {
    "inf": math.inf,
    "+inf": math.inf,
    "-inf": -math.inf,
    "infinity": math.inf,
    "+infinity": math.inf,
    "-infinity": -math.inf,
    "nan": math.nan,
}

def parse_num(text: str) -> float:
    if _DECIMAL_RE.match(text):
        return float(text)

    special = _SPECIAL_NUMBERS.get(text.lower())
    if special is not None:
        return special

    raise ParseError(text, TYPE_NUM)

def parse_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False

    raise ParseError(text, TYPE_BOOLEAN)

def parse_type(text: str) -> TypeTag:
    """Type keyword spelling, `func(...)` signatures included."""
    from ..parser import parse_line, tokenize

    if text.strip() != text or not text:
        raise ParseError(text, TYPE_TYPE)

    # a bare keyword or signature only: no grouping parens, no comments
    try:
        tokens = list(tokenize(text))
    except UnexpectedCharacters:
        raise ParseError(text, TYPE_TYPE) from None

    if str(tokens[0]) not in _TYPE_KEYWORDS or any(tok.type == "COMMENT" for tok in tokens):
        raise ParseError(text, TYPE_TYPE)

    try:
        node = parse_line(text)
    except ToylangSyntaxError:
        raise ParseError(text, TYPE_TYPE) from None

    if isinstance(node, Literal) and isinstance(node.value, ToyType):
        return node.value.tag

    raise ParseError(text, TYPE_TYPE)

def cast_value(value: ToyValue, target: TypeTag) -> ToyValue:
    match (value, target.kind):
        case (ToyNum() | ToyBool() | ToyType(), Kind.STRING):
            return ToyString(stringify(value))
        case (ToyString(value=text), Kind.NUM):
            return ToyNum(parse_num(text))
        case (ToyString(value=text), Kind.BOOLEAN):
            return ToyBool(parse_bool(text))
        case (ToyString(value=text), Kind.TYPE):
            return ToyType(parse_type(text))
        case (ToyString(value=text), Kind.ARRAY):
            return ToyArray(tuple(ToyString(ch) for ch in text))

    raise InvalidTypecast(type_of(value), target)

def eval_typecast(n: Typecast, frame: Frame, eval_func: EvalFunc) -> ToyValue:
    value = eval_func(n.value, frame)
    target = eval_func(n.target, frame)

    if not isinstance(target, ToyType):
        raise WrongType(TYPE_TYPE, type_of(target), "typecast target")

    return cast_value(value, target.tag)

def eval_typeof(n: TypeOf, frame: Frame, eval_func: EvalFunc) -> ToyType:
    return ToyType(type_of(eval_func(n.expr, frame)))
