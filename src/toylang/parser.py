"""Lark front end: source text -> ``toylang.tree`` nodes."""
from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from .tree import (
    ArrayLiteral, AssignOp, BinOp, BinaryOp, BoolChain, BoolLogic, Branch, CallFunc,
    CompOp, Comparison, DeclareVar, Exit, Expr, Expression, If, Index, Length, Line,
    Literal, MutateVar, Print, Println, Reference, Return, Statement, ToLower,
    ToUpper, TypeOf, Typecast, UnOp, UnaryOp, While,
)
from .types import (
    ToyBool, ToyFunc, ToyNum, ToyString, ToyType, ToyVoid, ToylangSyntaxError,
    TYPE_NAMES, TypeTag, func_type,
)

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"'}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _unescape(raw: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), raw)


def _line(meta: Any) -> Optional[int]:
    return getattr(meta, "line", None)


class AstBuilder(Transformer):
    """Turn the lark parse tree into frozen AST dataclasses."""

    # ---- containers ----
    def program(self, stmts: List[Statement]) -> Tuple[Statement, ...]:
        return tuple(stmts)

    def line(self, items: List[Line]) -> Line:
        return items[0]

    def block(self, stmts: List[Statement]) -> Tuple[Statement, ...]:
        return tuple(stmts)

    def expr_list(self, items: List[Expr]) -> Tuple[Expr, ...]:
        return tuple(items)

    # ---- statements ----
    @v_args(meta=True, inline=True)
    def declare(self, meta, name: Token, expr: Expr) -> DeclareVar:
        return DeclareVar(str(name), expr, line=_line(meta))

    @v_args(meta=True, inline=True)
    def mutate(self, meta, name: Token, op: AssignOp, expr: Expr) -> MutateVar:
        return MutateVar(op, str(name), expr, line=_line(meta))

    @v_args(inline=True)
    def assign_op(self, tok: Token) -> AssignOp:
        return AssignOp(str(tok))

    @v_args(meta=True, inline=True)
    def return_stmt(self, meta, expr: Optional[Expr]) -> Return:
        if expr is None:
            expr = Literal(ToyVoid())
        return Return(expr, line=_line(meta))

    @v_args(meta=True)
    def if_stmt(self, meta, children: List[Any]) -> If:
        cond, body, *rest = children
        elifs = tuple(c for c in rest if isinstance(c, Branch))
        else_body = rest[-1] if rest and isinstance(rest[-1], tuple) else None
        return If(Branch(cond, body), elifs, else_body, line=_line(meta))

    @v_args(inline=True)
    def elif_clause(self, cond: Expr, body: Tuple[Statement, ...]) -> Branch:
        return Branch(cond, body)

    @v_args(inline=True)
    def else_clause(self, body: Tuple[Statement, ...]) -> Tuple[Statement, ...]:
        return body

    @v_args(meta=True, inline=True)
    def while_stmt(self, meta, cond: Expr, body: Tuple[Statement, ...]) -> While:
        return While(cond, body, line=_line(meta))

    @v_args(meta=True, inline=True)
    def print_stmt(self, meta, exprs: Tuple[Expr, ...]) -> Print:
        return Print(exprs, line=_line(meta))

    @v_args(meta=True, inline=True)
    def println_stmt(self, meta, exprs: Optional[Tuple[Expr, ...]]) -> Println:
        return Println(exprs or (), line=_line(meta))

    @v_args(meta=True, inline=True)
    def exit_stmt(self, meta, expr: Expr) -> Exit:
        return Exit(expr, line=_line(meta))

    @v_args(meta=True, inline=True)
    def expr_stmt(self, meta, expr: Expr) -> Expression:
        return Expression(expr, line=_line(meta))

    # ---- operators ----
    @v_args(inline=True)
    def or_op(self, _tok: Token) -> BoolLogic:
        return BoolLogic.OR

    @v_args(inline=True)
    def and_op(self, _tok: Token) -> BoolLogic:
        return BoolLogic.AND

    @v_args(inline=True)
    def comp_op(self, tok: Token) -> CompOp:
        return CompOp(str(tok))

    @v_args(inline=True)
    def add_op(self, tok: Token) -> BinaryOp:
        return BinaryOp(str(tok))

    @v_args(inline=True)
    def mul_op(self, tok: Token) -> BinaryOp:
        return BinaryOp(str(tok))

    # ---- expressions ----
    @v_args(inline=True)
    def bool_chain(self, left: Expr, op: BoolLogic, right: Expr) -> BoolChain:
        return BoolChain(op, left, right)

    @v_args(inline=True)
    def compare(self, left: Expr, op: CompOp, right: Expr) -> Comparison:
        return Comparison(op, left, right)

    @v_args(inline=True)
    def binop(self, left: Expr, op: BinaryOp, right: Expr) -> BinOp:
        return BinOp(op, left, right)

    @v_args(inline=True)
    def pow(self, left: Expr, right: Expr) -> BinOp:
        return BinOp(BinaryOp.EXP, left, right)

    @v_args(inline=True)
    def typecast(self, value: Expr, target: Expr) -> Typecast:
        return Typecast(value, target)

    @v_args(inline=True)
    def not_(self, expr: Expr) -> UnOp:
        return UnOp(UnaryOp.NOT, expr)

    @v_args(inline=True)
    def neg(self, expr: Expr) -> Expr:
        if isinstance(expr, Literal) and isinstance(expr.value, ToyNum):
            return Literal(ToyNum(-expr.value.value))
        return BinOp(BinaryOp.SUB, Literal(ToyNum(0.0)), expr)

    @v_args(inline=True)
    def index(self, base: Expr, idx: Expr) -> Index:
        return Index(base, idx)

    @v_args(inline=True)
    def call(self, callee: Expr, args: Optional[Tuple[Expr, ...]]) -> CallFunc:
        return CallFunc(callee, args or ())

    @v_args(inline=True)
    def number(self, tok: Token) -> Literal:
        return Literal(ToyNum(float(tok)))

    @v_args(inline=True)
    def string(self, tok: Token) -> Literal:
        return Literal(ToyString(_unescape(str(tok)[1:-1])))

    def true(self, _children: List[Any]) -> Literal:
        return Literal(ToyBool(True))

    def false(self, _children: List[Any]) -> Literal:
        return Literal(ToyBool(False))

    @v_args(inline=True)
    def type_literal(self, tag: TypeTag) -> Literal:
        return Literal(ToyType(tag))

    @v_args(inline=True)
    def array(self, items: Optional[Tuple[Expr, ...]]) -> ArrayLiteral:
        return ArrayLiteral(items or ())

    @v_args(inline=True)
    def typeof(self, expr: Expr) -> TypeOf:
        return TypeOf(expr)

    @v_args(inline=True)
    def length(self, expr: Expr) -> Length:
        return Length(expr)

    @v_args(inline=True)
    def to_upper(self, expr: Expr) -> ToUpper:
        return ToUpper(expr)

    @v_args(inline=True)
    def to_lower(self, expr: Expr) -> ToLower:
        return ToLower(expr)

    @v_args(inline=True)
    def reference(self, tok: Token) -> Reference:
        return Reference(str(tok))

    # ---- functions and types ----
    @v_args(inline=True)
    def func_literal(self, params: Optional[Tuple[Tuple[str, TypeTag], ...]], body: Tuple[Statement, ...]) -> Literal:
        return Literal(ToyFunc(params=params or (), body=body))

    def param_list(self, params: List[Tuple[str, TypeTag]]) -> Tuple[Tuple[str, TypeTag], ...]:
        return tuple(params)

    @v_args(inline=True)
    def param(self, name: Token, tag: TypeTag) -> Tuple[str, TypeTag]:
        return (str(name), tag)

    @v_args(inline=True)
    def simple_type(self, tok: Token) -> TypeTag:
        return TYPE_NAMES[str(tok)]

    @v_args(inline=True)
    def func_type(self, params: Optional[Tuple[TypeTag, ...]]) -> TypeTag:
        return func_type(params or ())

    def type_list(self, tags: List[TypeTag]) -> Tuple[TypeTag, ...]:
        return tuple(tags)


@lru_cache(maxsize=None)
def get_parser() -> Lark:
    return Lark(
        GRAMMAR_PATH.read_text(encoding="utf-8"),
        parser="lalr",
        lexer="basic",
        start=["program", "line"],
        propagate_positions=True,
        maybe_placeholders=True,
    )


def _describe_expected(parser: Lark, names: Any) -> str:
    shown = []

    for name in sorted(names or ()):
        try:
            pattern = parser.get_terminal(name).pattern
        except KeyError:
            shown.append(name)
            continue

        if pattern.type == "str":
            shown.append(repr(pattern.value))
        else:
            shown.append(name.lower())

    return ", ".join(shown)


def _syntax_error(exc: UnexpectedInput, text: str) -> ToylangSyntaxError:
    parser = get_parser()

    if isinstance(exc, UnexpectedCharacters):
        char = text[exc.pos_in_stream] if exc.pos_in_stream < len(text) else ""
        return ToylangSyntaxError(f"unexpected character {char!r}", exc.line, exc.column)

    if isinstance(exc, UnexpectedToken):
        tok = exc.token
        what = "end of input" if tok.type == "$END" else repr(str(tok))
        expected = _describe_expected(parser, exc.accepts or exc.expected)
        msg = f"unexpected {what}"
        if expected:
            msg += f", expected one of: {expected}"
        line = exc.line if isinstance(exc.line, int) and exc.line > 0 else None
        column = exc.column if line is not None else None
        return ToylangSyntaxError(msg, line, column)

    if isinstance(exc, UnexpectedEOF):
        return ToylangSyntaxError("unexpected end of input")

    return ToylangSyntaxError(str(exc))


def _parse(text: str, start: str) -> Any:
    try:
        tree = get_parser().parse(text, start=start)
    except UnexpectedInput as exc:
        raise _syntax_error(exc, text) from None

    return AstBuilder().transform(tree)


def parse_program(text: str) -> Tuple[Statement, ...]:
    return _parse(text, "program")


def parse_line(text: str) -> Line:
    """Parse one REPL entry: a statement, or a bare expression without ';'."""
    return _parse(text, "line")


def tokenize(text: str) -> Iterator[Token]:
    """Raw lark tokens, comments included; raises lark's UnexpectedCharacters."""
    return get_parser().lex(text, dont_ignore=True)
