from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import ToylangSyntaxError, ToyBool, ToyFunc, ToyNum, ToyString, ToyType, ToyVoid
from toylang.parser import parse_line, parse_program, tokenize
from toylang.tree import (
    ArrayLiteral,
    AssignOp,
    BinOp,
    BinaryOp,
    BoolChain,
    BoolLogic,
    Branch,
    CallFunc,
    CompOp,
    Comparison,
    DeclareVar,
    Exit,
    Expression,
    If,
    Index,
    Length,
    Literal,
    MutateVar,
    Print,
    Println,
    Reference,
    Return,
    ToLower,
    ToUpper,
    TypeOf,
    Typecast,
    UnOp,
    UnaryOp,
    While,
)
from toylang.types import TYPE_ARRAY, TYPE_NUM, TYPE_STRING, TYPE_TYPE, TYPE_VOID, func_type


def num(v: float) -> Literal:
    return Literal(ToyNum(float(v)))


def ref(name: str) -> Reference:
    return Reference(name)


EXPRESSIONS = [
    pytest.param("1 + 2 * 3", BinOp(BinaryOp.ADD, num(1), BinOp(BinaryOp.MUL, num(2), num(3))), id="precedence"),
    pytest.param("2 ** 3 ** 2", BinOp(BinaryOp.EXP, num(2), BinOp(BinaryOp.EXP, num(3), num(2))), id="pow-right-assoc"),
    pytest.param("8 - 2 - 1", BinOp(BinaryOp.SUB, BinOp(BinaryOp.SUB, num(8), num(2)), num(1)), id="sub-left-assoc"),
    pytest.param("-5", num(-5), id="negative-literal-folds"),
    pytest.param("-x", BinOp(BinaryOp.SUB, num(0), ref("x")), id="negate-reference"),
    pytest.param(
        "-2 ** 2",
        BinOp(BinaryOp.SUB, num(0), BinOp(BinaryOp.EXP, num(2), num(2))),
        id="negation-wraps-pow",
    ),
    pytest.param("2 ** -1", BinOp(BinaryOp.EXP, num(2), num(-1)), id="pow-negative-exponent"),
    pytest.param("!done", UnOp(UnaryOp.NOT, ref("done")), id="not"),
    pytest.param(
        "a && b || c",
        BoolChain(BoolLogic.OR, BoolChain(BoolLogic.AND, ref("a"), ref("b")), ref("c")),
        id="and-before-or",
    ),
    pytest.param(
        "a or b and c",
        BoolChain(BoolLogic.OR, ref("a"), BoolChain(BoolLogic.AND, ref("b"), ref("c"))),
        id="word-operators",
    ),
    pytest.param("x >= 1", Comparison(CompOp.GE, ref("x"), num(1)), id="comparison"),
    pytest.param("5 as string", Typecast(num(5), Literal(ToyType(TYPE_STRING))), id="typecast"),
    pytest.param(
        "5 + 5 as string",
        BinOp(BinaryOp.ADD, num(5), Typecast(num(5), Literal(ToyType(TYPE_STRING)))),
        id="cast-binds-tighter-than-plus",
    ),
    pytest.param(
        "ARGV[1] as num",
        Typecast(Index(ref("ARGV"), num(1)), Literal(ToyType(TYPE_NUM))),
        id="index-then-cast",
    ),
    pytest.param(
        'x as typeof("foobar")',
        Typecast(ref("x"), TypeOf(Literal(ToyString("foobar")))),
        id="typeof-target",
    ),
    pytest.param("f()(3)", CallFunc(CallFunc(ref("f"), ()), (num(3),)), id="call-chain"),
    pytest.param("arr[1](3)", CallFunc(Index(ref("arr"), num(1)), (num(3),)), id="call-index"),
    pytest.param("[1, true]", ArrayLiteral((num(1), Literal(ToyBool(True)))), id="array"),
    pytest.param("[]", ArrayLiteral(()), id="empty-array"),
    pytest.param('length("test" as array)', Length(Typecast(Literal(ToyString("test")), Literal(ToyType(TYPE_ARRAY)))), id="length"),
    pytest.param('to_upper("a")', ToUpper(Literal(ToyString("a"))), id="to-upper"),
    pytest.param('to_lower("A")', ToLower(Literal(ToyString("A"))), id="to-lower"),
    pytest.param("type", Literal(ToyType(TYPE_TYPE)), id="type-keyword"),
    pytest.param("void", Literal(ToyType(TYPE_VOID)), id="void-keyword"),
    pytest.param(
        "func(num, func(string))",
        Literal(ToyType(func_type((TYPE_NUM, func_type((TYPE_STRING,)))))),
        id="func-type",
    ),
    pytest.param(r'"a\nb\"c\\"', Literal(ToyString('a\nb"c\\')), id="string-escapes"),
    pytest.param("1.5e3", num(1500), id="exponent-number"),
    pytest.param("lettuce", ref("lettuce"), id="keyword-prefixed-identifier"),
]


@pytest.mark.parametrize("source, expected", EXPRESSIONS)
def test_parse_expression(source: str, expected) -> None:
    assert parse_line(source) == expected


STATEMENTS = [
    pytest.param("let x = 1;", DeclareVar("x", num(1)), id="declare"),
    pytest.param("x = 2;", MutateVar(AssignOp.EQUALS, "x", num(2)), id="assign"),
    pytest.param("x **= 2;", MutateVar(AssignOp.EXP_EQ, "x", num(2)), id="pow-assign"),
    pytest.param("x %= 2;", MutateVar(AssignOp.MOD_EQ, "x", num(2)), id="mod-assign"),
    pytest.param("return;", Return(Literal(ToyVoid())), id="bare-return"),
    pytest.param("return 1;", Return(num(1)), id="return"),
    pytest.param("exit 0;", Exit(num(0)), id="exit"),
    pytest.param('print "a", 1;', Print((Literal(ToyString("a")), num(1))), id="print"),
    pytest.param("println;", Println(()), id="empty-println"),
    pytest.param("f();", Expression(CallFunc(ref("f"), ())), id="expression-statement"),
    pytest.param(
        "while i < 3 { i += 1; }",
        While(Comparison(CompOp.LT, ref("i"), num(3)), (MutateVar(AssignOp.ADD_EQ, "i", num(1)),)),
        id="while",
    ),
    pytest.param(
        "if a { f(); } elif b { } else { return; }",
        If(
            Branch(ref("a"), (Expression(CallFunc(ref("f"), ())),)),
            (Branch(ref("b"), ()),),
            (Return(Literal(ToyVoid())),),
        ),
        id="if-elif-else",
    ),
    pytest.param("if a { }", If(Branch(ref("a"), ())), id="if-only"),
]


@pytest.mark.parametrize("source, expected", STATEMENTS)
def test_parse_statement(source: str, expected) -> None:
    assert parse_line(source) == expected


def test_function_literal() -> None:
    node = parse_line("func(n: num, f: func(string)) { return n; }")

    assert isinstance(node, Literal)
    fn = node.value
    assert isinstance(fn, ToyFunc)
    assert fn.params == (("n", TYPE_NUM), ("f", func_type((TYPE_STRING,))))
    assert fn.body == (Return(ref("n")),)
    assert fn.captured is None


def test_program_keeps_statement_order_and_lines() -> None:
    source = dedent(
        """\
        let a = 1; // first

        let b = 2;
        println a + b;
        """
    )
    stmts = parse_program(source)

    assert [type(s) for s in stmts] == [DeclareVar, DeclareVar, Println]
    assert [s.line for s in stmts] == [1, 3, 4]


def test_empty_program() -> None:
    assert parse_program("") == ()
    assert parse_program("// only a comment\n") == ()


@pytest.mark.parametrize(
    "source, fragment",
    [
        pytest.param("let = 5;", "unexpected '='", id="missing-name"),
        pytest.param("let x = 1", "end of input", id="missing-semicolon"),
        pytest.param("let x = @;", "unexpected character '@'", id="bad-character"),
        pytest.param("let let = 1;", "unexpected 'let'", id="keyword-as-name"),
        pytest.param("1 < 2 < 3;", "unexpected '<'", id="comparison-non-assoc"),
        pytest.param('let s = "open;', "unexpected character", id="unterminated-string"),
        pytest.param("if x { ", "end of input", id="unclosed-block"),
    ],
)
def test_syntax_errors(source: str, fragment: str) -> None:
    with pytest.raises(ToylangSyntaxError) as exc_info:
        parse_program(source)

    assert fragment in str(exc_info.value)


def test_syntax_error_position() -> None:
    with pytest.raises(ToylangSyntaxError) as exc_info:
        parse_program("let a = 1;\nlet b = ;")

    err = exc_info.value
    assert err.line == 2
    assert err.column == 9
    assert str(err).endswith("(line 2, col 9)")


def test_tokenize_keeps_comments() -> None:
    kinds = [(tok.type, str(tok)) for tok in tokenize("x // note") if tok.type != "WS"]

    assert kinds == [("NAME", "x"), ("COMMENT", "// note")]
