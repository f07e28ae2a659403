import pytest

from equasolver.errors import ParseError
from equasolver.grammar import parse, parse_expression, tokenize, variables_in
from equasolver.nodes import (
    BinaryOp, Call, Constant, UnaryOp, Variable, collect_variables, to_source,
)


def test_tokenize_positions() -> None:
    tokens = tokenize("x + 12.5")
    assert [(t.kind, t.value, t.position) for t in tokens] == [
        ("ident", "x", 0),
        ("op", "+", 2),
        ("number", "12.5", 4),
        ("eof", "", 8),
    ]


class TestPrecedence:
    def test_multiplication_before_addition(self):
        assert parse_expression("1 + 2 * 3") == BinaryOp(
            "+", Constant(1.0), BinaryOp("*", Constant(2.0), Constant(3.0))
        )

    def test_subtraction_is_left_associative(self):
        assert parse_expression("8 - 4 - 2") == BinaryOp(
            "-", BinaryOp("-", Constant(8.0), Constant(4.0)), Constant(2.0)
        )

    def test_power_is_right_associative(self):
        assert parse_expression("2^3^2") == BinaryOp(
            "^", Constant(2.0), BinaryOp("^", Constant(3.0), Constant(2.0))
        )

    def test_unary_minus_binds_tighter_than_power(self):
        assert parse_expression("-2^2") == BinaryOp("^", Constant(-2.0), Constant(2.0))
        assert parse_expression("-x^2") == BinaryOp(
            "^", UnaryOp("-", Variable("x")), Constant(2.0)
        )

    def test_negative_exponent(self):
        assert parse_expression("x^-2") == BinaryOp("^", Variable("x"), Constant(-2.0))


class TestPrimaries:
    def test_scientific_number(self):
        assert parse_expression("1.5e3") == Constant(1500.0)
        assert parse_expression("6.6e-34") == Constant(6.6e-34)

    def test_identifier_with_underscore_and_digits(self):
        assert parse_expression("v_0") == Variable("v_0")

    def test_imaginary_unit(self):
        assert parse_expression("i") == Variable("IN")
        assert parse_expression("2*i") == BinaryOp("*", Constant(2.0), Variable("IN"))

    def test_calls(self):
        assert parse_expression("sqrt(x)") == Call("sqrt", (Variable("x"),))
        assert parse_expression("log(2, 8)") == Call("log", (Constant(2.0), Constant(8.0)))
        assert parse_expression("ln(2, 8)") == Call("ln", (Constant(2.0), Constant(8.0)))
        assert parse_expression("pow(x, 3)") == Call("pow", (Variable("x"), Constant(3.0)))


def test_equation() -> None:
    result = parse("x + 1 = 3")
    assert result.is_equation
    assert result.left == BinaryOp("+", Variable("x"), Constant(1.0))
    assert result.right == Constant(3.0)
    assert result.expression is None


def test_variables_in_equation() -> None:
    assert variables_in(parse("b*x + a = y")) == ["a", "b", "x", "y"]
    assert collect_variables(parse_expression("x*x + sin(x)")) == ["x"]


@pytest.mark.parametrize(
    "text,message",
    [
        ("foo(1)", "Unknown function: foo"),
        ("sin(1, 2)", "takes 1 argument"),
        ("pow(2)", "takes 2 argument"),
        ("log(1, 2, 3)", "takes 1 or 2"),
        ("1 +", "Unexpected end of input"),
        ("(1 + 2", "Expected '\\)'"),
        ("x = 1 = 2", "Unexpected token '='"),
        ("sin", "needs parenthesised"),
        ("", "cannot be empty"),
    ],
)
def test_parse_errors(text: str, message: str) -> None:
    with pytest.raises(ParseError, match=message):
        parse(text)


def test_parse_error_carries_position() -> None:
    with pytest.raises(ParseError) as info:
        parse("2 $ 3")
    assert info.value.position == 2
    assert isinstance(info.value, ValueError)


def test_parse_expression_rejects_equation() -> None:
    with pytest.raises(ParseError):
        parse_expression("x = 1")


@pytest.mark.parametrize(
    "text",
    [
        "1 + 2 * 3",
        "(1 + 2) * 3",
        "2^3^2",
        "(2^3)^2",
        "x - (y - z)",
        "-x^2",
        "sin(x) / (1 + x)",
        "log(2, 8) - -3",
        "a / b / c",
    ],
)
def test_to_source_reparses_to_same_tree(text: str) -> None:
    tree = parse_expression(text)
    assert parse_expression(to_source(tree)) == tree
