"""Tests for the expression parser."""

import pytest

from pimp_my_axis.domain.axis import Axis
from pimp_my_axis.domain.expression import AxisReference, BinaryOp, Literal, Operator
from pimp_my_axis.domain.parser import TokenType, parse_expression, tokenize
from pimp_my_axis.errors import ConfigurationError, ParseError, UnknownAxisName


def add(left, right):
    return BinaryOp(Operator.ADD, left, right)


def sub(left, right):
    return BinaryOp(Operator.SUB, left, right)


def mul(left, right):
    return BinaryOp(Operator.MUL, left, right)


class TestStructure:
    def test_precedence_and_parentheses(self):
        parsed = parse_expression("2 + 1 * (1 + 2)")
        assert parsed == add(Literal(2), mul(Literal(1), add(Literal(1), Literal(2))))

    def test_left_associative_subtraction(self):
        parsed = parse_expression("10 - 3 - 2")
        assert parsed == sub(sub(Literal(10), Literal(3)), Literal(2))

    def test_left_associative_division(self):
        parsed = parse_expression("100 / 10 / 5")
        assert parsed == BinaryOp(
            Operator.DIV,
            BinaryOp(Operator.DIV, Literal(100), Literal(10)),
            Literal(5),
        )

    def test_parentheses_override_precedence(self):
        parsed = parse_expression("(2 + 3) * 4")
        assert parsed == mul(add(Literal(2), Literal(3)), Literal(4))

    def test_axis_reference(self):
        assert parse_expression("stick:Throttle") == AxisReference("stick", Axis.THROTTLE)

    def test_device_name_is_everything_before_the_colon(self):
        assert parse_expression("3dpro:X") == AxisReference("3dpro", Axis.X)
        assert parse_expression("42:Y") == AxisReference("42", Axis.Y)
        parsed = parse_expression("left_stick:X-right.stick#2:RZ")
        assert parsed == sub(
            AxisReference("left_stick", Axis.X),
            AxisReference("right.stick#2", Axis.RZ),
        )

    def test_digit_leading_name_next_to_literal(self):
        parsed = parse_expression("2*3dpro:Throttle")
        assert parsed == mul(Literal(2), AxisReference("3dpro", Axis.THROTTLE))

    def test_dash_is_always_an_operator(self):
        assert parse_expression("a:X-b:Y") == sub(
            AxisReference("a", Axis.X), AxisReference("b", Axis.Y)
        )
        with pytest.raises(ParseError) as exc:
            parse_expression("left-stick:X")
        assert exc.value.fragment == "left"

    def test_whitespace_is_insignificant(self):
        compact = parse_expression("A:X*2+(B:Y-1)")
        spaced = parse_expression("  A : X *  2 + ( B:Y - 1 )  ")
        assert compact == spaced

    def test_signed_literals(self):
        assert parse_expression("-5") == Literal(-5)
        assert parse_expression("+5") == Literal(5)
        assert parse_expression("2 - -3") == sub(Literal(2), Literal(-3))
        assert parse_expression("A:X * -1") == mul(AxisReference("A", Axis.X), Literal(-1))

    def test_device_names_are_case_sensitive(self):
        assert parse_expression("Pad:X") != parse_expression("pad:X")

    def test_parsing_twice_gives_equal_trees(self):
        text = "pedals:RX - pedals:RY / 2"
        first, second = parse_expression(text), parse_expression(text)
        assert first == second
        assert hash(first) == hash(second)


class TestErrors:
    @pytest.mark.parametrize(
        "text",
        ["", "   ", "1 +", "(1 + 2", "1 + 2)", "()", "1 2", "* 3", "A:X A:Y", "- A:X"],
    )
    def test_malformed_syntax(self, text):
        with pytest.raises(ParseError):
            parse_expression(text)

    def test_unknown_axis_name(self):
        with pytest.raises(UnknownAxisName) as exc:
            parse_expression("A:X + B:Foo")
        assert exc.value.fragment == "Foo"
        assert exc.value.position == 8
        assert "Foo" in str(exc.value)

    def test_axis_names_are_case_sensitive(self):
        with pytest.raises(UnknownAxisName):
            parse_expression("stick:throttle")

    def test_missing_colon(self):
        with pytest.raises(ParseError) as exc:
            parse_expression("1 + stick")
        assert exc.value.fragment == "stick"
        assert exc.value.position == 4

    def test_word_starting_with_digits_needs_a_colon(self):
        with pytest.raises(ParseError) as exc:
            parse_expression("3dpro + 1")
        assert exc.value.fragment == "3dpro"
        assert exc.value.position == 0

    def test_missing_axis_name(self):
        with pytest.raises(ParseError):
            parse_expression("stick: + 1")

    def test_unbalanced_parenthesis_reports_context(self):
        with pytest.raises(ParseError) as exc:
            parse_expression("(A:X + 2")
        message = str(exc.value)
        assert "(A:X + 2" in message
        assert "')'" in message

    def test_unexpected_character(self):
        with pytest.raises(ParseError) as exc:
            parse_expression("A:X % 2")
        assert exc.value.fragment == "%"
        assert exc.value.position == 4

    def test_literal_out_of_range(self):
        with pytest.raises(ParseError):
            parse_expression("4294967296")

    def test_errors_are_configuration_errors(self):
        with pytest.raises(ConfigurationError):
            parse_expression("A:Nope")


def test_tokenize_ends_with_eof():
    tokens = tokenize("A:X + 1")
    assert [t.type for t in tokens] == [
        TokenType.AXIS_REF,
        TokenType.OPERATOR,
        TokenType.NUMBER,
        TokenType.EOF,
    ]
    assert tokens[0].value == AxisReference("A", Axis.X)
