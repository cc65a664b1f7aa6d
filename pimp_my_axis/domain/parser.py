"""Parser for axis expressions.

Grammar::

    expr     := term (("+" | "-") term)*
    term     := factor (("*" | "/") factor)*
    factor   := literal | axis_ref | "(" expr ")"
    axis_ref := device_name ":" axis_name
    literal  := ["+" | "-"] digits

Whitespace between tokens is ignored. A device name is everything before the
``:`` separator and may hold any character except whitespace, parentheses and
the operators, so ``3dpro:X`` and ``pad.2:RZ`` are references while a bare
run of digits is a literal. Axis names must be one of the canonical names of
:class:`Axis`, matched case-sensitively.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List

from .axis import Axis
from .expression import (
    INT32_MAX,
    INT32_MIN,
    AxisReference,
    BinaryOp,
    Expression,
    Literal,
    Operator,
)
from ..errors import ParseError, UnknownAxisName


class TokenType(Enum):
    NUMBER = "number"
    AXIS_REF = "axis reference"
    OPERATOR = "operator"
    LPAREN = "'('"
    RPAREN = "')'"
    EOF = "end of expression"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    position: int
    value: object = None


_WHITESPACE = re.compile(r"\s+")
_NUMBER = re.compile(r"[0-9]+")
# Everything up to the next separator, operator, paren or whitespace.
DEVICE_NAME = re.compile(r"[^\s:()+\-*/]+")
_AXIS_NAME = re.compile(r"[A-Za-z_]\w*")
_COLON = re.compile(r"\s*:\s*")

_SINGLE_CHAR = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "+": TokenType.OPERATOR,
    "-": TokenType.OPERATOR,
    "*": TokenType.OPERATOR,
    "/": TokenType.OPERATOR,
}


def tokenize(text: str) -> List[Token]:
    """Split ``text`` into tokens, always terminated by an EOF token."""
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        match = _WHITESPACE.match(text, pos)
        if match:
            pos = match.end()
            continue

        char = text[pos]
        if char in _SINGLE_CHAR:
            token_type = _SINGLE_CHAR[char]
            value = Operator(char) if token_type is TokenType.OPERATOR else None
            tokens.append(Token(token_type, char, pos, value))
            pos += 1
            continue

        name = DEVICE_NAME.match(text, pos)
        if name is None:
            raise ParseError(f"Unexpected character {char!r}", text, pos, char)

        # A word followed by ':' is a device name, even when it starts with digits.
        colon = _COLON.match(text, name.end())
        if colon:
            tokens.append(_axis_reference(text, name, colon))
            pos = tokens[-1].position + len(tokens[-1].text)
            continue

        if _NUMBER.fullmatch(name.group()):
            tokens.append(Token(TokenType.NUMBER, name.group(), pos, int(name.group())))
            pos = name.end()
            continue

        raise ParseError(
            f"Expected ':' after device name '{name.group()}'",
            text,
            pos,
            name.group(),
        )

    tokens.append(Token(TokenType.EOF, "", len(text)))
    return tokens


def _axis_reference(text: str, name: re.Match, colon: re.Match) -> Token:
    device = name.group()
    axis_match = _AXIS_NAME.match(text, colon.end())
    if not axis_match:
        fragment = text[name.start() : colon.end() + 1]
        raise ParseError(
            f"Expected an axis name after '{device}:'",
            text,
            colon.end(),
            fragment,
        )
    axis_name = axis_match.group()
    axis = Axis.from_name(axis_name)
    if axis is None:
        known = ", ".join(a.value for a in Axis)
        raise UnknownAxisName(
            f"Unknown axis name '{axis_name}' (expected one of {known})",
            text,
            axis_match.start(),
            axis_name,
        )
    return Token(
        TokenType.AXIS_REF,
        text[name.start() : axis_match.end()],
        name.start(),
        AxisReference(device, axis),
    )


class Parser:
    """Precedence-climbing parser over the token list of one expression."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.current
        if token.type is not TokenType.EOF:
            self.index += 1
        return token

    def error(self, message: str, token: Token = None) -> ParseError:
        token = token or self.current
        fragment = token.text or self.text[max(0, token.position - 10) :]
        return ParseError(message, self.text, token.position, fragment)

    def parse(self) -> Expression:
        expr = self.expression()
        if self.current.type is not TokenType.EOF:
            raise self.error(f"Unexpected {self._describe(self.current)}")
        return expr

    def expression(self, min_precedence: int = 1) -> Expression:
        left = self.factor()
        while (
            self.current.type is TokenType.OPERATOR
            and self.current.value.precedence >= min_precedence
        ):
            op = self.advance().value
            # Left associativity: the right operand only absorbs tighter operators.
            right = self.expression(op.precedence + 1)
            left = BinaryOp(op, left, right)
        return left

    def factor(self) -> Expression:
        token = self.current

        if token.type is TokenType.NUMBER:
            self.advance()
            return self._literal(token.value, token)

        if token.type is TokenType.OPERATOR and token.value in (
            Operator.ADD,
            Operator.SUB,
        ):
            self.advance()
            if self.current.type is not TokenType.NUMBER:
                raise self.error(
                    f"Expected a number after sign '{token.text}', "
                    f"found {self._describe(self.current)}"
                )
            magnitude = self.advance().value
            value = -magnitude if token.value is Operator.SUB else magnitude
            return self._literal(value, token)

        if token.type is TokenType.AXIS_REF:
            self.advance()
            return token.value

        if token.type is TokenType.LPAREN:
            self.advance()
            expr = self.expression()
            if self.current.type is not TokenType.RPAREN:
                raise self.error(
                    f"Expected ')' to close '(' at offset {token.position}, "
                    f"found {self._describe(self.current)}"
                )
            self.advance()
            return expr

        raise self.error(f"Unexpected {self._describe(token)}")

    def _literal(self, value: int, token: Token) -> Literal:
        if not INT32_MIN <= value <= INT32_MAX:
            raise self.error(f"Integer literal {value} is out of range", token)
        return Literal(value)

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type is TokenType.EOF:
            return TokenType.EOF.value
        return f"'{token.text}'"


def parse_expression(text: str) -> Expression:
    """Parse ``text`` into an expression tree.

    Raises:
        ParseError: the text is not a well-formed expression
        UnknownAxisName: an axis reference names an unknown axis
    """
    return Parser(text).parse()
