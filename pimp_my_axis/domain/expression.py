"""Syntax tree and evaluation of axis expressions.

An expression is an immutable tree of three node kinds:

- ``AxisReference``: the current value of one axis of one physical device
- ``Literal``: a signed integer constant
- ``BinaryOp``: one of ``+ - * /`` applied to two sub-expressions

Trees are built once by the parser while the configuration is loaded and are
compared structurally, so two separately parsed copies of the same text are
equal and hash the same.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Union

from .axis import Axis, AxisKey
from ..errors import DivisionByZero, MissingBinding

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class Operator(Enum):
    """Binary operators, all left-associative."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def precedence(self) -> int:
        return 2 if self in (Operator.MUL, Operator.DIV) else 1

    def apply(self, left: int, right: int) -> int:
        if self is Operator.ADD:
            return left + right
        if self is Operator.SUB:
            return left - right
        if self is Operator.MUL:
            return left * right
        # Integer division truncating toward zero; the caller guards zero.
        quotient = abs(left) // abs(right)
        return quotient if (left < 0) == (right < 0) else -quotient


@dataclass(frozen=True)
class AxisReference:
    device: str
    axis: Axis

    @property
    def key(self) -> AxisKey:
        return AxisKey(self.device, self.axis)

    def __str__(self) -> str:
        return f"{self.device}:{self.axis}"


@dataclass(frozen=True)
class Literal:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BinaryOp:
    op: Operator
    left: "Expression"
    right: "Expression"

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


Expression = Union[AxisReference, Literal, BinaryOp]


def evaluate(expr: Expression, bindings: Mapping[AxisKey, int]) -> int:
    """Compute the value of ``expr`` given the current axis values.

    Intermediate results use unbounded integers; the final result saturates
    to the signed 32-bit range of an input event value.

    Args:
        expr: Expression tree to evaluate
        bindings: Values for every axis the expression references

    Returns:
        The result as an int in ``[INT32_MIN, INT32_MAX]``

    Raises:
        MissingBinding: an ``AxisReference`` has no entry in ``bindings``
        DivisionByZero: the right operand of a ``/`` evaluated to zero
    """
    value = _evaluate(expr, bindings)
    return max(INT32_MIN, min(INT32_MAX, value))


def _evaluate(expr: Expression, bindings: Mapping[AxisKey, int]) -> int:
    if isinstance(expr, Literal):
        return expr.value
    if isinstance(expr, AxisReference):
        try:
            return bindings[expr.key]
        except KeyError:
            raise MissingBinding(expr.device, expr.axis) from None
    if isinstance(expr, BinaryOp):
        left = _evaluate(expr.left, bindings)
        right = _evaluate(expr.right, bindings)
        if expr.op is Operator.DIV and right == 0:
            raise DivisionByZero(expr)
        return expr.op.apply(left, right)
    raise TypeError(f"Not an expression node: {expr!r}")


def dependencies(expr: Expression) -> List[AxisKey]:
    """Distinct axes read by ``expr``, in left-to-right, depth-first order."""
    seen: Dict[AxisKey, None] = {}
    _collect(expr, seen)
    return list(seen)


def _collect(expr: Expression, seen: Dict[AxisKey, None]) -> None:
    if isinstance(expr, AxisReference):
        seen.setdefault(expr.key, None)
    elif isinstance(expr, BinaryOp):
        _collect(expr.left, seen)
        _collect(expr.right, seen)
