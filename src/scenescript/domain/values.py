"""Typed scalar values and the pure operations defined between them."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar, Union

from scenescript.core.types import Comparator, Operator, ValueKind

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1
_INTEGER_MAX_DIGITS = len(str(INTEGER_MAX))


class ValueOperationError(Exception):
    """Raised when an operation cannot be applied to the given values."""


class ValueTypeMismatch(ValueOperationError):
    """Raised when an operation mixes values of different kinds."""

    def __init__(self, operation: str, left: "StoryValue", right: "StoryValue") -> None:
        super().__init__(f"Cannot {operation} {left.kind} and {right.kind} values.")
        self.operation = operation
        self.left = left
        self.right = right


class DivisionByZero(ValueOperationError):
    """Raised when a division has a zero divisor."""


class IntegerOverflow(ValueOperationError):
    """Raised when an arithmetic result leaves the 64-bit signed range."""


@dataclass(frozen=True, slots=True)
class IntegerValue:
    value: int

    kind: ClassVar[ValueKind] = "integer"

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class BooleanValue:
    value: bool

    kind: ClassVar[ValueKind] = "boolean"

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True, slots=True)
class TextValue:
    value: str

    kind: ClassVar[ValueKind] = "text"

    def __str__(self) -> str:
        return self.value


StoryValue = Union[IntegerValue, BooleanValue, TextValue]


def infer_value(raw: str) -> StoryValue:
    """Interpret a literal as integer, then boolean, falling back to text.

    Raises ValueError for integer literals outside the 64-bit signed range.
    """
    if _INTEGER_PATTERN.fullmatch(raw):
        return IntegerValue(_parse_integer(raw))
    if raw == "true":
        return BooleanValue(True)
    if raw == "false":
        return BooleanValue(False)
    return TextValue(raw)


def in_integer_range(value: int) -> bool:
    return INTEGER_MIN <= value <= INTEGER_MAX


def _parse_integer(raw: str) -> int:
    digits = raw.lstrip("+-").lstrip("0")
    if len(digits) > _INTEGER_MAX_DIGITS:
        raise ValueError(f"Integer literal out of range: {raw[:32]}...")
    value = int(raw)
    if not in_integer_range(value):
        raise ValueError(f"Integer literal out of range: {raw}")
    return value


def make_value(kind: str, raw: object) -> StoryValue:
    """Build a value from an explicit kind tag, validating the payload type."""
    if kind == "integer" and isinstance(raw, int) and not isinstance(raw, bool):
        if not in_integer_range(raw):
            raise ValueError(f"Integer payload out of range: {raw}")
        return IntegerValue(raw)
    if kind == "boolean" and isinstance(raw, bool):
        return BooleanValue(raw)
    if kind == "text" and isinstance(raw, str):
        return TextValue(raw)
    raise ValueError(f"Invalid {kind!r} value payload: {raw!r}")


def compare_values(left: StoryValue, comparator: Comparator, right: StoryValue) -> bool:
    """Compare two values of the same kind.

    Integers support every comparator. Booleans and text only support
    ``eq``/``ne``; ordering comparators evaluate to False for them.
    """
    if left.kind != right.kind:
        raise ValueTypeMismatch("compare", left, right)
    if comparator == "eq":
        return left.value == right.value
    if comparator == "ne":
        return left.value != right.value
    if not isinstance(left, IntegerValue):
        return False
    if comparator == "lt":
        return left.value < right.value
    if comparator == "le":
        return left.value <= right.value
    if comparator == "gt":
        return left.value > right.value
    if comparator == "ge":
        return left.value >= right.value
    raise ValueError(f"Unknown comparator: {comparator}")


def apply_operation(current: StoryValue, operator: Operator, operand: StoryValue) -> IntegerValue:
    """Apply an arithmetic operator to two integer values."""
    if not isinstance(current, IntegerValue) or not isinstance(operand, IntegerValue):
        raise ValueTypeMismatch(operator, current, operand)
    if operator == "add":
        result = current.value + operand.value
    elif operator == "sub":
        result = current.value - operand.value
    elif operator == "mul":
        result = current.value * operand.value
    elif operator == "div":
        if operand.value == 0:
            raise DivisionByZero("Division by zero.")
        result = _truncating_div(current.value, operand.value)
    else:
        raise ValueError(f"Unknown operator: {operator}")
    if not in_integer_range(result):
        raise IntegerOverflow(f"Result of {current} {operator} {operand} overflows a 64-bit integer.")
    return IntegerValue(result)


def _truncating_div(dividend: int, divisor: int) -> int:
    quotient = abs(dividend) // abs(divisor)
    return quotient if (dividend >= 0) == (divisor > 0) else -quotient


__all__ = [
    "BooleanValue",
    "DivisionByZero",
    "INTEGER_MAX",
    "INTEGER_MIN",
    "IntegerOverflow",
    "IntegerValue",
    "StoryValue",
    "TextValue",
    "ValueOperationError",
    "ValueTypeMismatch",
    "apply_operation",
    "compare_values",
    "in_integer_range",
    "infer_value",
    "make_value",
]
