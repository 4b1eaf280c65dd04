"""Shared type aliases for the core and domain layers."""
from typing import Literal

ValueKind = Literal["integer", "boolean", "text"]
Comparator = Literal["eq", "ne", "lt", "le", "gt", "ge"]
Operator = Literal["add", "sub", "mul", "div"]
Severity = Literal["ERROR", "WARN", "INFO"]

COMPARATOR_ALIASES: dict[str, Comparator] = {
    "eq": "eq",
    "==": "eq",
    "ne": "ne",
    "!=": "ne",
    "lt": "lt",
    "<": "lt",
    "le": "le",
    "<=": "le",
    "gt": "gt",
    ">": "gt",
    "ge": "ge",
    ">=": "ge",
}

OPERATOR_ALIASES: dict[str, Operator] = {
    "add": "add",
    "+": "add",
    "sub": "sub",
    "-": "sub",
    "mul": "mul",
    "*": "mul",
    "div": "div",
    "/": "div",
}

__all__ = [
    "COMPARATOR_ALIASES",
    "Comparator",
    "OPERATOR_ALIASES",
    "Operator",
    "Severity",
    "ValueKind",
]
