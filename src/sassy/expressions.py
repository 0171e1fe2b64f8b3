"""
Expression System for constant arithmetic

Values after `=` (in `!name = ...` and `:attr= ...`) are parsed into
Abstract Syntax Trees before they are evaluated.

ARCHITECTURAL RULE:
    Nodes here are structure only.
    Parsing lives in sassy.constant.parse_expression,
    evaluation in sassy.constant.evaluate.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Expression(ABC):
    """
    Base class for all AST expressions.

    Exists to give the expression hierarchy a common type.
    """
    pass


class BinaryOperator(Enum):
    """
    Binary operators, lowest precedence first.

    COMMA and CONCAT come from separators rather than operator characters:
        1px, 2px   -> COMMA
        1px solid  -> CONCAT
    """

    COMMA = ","
    CONCAT = " "
    PLUS = "+"
    MINUS = "-"
    TIMES = "*"
    DIV = "/"
    MOD = "%"


class UnaryOperator(Enum):
    NEGATE = "-"


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Represents a binary operation.

    Example:
        !width * 2 + 5px

    Becomes:
        BinaryExpression(
            operator=BinaryOperator.PLUS,
            left=BinaryExpression(
                operator=BinaryOperator.TIMES,
                left=ConstantReference("width"),
                right=NumberLiteral(2),
            ),
            right=NumberLiteral(5, "px"),
        )
    """

    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """Represents a unary operation, e.g. `-!margin`."""

    operator: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class ConstantReference(Expression):
    """
    References a constant by name, without the leading `!`.

    This does NOT check that the constant exists.
    Lookup happens at evaluation time.
    """

    name: str


@dataclass(frozen=True)
class NumberLiteral(Expression):
    """
    A number with an optional unit.

    Examples:
        10      -> NumberLiteral(10.0)
        1.5em   -> NumberLiteral(1.5, "em")
        50%     -> NumberLiteral(50.0, "%")
    """

    value: float
    unit: Optional[str] = None


@dataclass(frozen=True)
class ColorLiteral(Expression):
    """An RGB color, written `#rgb` or `#rrggbb`."""

    rgb: Tuple[int, int, int]


@dataclass(frozen=True)
class StringLiteral(Expression):
    """
    A string.

    Covers quoted strings (quotes removed), bare identifiers such as
    `solid` or `sans-serif`, and function text such as `url(a.png)`.
    """

    value: str
