"""
Constant evaluator (Constant Expression → CSS value string).

Parses the text after `=` into an Expression AST (sassy.expressions) and
evaluates it against a ConstantTable.

Syntax Notes:
    - Numbers may carry a unit: 10px, 1.5em, 50%
    - Colors: #rgb or #rrggbb
    - Strings: "quoted", 'quoted', bare identifiers, ident(...) text
    - Constants: !name
    - Operators, lowest precedence first:
        ,           list        (1px, 2px)
        whitespace  concat      (1px solid)
        + -         additive
        * / %       multiplicative
        -           unary negation
    - Parentheses group

Values are Numbers, Colors or Strings. Stored constants are strings and
are read back as literals when referenced.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from sassy.errors import SassSyntaxError
from sassy.expressions import (
    BinaryExpression,
    BinaryOperator,
    ColorLiteral,
    ConstantReference,
    Expression,
    NumberLiteral,
    StringLiteral,
    UnaryExpression,
    UnaryOperator,
)
from sassy.symbols import ConstantTable

CONSTANT_CHAR = "!"

# !name = value  /  !name ||= value
MATCH = re.compile(r"^!(\w+)\s*((?:\|\|)?=)\s*(.+)")

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<string>"[^"]*"|'[^']*')
  | (?P<color>\#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})(?![0-9a-zA-Z]))
  | (?P<number>(?:\d+(?:\.\d*)?|\.\d+)(?:[a-zA-Z]+|%)?)
  | (?P<constant>!\w+)
  | (?P<function>-?[a-zA-Z_][\w-]*\([^)]*\))
  | (?P<ident>-?[a-zA-Z_][\w-]*)
  | (?P<op>[-+*/%(),])
    """,
    re.VERBOSE,
)

_NUMBER_RE = re.compile(r"^(-?(?:\d+(?:\.\d*)?|\.\d+))([a-zA-Z]+|%)?$")
_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")

_VALUE_KINDS = {"string", "color", "number", "constant", "function", "ident"}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str


# =========================================================================
# Values
# =========================================================================

def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:.5f}".rstrip("0").rstrip(".")


@dataclass(frozen=True)
class Number:
    value: float
    unit: Optional[str] = None

    def to_css(self) -> str:
        return f"{_format_number(self.value)}{self.unit or ''}"


@dataclass(frozen=True)
class Color:
    rgb: Tuple[int, int, int]

    def to_css(self) -> str:
        return "#" + "".join(f"{channel:02x}" for channel in self.rgb)


@dataclass(frozen=True)
class String:
    value: str

    def to_css(self) -> str:
        return self.value


Value = Union[Number, Color, String]


def _parse_color(text: str) -> Tuple[int, int, int]:
    digits = text[1:]
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def _clamp(value: float) -> int:
    return int(round(max(0.0, min(255.0, value))))


def value_from_string(text: str) -> Value:
    """Read a stored constant back as a literal value."""
    text = text.strip()
    m = _NUMBER_RE.match(text)
    if m:
        return Number(float(m.group(1)), m.group(2))
    if _COLOR_RE.match(text):
        return Color(_parse_color(text))
    return String(text)


# =========================================================================
# Parsing
# =========================================================================

def _tokenize(expr_str: str, line: Optional[int]) -> List[Token]:
    """Tokenize expression string, dropping whitespace."""
    tokens = []
    pos = 0
    while pos < len(expr_str):
        m = _TOKEN_RE.match(expr_str, pos)
        if m is None:
            raise SassSyntaxError(f"Unexpected character '{expr_str[pos]}' in \"{expr_str}\".", line)
        if m.lastgroup != "ws":
            tokens.append(Token(m.lastgroup, m.group(0)))
        pos = m.end()
    return tokens


def parse_expression(expr_str: str, line: Optional[int] = None) -> Expression:
    """
    Parse a constant expression into an AST.

    Raises:
        SassSyntaxError: On empty input, unbalanced parentheses or
            unexpected tokens
    """
    tokens = _tokenize(expr_str, line)
    if not tokens:
        raise SassSyntaxError("Invalid constant expression: value is empty.", line)

    ast, pos = _parse_comma_expression(tokens, 0, line)
    if pos < len(tokens):
        raise SassSyntaxError(f"Unexpected token '{tokens[pos].text}' in \"{expr_str}\".", line)
    return ast


def _parse_comma_expression(tokens: List[Token], pos: int, line: Optional[int]) -> tuple:
    """Parse comma-separated list (lowest precedence)."""
    left, pos = _parse_concat_expression(tokens, pos, line)

    while pos < len(tokens) and tokens[pos].text == ",":
        pos += 1
        right, pos = _parse_concat_expression(tokens, pos, line)
        left = BinaryExpression(BinaryOperator.COMMA, left, right)

    return left, pos


def _starts_operand(token: Token) -> bool:
    return token.kind in _VALUE_KINDS or token.text == "("


def _parse_concat_expression(tokens: List[Token], pos: int, line: Optional[int]) -> tuple:
    """Parse whitespace-separated values."""
    left, pos = _parse_additive_expression(tokens, pos, line)

    while pos < len(tokens) and _starts_operand(tokens[pos]):
        right, pos = _parse_additive_expression(tokens, pos, line)
        left = BinaryExpression(BinaryOperator.CONCAT, left, right)

    return left, pos


def _parse_additive_expression(tokens: List[Token], pos: int, line: Optional[int]) -> tuple:
    left, pos = _parse_multiplicative_expression(tokens, pos, line)

    while pos < len(tokens) and tokens[pos].text in ("+", "-"):
        operator = BinaryOperator(tokens[pos].text)
        pos += 1
        right, pos = _parse_multiplicative_expression(tokens, pos, line)
        left = BinaryExpression(operator, left, right)

    return left, pos


def _parse_multiplicative_expression(tokens: List[Token], pos: int, line: Optional[int]) -> tuple:
    left, pos = _parse_unary_expression(tokens, pos, line)

    while pos < len(tokens) and tokens[pos].text in ("*", "/", "%"):
        operator = BinaryOperator(tokens[pos].text)
        pos += 1
        right, pos = _parse_unary_expression(tokens, pos, line)
        left = BinaryExpression(operator, left, right)

    return left, pos


def _parse_unary_expression(tokens: List[Token], pos: int, line: Optional[int]) -> tuple:
    if pos < len(tokens) and tokens[pos].text == "-":
        operand, pos = _parse_unary_expression(tokens, pos + 1, line)
        return UnaryExpression(UnaryOperator.NEGATE, operand), pos

    return _parse_primary_expression(tokens, pos, line)


def _parse_primary_expression(tokens: List[Token], pos: int, line: Optional[int]) -> tuple:
    """Parse literal, constant reference, or parenthesized group."""
    if pos >= len(tokens):
        raise SassSyntaxError("Unexpected end of constant expression.", line)

    token = tokens[pos]

    if token.text == "(":
        expr, pos = _parse_comma_expression(tokens, pos + 1, line)
        if pos >= len(tokens) or tokens[pos].text != ")":
            raise SassSyntaxError("Missing closing parenthesis in constant expression.", line)
        return expr, pos + 1

    if token.kind == "number":
        m = _NUMBER_RE.match(token.text)
        return NumberLiteral(float(m.group(1)), m.group(2)), pos + 1

    if token.kind == "color":
        return ColorLiteral(_parse_color(token.text)), pos + 1

    if token.kind == "string":
        return StringLiteral(token.text[1:-1]), pos + 1

    if token.kind == "constant":
        return ConstantReference(token.text[1:]), pos + 1

    if token.kind in ("function", "ident"):
        return StringLiteral(token.text), pos + 1

    raise SassSyntaxError(f"Unexpected token '{token.text}' in constant expression.", line)


# =========================================================================
# Evaluation
# =========================================================================

def _undefined(operator: BinaryOperator, left: Value, right: Value, line: Optional[int]) -> SassSyntaxError:
    return SassSyntaxError(
        f"Undefined operation: \"{left.to_css()} {operator.value} {right.to_css()}\".", line
    )


def _number_operation(operator: BinaryOperator, left: Number, right: Number, line: Optional[int]) -> Number:
    if left.unit and right.unit and left.unit != right.unit:
        raise SassSyntaxError(f"Incompatible units: {left.unit} and {right.unit}.", line)
    unit = left.unit or right.unit

    if operator == BinaryOperator.PLUS:
        return Number(left.value + right.value, unit)
    if operator == BinaryOperator.MINUS:
        return Number(left.value - right.value, unit)
    if operator == BinaryOperator.TIMES:
        return Number(left.value * right.value, unit)

    if right.value == 0:
        raise SassSyntaxError("Division by zero.", line)
    if operator == BinaryOperator.DIV:
        if left.unit and right.unit:
            unit = None
        return Number(left.value / right.value, unit)
    return Number(left.value % right.value, unit)


def _channel_operation(operator: BinaryOperator, a: float, b: float, line: Optional[int]) -> float:
    if operator == BinaryOperator.PLUS:
        return a + b
    if operator == BinaryOperator.MINUS:
        return a - b
    if operator == BinaryOperator.TIMES:
        return a * b
    if b == 0:
        raise SassSyntaxError("Division by zero.", line)
    if operator == BinaryOperator.DIV:
        return a / b
    return a % b


def _color_operation(operator: BinaryOperator, left: Value, right: Value, line: Optional[int]) -> Color:
    if isinstance(left, Number):
        # number + color and number * color commute; the rest is undefined
        if operator not in (BinaryOperator.PLUS, BinaryOperator.TIMES):
            raise _undefined(operator, left, right, line)
        left, right = right, left

    if isinstance(right, Color):
        other = right.rgb
    else:
        other = (right.value,) * 3
    return Color(tuple(_clamp(_channel_operation(operator, a, b, line)) for a, b in zip(left.rgb, other)))


def _string_operation(operator: BinaryOperator, left: Value, right: Value, line: Optional[int]) -> String:
    if operator == BinaryOperator.PLUS:
        return String(left.to_css() + right.to_css())
    if operator == BinaryOperator.MINUS:
        return String(f"{left.to_css()}-{right.to_css()}")
    if operator == BinaryOperator.DIV:
        return String(f"{left.to_css()}/{right.to_css()}")
    raise _undefined(operator, left, right, line)


def _apply(operator: BinaryOperator, left: Value, right: Value, line: Optional[int]) -> Value:
    if operator == BinaryOperator.COMMA:
        return String(f"{left.to_css()}, {right.to_css()}")
    if operator == BinaryOperator.CONCAT:
        return String(f"{left.to_css()} {right.to_css()}")

    if isinstance(left, String) or isinstance(right, String):
        return _string_operation(operator, left, right, line)
    if isinstance(left, Color) or isinstance(right, Color):
        return _color_operation(operator, left, right, line)
    return _number_operation(operator, left, right, line)


def _finite(value: Value, line: Optional[int]) -> Value:
    if isinstance(value, Number) and not math.isfinite(value.value):
        raise SassSyntaxError("Number out of range.", line)
    return value


def evaluate_expression(expr: Expression, constants: ConstantTable, line: Optional[int] = None) -> Value:
    """
    Recursively evaluate an expression tree.

    Every Number produced along the way must be finite.
    """
    if isinstance(expr, NumberLiteral):
        return _finite(Number(expr.value, expr.unit), line)

    if isinstance(expr, ColorLiteral):
        return Color(expr.rgb)

    if isinstance(expr, StringLiteral):
        return String(expr.value)

    if isinstance(expr, ConstantReference):
        value = constants.get(expr.name)
        if value is None:
            raise SassSyntaxError(f"Undefined constant: \"!{expr.name}\".", line)
        return value_from_string(value)

    if isinstance(expr, UnaryExpression):
        operand = evaluate_expression(expr.operand, constants, line)
        if isinstance(operand, Number):
            return Number(-operand.value, operand.unit)
        return String(f"-{operand.to_css()}")

    if isinstance(expr, BinaryExpression):
        left = evaluate_expression(expr.left, constants, line)
        right = evaluate_expression(expr.right, constants, line)
        return _finite(_apply(expr.operator, left, right, line), line)

    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def evaluate(expr_str: str, constants: ConstantTable, line: Optional[int] = None) -> str:
    """
    Evaluate a constant expression to its CSS string.

    Args:
        expr_str: Expression text, e.g. "!width * 2"
        constants: Constants visible at this point of the template
        line: Source line, for error reporting

    Returns:
        The value as CSS text, e.g. "20px"

    Raises:
        SassSyntaxError: On parse errors, undefined constants and
            undefined operations
    """
    return evaluate_expression(parse_expression(expr_str, line), constants, line).to_css()


__all__ = [
    "CONSTANT_CHAR",
    "MATCH",
    "Number",
    "Color",
    "String",
    "parse_expression",
    "evaluate_expression",
    "evaluate",
    "value_from_string",
]
