"""
Tests for constant expressions and the symbol tables.

These tests verify:
    - Expression parsing and precedence
    - Number, color and string arithmetic
    - Constant lookup
    - Error reporting with line numbers
    - ConstantTable / MixinTable semantics
"""

import pytest

from sassy.constant import evaluate, parse_expression, value_from_string, Color, Number, String
from sassy.engine import Engine
from sassy.errors import SassSyntaxError
from sassy.expressions import (
    BinaryExpression,
    BinaryOperator,
    ConstantReference,
    NumberLiteral,
    StringLiteral,
)
from sassy.model import Line
from sassy.symbols import ConstantTable, MixinTable


def ev(expr, **constants):
    table = ConstantTable()
    for name, value in constants.items():
        table.set(name, value)
    return evaluate(expr, table, 1)


class TestParsing:
    def test_precedence(self):
        assert parse_expression("1 + 2 * 3") == BinaryExpression(
            BinaryOperator.PLUS,
            NumberLiteral(1.0),
            BinaryExpression(BinaryOperator.TIMES, NumberLiteral(2.0), NumberLiteral(3.0)),
        )

    def test_units_and_references(self):
        assert parse_expression("!w - 1px") == BinaryExpression(
            BinaryOperator.MINUS, ConstantReference("w"), NumberLiteral(1.0, "px")
        )

    def test_concatenation(self):
        assert parse_expression("1px solid") == BinaryExpression(
            BinaryOperator.CONCAT, NumberLiteral(1.0, "px"), StringLiteral("solid")
        )

    def test_missing_parenthesis(self):
        with pytest.raises(SassSyntaxError, match="Missing closing parenthesis"):
            parse_expression("(1 + 2")

    def test_stray_parenthesis(self):
        with pytest.raises(SassSyntaxError, match="Unexpected token"):
            parse_expression("1 + 2)")

    def test_empty(self):
        with pytest.raises(SassSyntaxError, match="empty"):
            parse_expression("   ")

    def test_unknown_character(self):
        with pytest.raises(SassSyntaxError, match="Unexpected character"):
            parse_expression("1 ^ 2")


class TestNumbers:
    def test_arithmetic(self):
        assert ev("1 + 2") == "3"
        assert ev("(1 + 2) * 3") == "9"
        assert ev("7 % 3") == "1"

    def test_units(self):
        assert ev("10px + 5px") == "15px"
        assert ev("10px * 2") == "20px"
        assert ev("10px / 4") == "2.5px"
        assert ev("1.5em * 2") == "3em"

    def test_same_units_divide_to_plain_number(self):
        assert ev("10px / 2px") == "5"

    def test_fractions_are_rounded(self):
        assert ev("10 / 3") == "3.33333"

    def test_negation(self):
        assert ev("-!w", w="10px") == "-10px"

    def test_incompatible_units(self):
        with pytest.raises(SassSyntaxError, match="Incompatible units: px and em"):
            ev("1px + 1em")

    def test_division_by_zero(self):
        with pytest.raises(SassSyntaxError, match="Division by zero"):
            ev("1 / 0")

    def test_literal_too_large(self):
        with pytest.raises(SassSyntaxError, match="Number out of range") as info:
            evaluate("9" * 400, ConstantTable(), 3)
        assert info.value.line == 3

    def test_overflowing_result(self):
        big = "9" * 300
        with pytest.raises(SassSyntaxError, match="Number out of range"):
            ev(f"{big} * {big}")

    def test_overflowing_attribute_value(self):
        with pytest.raises(SassSyntaxError, match="Number out of range") as info:
            Engine("a\n  :x= " + "9" * 400).to_tree()
        assert info.value.line == 2


class TestColors:
    def test_color_minus_color(self):
        assert ev("#fff - #111") == "#eeeeee"

    def test_color_plus_color_clamps(self):
        assert ev("#f00 + #0f0") == "#ffff00"
        assert ev("#fff + #fff") == "#ffffff"

    def test_color_times_number(self):
        assert ev("#010203 * 2") == "#020406"
        assert ev("2 * #010203") == "#020406"

    def test_huge_factor_clamps(self):
        assert ev("#010203 * " + "9" * 300) == "#ffffff"

    def test_number_minus_color_is_undefined(self):
        with pytest.raises(SassSyntaxError, match="Undefined operation"):
            ev("2 - #010203")


class TestStrings:
    def test_concat_with_color(self):
        assert ev("1px solid #ccc") == "1px solid #cccccc"

    def test_quoted_strings_and_lists(self):
        assert ev('"Helvetica Neue", sans-serif') == "Helvetica Neue, sans-serif"

    def test_plus_joins(self):
        assert ev('"foo" + bar') == "foobar"

    def test_function_text(self):
        assert ev("url(images/bg.png) no-repeat") == "url(images/bg.png) no-repeat"

    def test_times_is_undefined(self):
        with pytest.raises(SassSyntaxError, match='Undefined operation: "solid \\* 2"'):
            ev("solid * 2")


class TestConstants:
    def test_reference(self):
        assert ev("!w * 2", w="10px") == "20px"

    def test_stored_color_is_reread(self):
        assert ev("!c + #111", c="#eeeeee") == "#ffffff"

    def test_important_is_predefined(self):
        assert ev("!important") == "!important"

    def test_undefined_constant_cites_line(self):
        with pytest.raises(SassSyntaxError, match='Undefined constant: "!nope"') as info:
            evaluate("!nope + 1", ConstantTable(), 7)
        assert info.value.line == 7

    def test_value_from_string(self):
        assert value_from_string("-2.5em") == Number(-2.5, "em")
        assert value_from_string("#abc") == Color((0xAA, 0xBB, 0xCC))
        assert value_from_string("1px solid") == String("1px solid")


class TestConstantTable:
    def test_unconditional_assignment_overwrites(self):
        table = ConstantTable()
        table.set("a", "1")
        table.set("a", "2")
        assert table.get("a") == "2"

    def test_conditional_assignment_keeps_first(self):
        table = ConstantTable()
        table.set_if_absent("a", "1")
        table.set_if_absent("a", "2")
        assert table.get("a") == "1"

    def test_copy_is_independent(self):
        table = ConstantTable({"a": "1"})
        copy = table.copy()
        copy.set("a", "2")
        copy.set("b", "3")
        assert table.get("a") == "1"
        assert "b" not in table

    def test_defaults(self):
        assert ConstantTable().as_dict() == {"important": "!important"}


class TestMixinTable:
    def test_define_and_include(self):
        body = [Line(":color red", 1, 2)]
        mixins = MixinTable()
        mixins.define("m", body)
        assert mixins.include("m") is body

    def test_undefined(self):
        with pytest.raises(SassSyntaxError, match="Undefined mixin 'nope'.") as info:
            MixinTable().include("nope", 4)
        assert info.value.line == 4

    def test_copy_is_independent(self):
        mixins = MixinTable()
        copy = mixins.copy()
        copy.define("m", [])
        assert "m" not in mixins
