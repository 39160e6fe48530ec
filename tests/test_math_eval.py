"""
Tests for the restricted arithmetic evaluator.
"""

import pytest

from taskpilot.core.errors import MathEvaluationError
from taskpilot.services.slots.math_eval import (
    evaluate,
    extract_math_expression,
    parentheses_balanced,
    resolve_precision,
    sanitize_expression,
)


class TestEvaluate:

    @pytest.mark.parametrize("expression,formatted", [
        ("2+2", "4"),
        ("12 * (3 + 4)", "84"),
        ("2^3", "8"),
        ("1/3", "0.33"),
        ("2,5 * 2", "5"),
        ("-4 + 1", "-3"),
    ])
    def test_formatting(self, expression, formatted):
        assert evaluate(expression).formatted == formatted

    def test_percent(self):
        evaluation = evaluate("10%")

        assert evaluation.formatted == "0.10"
        assert evaluation.result == 0.1
        assert evaluation.sanitized_expression == "(10/100)"

    def test_explicit_precision(self):
        assert evaluate("1/3", precision=4).formatted == "0.3333"
        assert evaluate("1/3", precision=25).precision == 10

    def test_unbalanced_parentheses(self):
        with pytest.raises(MathEvaluationError, match="parentheses do not match"):
            evaluate("(1+2")

    def test_division_by_zero(self):
        with pytest.raises(MathEvaluationError, match="Division by zero"):
            evaluate("1/0")

    def test_letters_are_rejected(self):
        with pytest.raises(MathEvaluationError, match="not allowed"):
            evaluate("2 + a")

    def test_huge_exponent_is_refused(self):
        with pytest.raises(MathEvaluationError):
            evaluate("2 ** 1000")

    def test_nested_powers_are_refused(self):
        with pytest.raises(MathEvaluationError, match="not a valid number"):
            evaluate("(((10^100)^100)^100)^50")

    @pytest.mark.parametrize("expression,precision,formatted", [
        ("5/2", 0, "3"),
        ("0.125", 2, "0.13"),
        ("-2.5", 0, "-3"),
        ("-0.001", 2, "0.00"),
        ("-0.4", 0, "0"),
    ])
    def test_ties_round_away_from_zero(self, expression, precision, formatted):
        assert evaluate(expression, precision=precision).formatted == formatted

    def test_empty(self):
        with pytest.raises(MathEvaluationError, match="empty"):
            evaluate("   ")

    def test_to_wire_keeps_original(self):
        wire = evaluate(" 10% ").to_wire()

        assert wire["originalExpression"] == "10%"
        assert wire["sanitizedExpression"] == "(10/100)"


class TestHelpers:

    def test_parentheses(self):
        assert parentheses_balanced("(1+(2*3))")
        assert not parentheses_balanced(")(")
        assert not parentheses_balanced("((1)")

    def test_sanitize(self):
        assert sanitize_expression("3 ^ 2").sanitized == "3 ** 2"

    @pytest.mark.parametrize("value,result,expected", [
        (None, 4.0, 0),
        (None, 4.5, 2),
        (-1, 4.5, 2),
        ("3", 4.5, 3),
    ])
    def test_precision(self, value, result, expected):
        assert resolve_precision(value, result) == expected

    def test_extract_from_sentence(self):
        assert extract_math_expression("what is 12 * 7?") == "12 * 7"
        assert extract_math_expression("hello there") is None
