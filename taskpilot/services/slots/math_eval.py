"""
Arithmetic evaluation without eval().

Pipeline:
1. Sanitize: "," -> ".", "N%" -> "(N/100)", "^" -> "**"; reject any
   character outside digits, + - * / ( ) . and whitespace
2. Check parentheses with a running counter (never negative, ends at 0)
3. Parse with ast and walk a whitelist of nodes (numbers, + - * / ** and
   unary +/-); anything else is rejected
4. Round half up to the explicit precision (clamped to 0..10) or the inferred
   one (integer results 0, others 2) and format; "-0.00" prints as "0.00"

Arithmetic runs on floats, so a result too large to represent raises
OverflowError instead of growing an exact integer without bound.

Every failure raises MathEvaluationError.
"""

import ast
import math
import operator
import re
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Optional

from taskpilot.core.errors import MathEvaluationError
from taskpilot.services.slots.models import MathEvaluation, MathExpression
from taskpilot.services.slots.text import ensure_number, strip_command_phrases

MAX_PRECISION = 10
DEFAULT_DECIMAL_PRECISION = 2

# Exponents beyond this are refused to keep evaluation cheap
MAX_EXPONENT = 100

# Enough digits to quantize any finite float to MAX_PRECISION places
_DECIMAL_CONTEXT_PRECISION = 400

_ALLOWED_CHARS = re.compile(r"^[0-9+\-*/().\s]+$")

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def extract_math_expression(message: Any) -> Optional[str]:
    """Pull the arithmetic part out of a sentence ("what is 12 * 7?" -> "12 * 7")."""
    cleaned = strip_command_phrases(message)
    candidate = re.sub(r"[^0-9+\-*/().,^%\s]", " ", cleaned)
    candidate = re.sub(r"\s{2,}", " ", candidate).strip()
    if not candidate or not re.search(r"\d", candidate):
        return None
    return candidate


def sanitize_expression(expression: Any) -> MathExpression:
    """
    Rewrite an expression into the restricted grammar.

    Raises:
        MathEvaluationError: Empty input or characters outside the allowed set
    """
    if not isinstance(expression, str) or not expression.strip():
        raise MathEvaluationError("The expression is empty.")

    original = expression.strip()
    sanitized = original.replace(",", ".")
    sanitized = re.sub(r"(\d+(?:\.\d+)?)%", r"(\1/100)", sanitized)
    sanitized = sanitized.replace("^", "**")
    sanitized = re.sub(r"\s+", " ", sanitized)
    sanitized = re.sub(r"([+\-*/])\s+([+\-*/])", r"\1\2", sanitized).strip()

    if not _ALLOWED_CHARS.match(sanitized):
        raise MathEvaluationError("The expression contains characters that are not allowed.")

    return MathExpression(original=original, sanitized=sanitized)


def parentheses_balanced(expression: str) -> bool:
    balance = 0
    for char in expression:
        if char == "(":
            balance += 1
        elif char == ")":
            balance -= 1
        if balance < 0:
            return False
    return balance == 0


def _evaluate_node(node: ast.AST) -> float:
    if isinstance(node, ast.Expression):
        return _evaluate_node(node.body)

    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return float(node.value)

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate_node(node.operand))

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate_node(node.left)
        right = _evaluate_node(node.right)
        if isinstance(node.op, ast.Pow) and abs(right) > MAX_EXPONENT:
            raise MathEvaluationError("The exponent is too large.")
        return _BINARY_OPERATORS[type(node.op)](left, right)

    raise MathEvaluationError("The expression could not be evaluated.")


def resolve_precision(value: Any, result: float) -> int:
    explicit = ensure_number(value)
    if explicit is not None and explicit >= 0:
        return min(MAX_PRECISION, int(math.floor(explicit)))
    return 0 if float(result).is_integer() else DEFAULT_DECIMAL_PRECISION


def evaluate(expression: Any, precision: Any = None) -> MathEvaluation:
    """
    Evaluate an arithmetic expression.

    evaluate("2+2").formatted      -> "4"
    evaluate("10%").formatted      -> "0.10"
    evaluate("(1+2")               -> MathEvaluationError, nothing evaluated

    Raises:
        MathEvaluationError: Sanitization, parenthesis or evaluation failure
    """
    parsed = sanitize_expression(expression)

    if not parentheses_balanced(parsed.sanitized):
        raise MathEvaluationError("The parentheses do not match.")

    try:
        tree = ast.parse(parsed.sanitized, mode="eval")
    except SyntaxError:
        raise MathEvaluationError("The expression could not be evaluated.")

    try:
        raw_result = _evaluate_node(tree)
        if isinstance(raw_result, complex):
            raise TypeError("complex result")
        value = float(raw_result)
    except ZeroDivisionError:
        raise MathEvaluationError("Division by zero.")
    except (OverflowError, TypeError):
        raise MathEvaluationError("The result is not a valid number.")

    if not math.isfinite(value):
        raise MathEvaluationError("The result is not a valid number.")

    resolved_precision = resolve_precision(precision, value)
    rounded = round_half_up(value, resolved_precision)

    return MathEvaluation(
        original_expression=parsed.original,
        sanitized_expression=parsed.sanitized,
        result=float(rounded),
        formatted=format(rounded, "f"),
        precision=resolved_precision,
    )


def round_half_up(value: float, places: int) -> Decimal:
    """
    Round to a fixed number of places, ties away from zero.

    The shortest repr of the float is rounded, so 0.125 -> 0.13 and
    5/2 -> 3. A result that rounds to zero loses its sign.
    """
    with localcontext() as context:
        context.prec = _DECIMAL_CONTEXT_PRECISION
        quantized = Decimal(repr(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    if quantized.is_zero():
        quantized = abs(quantized)
    return quantized
