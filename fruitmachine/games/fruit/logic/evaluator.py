# fruitmachine/games/fruit/logic/evaluator.py
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Optional, Union

OPERATORS = ("+", "-", "*", "/")
MAX_TARGET = 999
UNKNOWN_RESULT = "??"

_PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2}
_OP_GLYPHS = {"*": "×", "/": "÷"}
_OP_ALIASES = {
    "×": "*", "x": "*", "X": "*", "∗": "*", "·": "*",
    "÷": "/", "／": "/",
    "−": "-", "–": "-", "—": "-",
}

Number = Union[int, float]


def normalize_operator(op: str) -> str:
    """
    Map display glyphs onto the four canonical operators:
      '×' -> '*', '÷' -> '/', '−' -> '-'
    """
    s = _OP_ALIASES.get(str(op).strip(), str(op).strip())
    if s not in _PRECEDENCE:
        raise ValueError(f"Unknown operator: {op!r}")
    return s


def _apply(a: Fraction, op: str, b: Fraction) -> Optional[Fraction]:
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if b == 0:
        return None
    return a / b


def _evaluate(n1, op1: str, n2, op2: str, n3) -> Optional[Fraction]:
    """Exact value of `n1 op1 n2 op2 n3` under the usual precedence, or None on x/0."""
    op1, op2 = normalize_operator(op1), normalize_operator(op2)
    a, b, c = Fraction(n1), Fraction(n2), Fraction(n3)
    if _PRECEDENCE[op1] >= _PRECEDENCE[op2]:
        left = _apply(a, op1, b)
        if left is None:
            return None
        return _apply(left, op2, c)
    right = _apply(b, op2, c)
    if right is None:
        return None
    return _apply(a, op1, right)


def evaluate_expression(n1, op1: str, n2, op2: str, n3) -> Optional[int]:
    """
    Generation/validation mode.
    Returns the result only when it is a whole number in 1..MAX_TARGET;
    intermediate values may be fractional (7 / 2 * 4 == 14 is fine).
    """
    result = _evaluate(n1, op1, n2, op2, n3)
    if result is None or result.denominator != 1:
        return None
    if result <= 0 or result > MAX_TARGET:
        return None
    return int(result)


def evaluate_for_display(n1, op1: str, n2, op2: str, n3) -> Optional[Number]:
    """Raw value for the live calculation; negative and fractional results pass through."""
    result = _evaluate(n1, op1, n2, op2, n3)
    if result is None:
        return None
    if result.denominator == 1:
        return int(result)
    return float(result)


def format_operator(op: str) -> str:
    op = normalize_operator(op)
    return _OP_GLYPHS.get(op, op)


def format_expression(n1, op1: str, n2, op2: str, n3) -> str:
    return f"{n1} {format_operator(op1)} {n2} {format_operator(op2)} {n3}"


def format_result(value: Optional[Number]) -> str:
    if value is None:
        return UNKNOWN_RESULT
    if float(value).is_integer():
        return str(int(value))
    # one decimal, halves away from zero
    return f"{Decimal(value).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}..."
