from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from fractions import Fraction

from domain.rational import Rational, int_to_digits


def round_to_unit(value: Fraction) -> int:
    # half away from zero
    magnitude = abs(value)
    rounded = (magnitude.numerator * 2 + magnitude.denominator) // (magnitude.denominator * 2)
    return -rounded if value < 0 else rounded


def format_exact(value: Fraction | Rational) -> str:
    if value.denominator == 1:
        return int_to_digits(value.numerator)
    return f"{int_to_digits(value.numerator)}/{int_to_digits(value.denominator)}"


def format_two_decimals(value: Fraction | Rational) -> str:
    # Decimal division at a precision wide enough for the integer part
    digits = abs(value.numerator).bit_length() // 3 + 5
    with localcontext() as ctx:
        ctx.prec = max(28, digits)
        quotient = Decimal(value.numerator) / Decimal(value.denominator)
        cents = quotient.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{cents:.2f}"
