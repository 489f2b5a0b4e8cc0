from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from math import gcd

# stays under the interpreter's int/str conversion digit limit
_CHUNK_DIGITS = 4000
_CHUNK = 10**_CHUNK_DIGITS


class RationalError(ValueError):
    """Base class for every invalid-value condition of the rational type."""


class DenominatorZeroError(RationalError):
    def __init__(self, numerator: int | None = None) -> None:
        self.numerator = numerator
        message = "denominator must be non-zero"
        if numerator is not None:
            message = f"{message} (numerator={int_to_digits(numerator)})"
        super().__init__(message)


class NegativeUnsupportedError(RationalError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"negative values are not supported: {value}")


@dataclass(frozen=True, slots=True)
class Rational:
    """An exact, non-negative fraction kept in lowest terms.

    Sign is never stored here. Ledger entries carry their polarity by being
    either a credit or a debit, and only the balance computation promotes
    values to a signed ``Fraction``.
    """

    numerator: int = 0
    denominator: int = 1

    def __post_init__(self) -> None:
        for part in (self.numerator, self.denominator):
            if isinstance(part, bool) or not isinstance(part, int):
                raise TypeError(f"Rational parts must be integers, got {type(part).__name__}")
        if self.denominator == 0:
            raise DenominatorZeroError(self.numerator)
        if self.numerator < 0 or self.denominator < 0:
            raise NegativeUnsupportedError(_ratio_text(self.numerator, self.denominator))

        divisor = gcd(self.numerator, self.denominator)
        if divisor > 1:
            object.__setattr__(self, "numerator", self.numerator // divisor)
            object.__setattr__(self, "denominator", self.denominator // divisor)

    @classmethod
    def zero(cls) -> Rational:
        return cls(0, 1)

    @classmethod
    def from_fraction(cls, value: Fraction) -> Rational:
        if value < 0:
            raise NegativeUnsupportedError(_ratio_text(value.numerator, value.denominator))
        return cls(value.numerator, value.denominator)

    def is_zero(self) -> bool:
        return self.numerator == 0

    def to_fraction(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)

    def __add__(self, other: object) -> Rational:
        if isinstance(other, int) and not isinstance(other, bool):
            other = Rational(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return Rational(
            self.numerator * other.denominator + other.numerator * self.denominator,
            self.denominator * other.denominator,
        )

    # builtin sum() starts from int 0
    __radd__ = __add__

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __str__(self) -> str:
        return _ratio_text(self.numerator, self.denominator)


def digits_to_int(text: str) -> int:
    """Convert a run of ASCII digits of any length to an ``int``."""
    value = 0
    for start in range(0, len(text), _CHUNK_DIGITS):
        chunk = text[start : start + _CHUNK_DIGITS]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def int_to_digits(value: int) -> str:
    """Decimal text of ``value`` of any size, with a leading minus when negative."""
    magnitude = abs(value)
    chunks: list[str] = []
    while magnitude >= _CHUNK:
        magnitude, low = divmod(magnitude, _CHUNK)
        chunks.append(f"{low:0{_CHUNK_DIGITS}d}")
    chunks.append(str(magnitude))
    sign = "-" if value < 0 else ""
    return sign + "".join(reversed(chunks))


def _ratio_text(numerator: int, denominator: int) -> str:
    if denominator == 1:
        return int_to_digits(numerator)
    return f"{int_to_digits(numerator)}/{int_to_digits(denominator)}"


__all__ = [
    "DenominatorZeroError",
    "NegativeUnsupportedError",
    "Rational",
    "RationalError",
    "digits_to_int",
    "int_to_digits",
]
