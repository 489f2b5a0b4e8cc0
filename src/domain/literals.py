from __future__ import annotations

import re
from enum import StrEnum

from .rational import NegativeUnsupportedError, Rational, RationalError, digits_to_int

# <sign>?<int>[ <num>/<den>]  |  <sign>?<num>/<den>
_MIXED_NUMBER = re.compile(
    r"(?P<sign>-)?(?:(?P<whole>\d+)(?: (?P<num>\d+)/(?P<den>\d+))?|(?P<fnum>\d+)/(?P<fden>\d+))",
    re.ASCII,
)
_PLAIN_AMOUNT = re.compile(r"(?P<num>\d+)(?:/(?P<den>\d+))?", re.ASCII)


class MalformedLiteralError(RationalError):
    def __init__(self, text: str, expected: str) -> None:
        self.text = text
        super().__init__(f"not a valid {expected}: {text!r}")


class EntryType(StrEnum):
    CREDIT = "credit"
    DEBIT = "debit"


def parse_mixed_number(text: str) -> Rational:
    """Parse ``"2"``, ``"5/3"`` or ``"2 1/3"`` into a :class:`Rational`.

    A leading minus is recognised only to be rejected; the value type has no
    sign.
    """
    match = _MIXED_NUMBER.fullmatch(text)
    if match is None:
        raise MalformedLiteralError(text, "mixed number")
    if match["sign"] is not None:
        raise NegativeUnsupportedError(text)

    result = Rational.zero()
    if match["whole"] is not None:
        result += Rational(digits_to_int(match["whole"]))
    if match["num"] is not None:
        result += Rational(digits_to_int(match["num"]), digits_to_int(match["den"]))
    if match["fnum"] is not None:
        result += Rational(digits_to_int(match["fnum"]), digits_to_int(match["fden"]))
    return result


def parse_amount(text: str) -> Rational:
    """Parse the plain ``<digits>`` or ``<digits>/<digits>`` form."""
    match = _PLAIN_AMOUNT.fullmatch(text)
    if match is None:
        raise MalformedLiteralError(text, "amount")
    denominator = match["den"]
    return Rational(digits_to_int(match["num"]), digits_to_int(denominator) if denominator is not None else 1)


def parse_entry_arg(arg: str) -> tuple[EntryType, str, Rational] | None:
    """Split ``account<+|->amount`` into polarity, account and amount.

    >>> parse_entry_arg("jh+2")
    (<EntryType.CREDIT: 'credit'>, 'jh', Rational(numerator=2, denominator=1))
    >>> parse_entry_arg("xyz--5/3") is None
    True
    """
    plus = arg.find("+")
    minus = arg.find("-")
    if plus >= 0 and minus < 0:
        entry_type, index = EntryType.CREDIT, plus
    elif minus >= 0 and plus < 0:
        entry_type, index = EntryType.DEBIT, minus
    else:
        return None

    account, sign, amount = arg[:index], arg[index], arg[index + 1 :]
    if sign in amount:
        # multiple signs
        return None

    try:
        value = parse_amount(amount)
    except RationalError:
        return None
    return entry_type, account, value


__all__ = ["EntryType", "MalformedLiteralError", "parse_amount", "parse_entry_arg", "parse_mixed_number"]
