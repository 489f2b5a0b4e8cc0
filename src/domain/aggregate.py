from __future__ import annotations

from typing import Iterable, Protocol, TypeVar

from .codec import decode, encode
from .rational import Rational

InT = TypeVar("InT", contravariant=True)
OutT = TypeVar("OutT", covariant=True)


class Aggregator(Protocol[InT, OutT]):
    """Per-group reducer: constructed with no arguments, fed rows, finalized once."""

    def step(self, value: InT) -> None: ...

    def finalize(self) -> OutT: ...


class RationalSum:
    """Exact running sum with ``0/1`` as identity.

    Addition is associative and commutative, so rows may be folded in any
    order and partial sums merged in any grouping.
    """

    def __init__(self) -> None:
        self._sum = Rational.zero()

    def step(self, value: Rational) -> None:
        self._sum = self._sum + value

    def merge(self, other: RationalSum) -> RationalSum:
        merged = RationalSum()
        merged._sum = self._sum + other._sum
        return merged

    def finalize(self) -> Rational:
        return self._sum


class SumRat:
    """``sum_rat(x)`` aggregate over binary-encoded rational columns.

    Registered on sqlite3 connections with ``create_aggregate``; SQLite
    creates a fresh instance per group.
    """

    name = "sum_rat"
    num_params = 1

    def __init__(self) -> None:
        self._sum = RationalSum()

    def step(self, value: bytes | None) -> None:
        # NULL rows do not contribute, like SQL's builtin sum()
        if value is None:
            return
        self._sum.step(decode(value))

    def finalize(self) -> bytes:
        return encode(self._sum.finalize())


def sum_rationals(values: Iterable[Rational]) -> Rational:
    accumulator = RationalSum()
    for value in values:
        accumulator.step(value)
    return accumulator.finalize()


__all__ = ["Aggregator", "RationalSum", "SumRat", "sum_rationals"]
