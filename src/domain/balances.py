from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, Mapping

from .rational import Rational

AccountSums = Mapping[str, Rational] | Iterable[tuple[str, Rational]]


@dataclass(frozen=True)
class AccountBalance:
    account: str
    balance: Fraction


def project_balances(credit_sums: AccountSums, debit_sums: AccountSums) -> list[AccountBalance]:
    """Net ``credits - debits`` per account, sorted by account.

    Both inputs are unsigned per-account aggregates. The subtraction happens
    on signed fractions; accounts that net to exactly zero are left out.
    """
    balances: dict[str, Fraction] = {}
    for account, value in _pairs(credit_sums):
        balances[account] = balances.get(account, Fraction(0)) + value.to_fraction()
    for account, value in _pairs(debit_sums):
        balances[account] = balances.get(account, Fraction(0)) - value.to_fraction()

    return [
        AccountBalance(account=account, balance=balance)
        for account, balance in sorted(balances.items(), key=lambda item: item[0])
        if balance != 0
    ]


def _pairs(sums: AccountSums) -> Iterable[tuple[str, Rational]]:
    if isinstance(sums, Mapping):
        return sums.items()
    return sums


__all__ = ["AccountBalance", "project_balances"]
