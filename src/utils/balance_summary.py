from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from db.repositories import BalanceRepository
from domain.balances import AccountBalance

from .formatting import format_exact, format_two_decimals


@dataclass
class BalanceSummary:
    as_of: datetime
    balances: list[AccountBalance] = field(default_factory=list)


def compute_balance_summary(repository: BalanceRepository, *, as_of: datetime | None = None) -> BalanceSummary:
    return BalanceSummary(
        as_of=as_of or datetime.now(timezone.utc),
        balances=repository.balances(),
    )


def render_balance_summary(summary: BalanceSummary, *, exact: bool = False) -> None:
    if not summary.balances:
        print("All accounts are settled.")
        return

    for entry in summary.balances:
        value = format_exact(entry.balance) if exact else format_two_decimals(entry.balance)
        print(f"{entry.account}: {value}")
