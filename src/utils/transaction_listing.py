from __future__ import annotations

from typing import Mapping, Sequence

from domain.ledger import Transaction
from domain.rational import Rational

from .formatting import format_exact


def render_transactions(transactions: Sequence[Transaction]) -> None:
    print(f"Displaying {len(transactions)} transactions")
    for transaction in transactions:
        print(f"{transaction.tx_time.isoformat()} : {transaction.description}")
        _render_items("Credits", transaction.credits)
        _render_items("Debits", transaction.debits)


def _render_items(label: str, items: Mapping[str, Rational]) -> None:
    print(f"  {label}:")
    for account, value in items.items():
        print(f"    {account} {format_exact(value)}")
