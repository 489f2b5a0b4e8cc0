from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Iterable, Sequence

from db.repositories import TransactionRepository
from domain.ledger import AccountName, LedgerEntry, Transaction, validate_transaction
from domain.literals import parse_entry_arg

logger = logging.getLogger(__name__)


class EntryArgumentError(ValueError):
    def __init__(self, arg: str) -> None:
        self.arg = arg
        super().__init__(
            f"Failed to parse argument '{arg}'. Should be account +/- amount, e.g. JH+5/2 or MHO-2"
        )


def parse_entries(args: Iterable[str]) -> list[LedgerEntry]:
    entries: list[LedgerEntry] = []
    for arg in args:
        parsed = parse_entry_arg(arg)
        if parsed is None:
            raise EntryArgumentError(arg)
        entry_type, account, amount = parsed
        entries.append(LedgerEntry(entry_type=entry_type, account=AccountName(account), amount=amount))
    return entries


def add_transaction(
    repository: TransactionRepository,
    description: str,
    args: Sequence[str],
    *,
    now: datetime | None = None,
) -> Transaction | None:
    """Store a transaction given as ``account<+|->amount`` arguments.

    Returns ``None`` when there are no entries. Raises
    :class:`EntryArgumentError` or ``TransactionValidationError`` without
    storing anything.
    """
    entries = parse_entries(args)
    if not entries:
        return None

    when = now or datetime.now(timezone.utc)
    transaction = Transaction.from_entries(description, entries, when)
    validate_transaction(transaction)

    stored = repository.create(transaction)
    logger.info("Stored transaction %d: %s", stored.id, stored.description)
    return stored


def import_transactions(repository: TransactionRepository, transactions: Iterable[Transaction]) -> int:
    count = 0
    for transaction in transactions:
        repository.create(transaction)
        count += 1
    logger.info("Imported %d transactions", count)
    return count


def scramble_ids(
    source: TransactionRepository,
    target: TransactionRepository,
    *,
    rng: random.Random | None = None,
    max_attempts: int = 16,
) -> int:
    """Copy every transaction from ``source`` to ``target`` under fresh random ids."""
    rng = rng or random.Random()
    count = 0
    for transaction in source.list():
        new_id = target.new_random_id(rng=rng, max_attempts=max_attempts)
        target.create(transaction.model_copy(update={"id": new_id}))
        logger.debug("Transaction %s copied as %d", transaction.id, new_id)
        count += 1
    logger.info("Copied %d transactions with scrambled ids", count)
    return count
