from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db import models
from domain.aggregate import RationalSum
from domain.balances import AccountBalance, project_balances
from domain.ledger import AccountName, Transaction, TransactionId
from domain.literals import EntryType
from domain.rational import Rational

logger = logging.getLogger(__name__)

# ids stay inside a signed 32-bit column
MAX_TRANSACTION_ID = 2**31 - 1


class TransactionIdExhaustedError(RuntimeError):
    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"No unused transaction id found after {attempts} attempts")


class TransactionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, transaction: Transaction) -> Transaction:
        orm_tx = self._to_orm(transaction)
        self._session.add(orm_tx)
        self._session.commit()
        self._session.refresh(orm_tx)
        return self._to_domain(orm_tx)

    def replace(self, tx_id: TransactionId, transaction: Transaction) -> Transaction:
        """Swap whatever is stored under ``tx_id`` for ``transaction`` in one commit."""
        existing = self._session.get(models.TransactionOrm, tx_id)
        if existing is not None:
            # items go with it through the delete-orphan cascade
            self._session.delete(existing)
            self._session.flush()

        orm_tx = self._to_orm(transaction.model_copy(update={"id": tx_id}))
        self._session.add(orm_tx)
        self._session.commit()
        self._session.refresh(orm_tx)
        return self._to_domain(orm_tx)

    def get(self, tx_id: int) -> Transaction | None:
        orm_tx = self._session.get(models.TransactionOrm, tx_id)
        if orm_tx is None:
            return None
        return self._to_domain(orm_tx)

    def list(self) -> list[Transaction]:
        stmt = select(models.TransactionOrm).order_by(models.TransactionOrm.tx_time.asc(), models.TransactionOrm.id)
        return [self._to_domain(orm_tx) for orm_tx in self._session.scalars(stmt)]

    def latest(self, limit: int) -> list[Transaction]:
        """The ``limit`` most recent transactions, oldest first."""
        stmt = (
            select(models.TransactionOrm)
            .order_by(models.TransactionOrm.tx_time.desc(), models.TransactionOrm.id.desc())
            .limit(limit)
        )
        newest_first = [self._to_domain(orm_tx) for orm_tx in self._session.scalars(stmt)]
        return newest_first[::-1]

    def new_random_id(self, *, rng: random.Random | None = None, max_attempts: int = 16) -> TransactionId:
        rng = rng or random.Random()
        for attempt in range(1, max_attempts + 1):
            candidate = rng.randint(1, MAX_TRANSACTION_ID)
            if self._session.get(models.TransactionOrm, candidate) is None:
                return TransactionId(candidate)
            logger.debug("Transaction id %d already taken (attempt %d/%d)", candidate, attempt, max_attempts)
        raise TransactionIdExhaustedError(max_attempts)

    @staticmethod
    def _to_orm(transaction: Transaction) -> models.TransactionOrm:
        orm_tx = models.TransactionOrm(
            tx_time=_as_utc(transaction.tx_time),
            rev_time=_as_utc(transaction.rev_time),
            description=transaction.description,
        )
        if transaction.id is not None:
            orm_tx.id = transaction.id
        orm_tx.credits = [
            models.CreditOrm(account=account, value=value) for account, value in transaction.credits.items()
        ]
        orm_tx.debits = [models.DebitOrm(account=account, value=value) for account, value in transaction.debits.items()]
        return orm_tx

    @staticmethod
    def _to_domain(orm_tx: models.TransactionOrm) -> Transaction:
        return Transaction(
            id=TransactionId(orm_tx.id),
            tx_time=_as_utc(orm_tx.tx_time),
            rev_time=_as_utc(orm_tx.rev_time),
            description=orm_tx.description,
            credits={AccountName(item.account): item.value for item in orm_tx.credits},
            debits={AccountName(item.account): item.value for item in orm_tx.debits},
        )


class BalanceRepository:
    """Per-account credit and debit totals, and the balances derived from them.

    With ``aggregate_in_db`` the totals come from ``sum_rat`` in a grouped
    query. Otherwise, or on a database without the aggregate, the raw rows are
    fetched and folded here with the same identity and addition.
    """

    _TABLES: dict[EntryType, Any] = {
        EntryType.CREDIT: models.CreditOrm,
        EntryType.DEBIT: models.DebitOrm,
    }

    def __init__(self, session: Session, *, aggregate_in_db: bool = True) -> None:
        self._session = session
        self._aggregate_in_db = aggregate_in_db

    def credit_sums(self) -> dict[str, Rational]:
        return self.sums(EntryType.CREDIT)

    def debit_sums(self) -> dict[str, Rational]:
        return self.sums(EntryType.DEBIT)

    def sums(self, entry_type: EntryType) -> dict[str, Rational]:
        table = self._TABLES[entry_type]
        if self._aggregate_in_db and self._session.get_bind().dialect.name == "sqlite":
            stmt = select(table.account, func.sum_rat(table.value)).group_by(table.account)
            return {account: total for account, total in self._session.execute(stmt)}

        totals: dict[str, RationalSum] = {}
        for account, value in self._session.execute(select(table.account, table.value)):
            totals.setdefault(account, RationalSum()).step(value)
        return {account: total.finalize() for account, total in totals.items()}

    def balances(self) -> list[AccountBalance]:
        return project_balances(self.credit_sums(), self.debit_sums())


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)
