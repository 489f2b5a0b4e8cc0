from fractions import Fraction
from pathlib import Path

from db.db import init_db
from db.repositories import BalanceRepository, TransactionRepository
from domain.balances import AccountBalance
from domain.ledger import Transaction
from tests.constants import ALICE, BOB, T0


def test_init_db_reopens_existing_file(tmp_path: Path) -> None:
    db_file = tmp_path / "ledger.db"
    with init_db(db_file=db_file) as session:
        TransactionRepository(session).create(
            Transaction(tx_time=T0, rev_time=T0, description="Dinner", credits={ALICE: "1/3"}, debits={BOB: "1/3"})
        )

    with init_db(db_file=db_file) as session:
        assert [tx.description for tx in TransactionRepository(session).list()] == ["Dinner"]
        assert BalanceRepository(session).balances() == [
            AccountBalance(account="alice", balance=Fraction(1, 3)),
            AccountBalance(account="bob", balance=Fraction(-1, 3)),
        ]
