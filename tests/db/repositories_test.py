from datetime import datetime, timedelta, timezone
from random import Random

import pytest
from sqlalchemy.orm import Session

from db.repositories import BalanceRepository, TransactionIdExhaustedError, TransactionRepository
from domain.balances import AccountBalance
from domain.ledger import Transaction, TransactionId
from domain.rational import Rational
from tests.constants import ALICE, BOB, CAROL, T0


def _sample_transaction(description: str, timestamp: datetime, **items: dict[str, Rational]) -> Transaction:
    return Transaction(
        tx_time=timestamp,
        rev_time=timestamp,
        description=description,
        credits=items.get("credits", {ALICE: Rational(3)}),
        debits=items.get("debits", {BOB: Rational(3, 2), CAROL: Rational(3, 2)}),
    )


@pytest.fixture()
def repo(test_session: Session) -> TransactionRepository:
    return TransactionRepository(test_session)


@pytest.fixture()
def balance_repo(test_session: Session) -> BalanceRepository:
    return BalanceRepository(test_session)


def test_create_and_get_transaction(repo: TransactionRepository) -> None:
    created = repo.create(_sample_transaction("Dinner", T0))

    assert created.id is not None
    assert created.tx_time == T0
    assert created.credits == {ALICE: Rational(3)}
    assert created.debits == {BOB: Rational(3, 2), CAROL: Rational(3, 2)}

    fetched = repo.get(created.id)
    assert fetched == created


def test_get_missing_transaction(repo: TransactionRepository) -> None:
    assert repo.get(12345) is None


def test_create_keeps_explicit_id(repo: TransactionRepository) -> None:
    transaction = _sample_transaction("Dinner", T0).model_copy(update={"id": TransactionId(987654)})

    created = repo.create(transaction)

    assert created.id == 987654
    assert repo.get(987654) is not None


def test_timestamps_are_stored_as_utc(repo: TransactionRepository) -> None:
    local = datetime(2024, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))

    created = repo.create(_sample_transaction("Lunch", local))

    assert created.tx_time == T0
    assert created.tx_time.tzinfo == timezone.utc


def test_list_is_chronological(repo: TransactionRepository) -> None:
    second = repo.create(_sample_transaction("second", T0 + timedelta(days=1)))
    first = repo.create(_sample_transaction("first", T0))

    assert [tx.id for tx in repo.list()] == [first.id, second.id]


def test_latest_returns_newest_in_chronological_order(repo: TransactionRepository) -> None:
    created = [repo.create(_sample_transaction(f"tx {day}", T0 + timedelta(days=day))) for day in range(5)]

    latest = repo.latest(3)

    assert [tx.id for tx in latest] == [tx.id for tx in created[2:]]


def test_replace_swaps_items_under_the_same_id(repo: TransactionRepository) -> None:
    original = repo.create(_sample_transaction("Dinner", T0))
    assert original.id is not None
    repo.get(original.id)

    replacement = _sample_transaction(
        "Dinner (fixed)", T0, credits={BOB: Rational(4)}, debits={ALICE: Rational(4)}
    )
    replaced = repo.replace(original.id, replacement)

    assert replaced.id == original.id
    fetched = repo.get(original.id)
    assert fetched is not None
    assert fetched.description == "Dinner (fixed)"
    assert fetched.credits == {BOB: Rational(4)}
    assert fetched.debits == {ALICE: Rational(4)}
    assert len(repo.list()) == 1


def test_replace_creates_missing_transaction(repo: TransactionRepository) -> None:
    created = repo.replace(TransactionId(42), _sample_transaction("New", T0))

    assert created.id == 42
    assert repo.get(42) == created


def test_new_random_id_skips_taken_ids(repo: TransactionRepository) -> None:
    taken = Random(1).randint(1, 2**31 - 1)
    repo.create(_sample_transaction("Taken", T0).model_copy(update={"id": TransactionId(taken)}))

    new_id = repo.new_random_id(rng=Random(1))

    assert new_id != taken
    assert repo.get(new_id) is None


def test_new_random_id_gives_up_after_max_attempts(repo: TransactionRepository) -> None:
    taken = Random(5).randint(1, 2**31 - 1)
    repo.create(_sample_transaction("Taken", T0).model_copy(update={"id": TransactionId(taken)}))

    with pytest.raises(TransactionIdExhaustedError) as exc_info:
        repo.new_random_id(rng=Random(5), max_attempts=1)

    assert exc_info.value.attempts == 1


def test_sums_are_grouped_by_account(repo: TransactionRepository, balance_repo: BalanceRepository) -> None:
    repo.create(_sample_transaction("one", T0, credits={ALICE: Rational(3, 14)}, debits={BOB: Rational(3, 14)}))
    repo.create(
        _sample_transaction(
            "two", T0, credits={ALICE: Rational(2, 14)}, debits={BOB: Rational(1, 14), CAROL: Rational(1, 14)}
        )
    )

    assert balance_repo.credit_sums() == {ALICE: Rational(5, 14)}
    assert balance_repo.debit_sums() == {BOB: Rational(2, 7), CAROL: Rational(1, 14)}


def test_in_db_and_in_app_aggregation_agree(test_session: Session, repo: TransactionRepository) -> None:
    rng = Random(11)
    for index in range(20):
        amount = Rational(rng.randint(1, 1000), rng.randint(1, 97))
        debtor = BOB if index % 3 else CAROL
        repo.create(_sample_transaction(f"tx {index}", T0, credits={ALICE: amount}, debits={debtor: amount}))

    in_db = BalanceRepository(test_session, aggregate_in_db=True)
    in_app = BalanceRepository(test_session, aggregate_in_db=False)

    assert in_db.credit_sums() == in_app.credit_sums()
    assert in_db.debit_sums() == in_app.debit_sums()
    assert in_db.balances() == in_app.balances()


def test_balances(repo: TransactionRepository, balance_repo: BalanceRepository) -> None:
    repo.create(
        _sample_transaction("one", T0, credits={"A": Rational(5)}, debits={"B": Rational(5, 3), "A": Rational(10, 3)})
    )
    repo.create(_sample_transaction("two", T0, credits={CAROL: Rational(1)}, debits={CAROL: Rational(1)}))

    balances = balance_repo.balances()

    assert [(entry.account, entry.balance) for entry in balances] == [
        ("A", Rational(5, 3).to_fraction()),
        ("B", -Rational(5, 3).to_fraction()),
    ]
    assert all(isinstance(entry, AccountBalance) for entry in balances)


def test_balances_of_empty_ledger(balance_repo: BalanceRepository) -> None:
    assert balance_repo.balances() == []
