import pytest
from pydantic import ValidationError

from domain.ledger import (
    LedgerEntry,
    Transaction,
    TransactionValidationError,
    ValidationReason,
    validate_transaction,
)
from domain.literals import EntryType
from domain.rational import Rational
from tests.constants import ALICE, BOB, CAROL, T0


def _transaction(**overrides: object) -> Transaction:
    fields: dict[str, object] = {
        "tx_time": T0,
        "rev_time": T0,
        "description": "Dinner",
        "credits": {ALICE: Rational(3)},
        "debits": {BOB: Rational(3, 2), CAROL: Rational(3, 2)},
    }
    fields.update(overrides)
    return Transaction.model_validate(fields)


def test_amounts_accept_literals_and_integers() -> None:
    transaction = _transaction(credits={ALICE: "2 1/2", BOB: 1}, debits={CAROL: "7/2"})

    assert transaction.credits == {ALICE: Rational(5, 2), BOB: Rational(1)}
    assert transaction.debits == {CAROL: Rational(7, 2)}


@pytest.mark.parametrize("amount", ["-1", -1, "abc", 1.5, True])
def test_amounts_reject_invalid_values(amount: object) -> None:
    with pytest.raises(ValidationError):
        _transaction(credits={ALICE: amount})


def test_amounts_serialise_as_exact_strings() -> None:
    dumped = _transaction().model_dump(mode="json")

    assert dumped["credits"] == {"alice": "3"}
    assert dumped["debits"] == {"bob": "3/2", "carol": "3/2"}


def test_from_entries_splits_by_polarity_and_sums_repeats() -> None:
    entries = [
        LedgerEntry(entry_type=EntryType.CREDIT, account=ALICE, amount=Rational(1, 2)),
        LedgerEntry(entry_type=EntryType.CREDIT, account=ALICE, amount=Rational(1, 3)),
        LedgerEntry(entry_type=EntryType.DEBIT, account=BOB, amount=Rational(5, 6)),
    ]

    transaction = Transaction.from_entries("Taxi", entries, T0)

    assert transaction.credits == {ALICE: Rational(5, 6)}
    assert transaction.debits == {BOB: Rational(5, 6)}
    assert transaction.tx_time == transaction.rev_time == T0


def test_valid_transaction_passes() -> None:
    validate_transaction(_transaction())


@pytest.mark.parametrize(
    ("overrides", "reason"),
    [
        ({"description": ""}, ValidationReason.MISSING_DESCRIPTION),
        ({"debits": {BOB: Rational(1)}}, ValidationReason.UNBALANCED),
        ({"credits": {}, "debits": {}}, ValidationReason.ZERO_VALUE),
        ({"credits": {"": Rational(3)}}, ValidationReason.EMPTY_ACCOUNT_NAME),
    ],
)
def test_validation_failures(overrides: dict[str, object], reason: ValidationReason) -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction(_transaction(**overrides))

    assert exc_info.value.reason == reason
