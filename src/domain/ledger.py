from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Iterable, NewType

from pydantic import BaseModel, ConfigDict, PlainSerializer, PlainValidator, WithJsonSchema

from .aggregate import sum_rationals
from .literals import EntryType, parse_mixed_number
from .rational import NegativeUnsupportedError, Rational

TransactionId = NewType("TransactionId", int)
AccountName = NewType("AccountName", str)


def _coerce_amount(value: Any) -> Rational:
    if isinstance(value, Rational):
        return value
    if isinstance(value, str):
        return parse_mixed_number(value.strip())
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise NegativeUnsupportedError(value)
        return Rational(value)
    raise ValueError(f"expected an amount, got {type(value).__name__}")


# Accepts Rational, non-negative ints and mixed-number strings; dumps as "n/d".
Amount = Annotated[
    Rational,
    PlainValidator(_coerce_amount),
    PlainSerializer(str, return_type=str),
    WithJsonSchema({"type": "string", "examples": ["2", "5/3", "2 1/3"]}),
]


class LedgerEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    entry_type: EntryType
    account: AccountName
    amount: Amount


class Transaction(BaseModel):
    """A dated description plus the amounts credited and debited per account."""

    id: TransactionId | None = None
    tx_time: datetime
    rev_time: datetime
    description: str
    credits: dict[AccountName, Amount] = {}
    debits: dict[AccountName, Amount] = {}

    @classmethod
    def from_entries(cls, description: str, entries: Iterable[LedgerEntry], when: datetime) -> Transaction:
        credits: dict[AccountName, Rational] = {}
        debits: dict[AccountName, Rational] = {}
        for entry in entries:
            side = credits if entry.entry_type == EntryType.CREDIT else debits
            side[entry.account] = side.get(entry.account, Rational.zero()) + entry.amount
        return cls(tx_time=when, rev_time=when, description=description, credits=credits, debits=debits)

    def sum_credits(self) -> Rational:
        return sum_rationals(self.credits.values())

    def sum_debits(self) -> Rational:
        return sum_rationals(self.debits.values())


class ValidationReason(StrEnum):
    MISSING_DESCRIPTION = "missing_description"
    UNBALANCED = "unbalanced"
    ZERO_VALUE = "zero_value"
    EMPTY_ACCOUNT_NAME = "empty_account_name"


_REASON_MESSAGES = {
    ValidationReason.MISSING_DESCRIPTION: "missing description",
    ValidationReason.UNBALANCED: "unbalanced transaction, credits != debits",
    ValidationReason.ZERO_VALUE: "no transaction, credits and debits are zero",
    ValidationReason.EMPTY_ACCOUNT_NAME: "empty account name",
}


class TransactionValidationError(ValueError):
    def __init__(self, reason: ValidationReason) -> None:
        self.reason = reason
        super().__init__(_REASON_MESSAGES[reason])


def validate_transaction(transaction: Transaction) -> None:
    if not transaction.description:
        raise TransactionValidationError(ValidationReason.MISSING_DESCRIPTION)

    sum_credits = transaction.sum_credits()
    if sum_credits != transaction.sum_debits():
        raise TransactionValidationError(ValidationReason.UNBALANCED)
    if sum_credits.is_zero():
        raise TransactionValidationError(ValidationReason.ZERO_VALUE)

    if any(not account for account in (*transaction.credits, *transaction.debits)):
        raise TransactionValidationError(ValidationReason.EMPTY_ACCOUNT_NAME)
