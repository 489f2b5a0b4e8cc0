from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from clients.couchdb import CouchDBClient
from domain.ledger import AccountName, Amount, Transaction

logger = logging.getLogger(__name__)


class CouchTransaction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    credits: dict[AccountName, Amount] = {}
    # the legacy documents spell it "debets"
    debits: dict[AccountName, Amount] = Field(default_factory=dict, alias="debets")


class CouchMeta(BaseModel):
    timestamp: datetime
    description: str

    @field_validator("timestamp")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class CouchTransactionDocument(BaseModel):
    transaction: CouchTransaction
    meta: CouchMeta

    def to_transaction(self) -> Transaction:
        return Transaction(
            tx_time=self.meta.timestamp,
            rev_time=self.meta.timestamp,
            description=self.meta.description,
            credits=self.transaction.credits,
            debits=self.transaction.debits,
        )


def transactions_from_all_docs(payload: dict[str, Any]) -> list[Transaction]:
    """Convert a CouchDB ``rows`` listing into transactions, oldest first.

    Each row carries its document under ``value`` (view output) or ``doc``
    (``_all_docs?include_docs=true``). Rows without a transaction, such as
    design documents, are skipped. Amounts are integers or mixed-number
    strings; anything else fails the whole import.
    """
    rows = payload.get("rows")
    if not isinstance(rows, list):
        raise ValueError("CouchDB payload has no 'rows' list")

    transactions: list[Transaction] = []
    for row in rows:
        document = row.get("doc") or row.get("value")
        if not isinstance(document, dict) or "transaction" not in document:
            logger.info("Skipping CouchDB row without a transaction: %s", row.get("id", "<no id>"))
            continue
        try:
            parsed = CouchTransactionDocument.model_validate(document)
        except ValidationError as exc:
            raise ValueError(f"Invalid transaction document {row.get('id', '<no id>')}: {exc}") from exc
        transactions.append(parsed.to_transaction())

    transactions.sort(key=lambda tx: tx.tx_time)
    return transactions


class CouchDBImporter:
    def __init__(self, *, source_path: Path | None = None, client: CouchDBClient | None = None) -> None:
        self._source: Path | CouchDBClient
        if source_path is not None and client is None:
            self._source = source_path
        elif client is not None and source_path is None:
            self._source = client
        else:
            raise ValueError("Exactly one of source_path or client must be given")

    def load_transactions(self) -> list[Transaction]:
        payload = self._read_payload()
        transactions = transactions_from_all_docs(payload)
        logger.info("Loaded %d transactions from CouchDB export", len(transactions))
        return transactions

    def _read_payload(self) -> dict[str, Any]:
        if isinstance(self._source, Path):
            return self._read_file(self._source)
        return self._source.fetch_all_docs()

    @staticmethod
    def _read_file(path: Path) -> dict[str, Any]:
        with path.open(encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object in {path}")
        return payload
