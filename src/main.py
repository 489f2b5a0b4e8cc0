from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from time import perf_counter
from typing import Sequence

from clients.couchdb import CouchDBClient
from config import config, configure_logging
from db.db import init_db
from db.repositories import BalanceRepository, TransactionRepository
from domain.ledger import TransactionValidationError, ValidationReason
from importers.couchdb_importer import CouchDBImporter, transactions_from_all_docs
from services.ledger_service import EntryArgumentError, add_transaction, import_transactions, scramble_ids
from utils.balance_summary import compute_balance_summary, render_balance_summary
from utils.transaction_listing import render_transactions

logger = logging.getLogger(__name__)


def run_add(db_file: Path, description: str, entries: Sequence[str], parser: argparse.ArgumentParser) -> None:
    session = init_db(config().echo_sql, db_file=db_file)
    try:
        stored = add_transaction(TransactionRepository(session), description, entries)
    except EntryArgumentError as exc:
        parser.error(str(exc))
    except TransactionValidationError as exc:
        if exc.reason == ValidationReason.UNBALANCED:
            parser.exit(1, "Transaction doesn't sum to zero. Aborting.\n")
        parser.exit(1, f"Invalid transaction: {exc}. Aborting.\n")
    finally:
        session.close()
    if stored is not None:
        print(f"Stored transaction {stored.id}")


def run_transactions(db_file: Path) -> None:
    with init_db(config().echo_sql, db_file=db_file) as session:
        render_transactions(TransactionRepository(session).list())


def run_balances(db_file: Path, *, exact: bool) -> None:
    with init_db(config().echo_sql, db_file=db_file) as session:
        summary = compute_balance_summary(BalanceRepository(session))
    render_balance_summary(summary, exact=exact)


def run_import(db_file: Path, *, source: str | None, url: str | None, database: str) -> None:
    started = perf_counter()
    if url:
        logger.info("Fetching CouchDB documents from %s/%s", url, database)
        transactions = CouchDBImporter(client=CouchDBClient(base_url=url, database=database)).load_transactions()
    elif source is None or source == "-":
        transactions = transactions_from_all_docs(json.load(sys.stdin))
    else:
        transactions = CouchDBImporter(source_path=Path(source)).load_transactions()

    with init_db(config().echo_sql, db_file=db_file) as session:
        count = import_transactions(TransactionRepository(session), transactions)
    logger.info("Imported %d transactions in %.2fs", count, perf_counter() - started)
    print(f"Imported {count} transactions")


def run_scramble(db_file: Path, target_file: Path, *, seed: int | None) -> None:
    with init_db(config().echo_sql, db_file=db_file) as source:
        with init_db(config().echo_sql, db_file=target_file) as target:
            count = scramble_ids(
                TransactionRepository(source),
                TransactionRepository(target),
                rng=random.Random(seed),
                max_attempts=config().tx_id_attempts,
            )
    print(f"Copied {count} transactions to {target_file}")


def build_parser() -> argparse.ArgumentParser:
    settings = config()
    parser = argparse.ArgumentParser(description="Shared expense ledger with exact fractional amounts.")
    parser.add_argument("--db", type=Path, default=settings.db_file, help="SQLite database file")
    parser.add_argument("--log-level", default=settings.log_level)
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add a transaction, e.g. add 'Dinner' ABC+1/2 XYZ-1/2")
    add.add_argument("description")
    add.add_argument("entries", nargs="*", help="account<+|->amount")

    commands.add_parser("transactions", help="List all transactions")

    balances = commands.add_parser("balances", help="Show non-zero account balances")
    balances.add_argument("--exact", action="store_true", help="Print exact fractions instead of two decimals")

    couchdb = commands.add_parser("import-couchdb", help="Import transactions from a CouchDB export")
    couchdb.add_argument("--file", dest="source", help="JSON export file, '-' or omitted for stdin")
    couchdb.add_argument("--url", default=settings.couchdb_url, help="CouchDB server to fetch from")
    couchdb.add_argument("--database", default=settings.couchdb_database)

    scramble = commands.add_parser("scramble-ids", help="Copy all transactions under fresh random ids")
    scramble.add_argument("--target", type=Path, required=True)
    scramble.add_argument("--seed", type=int, default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "add":
        run_add(args.db, args.description, args.entries, parser)
    elif args.command == "transactions":
        run_transactions(args.db)
    elif args.command == "balances":
        run_balances(args.db, exact=args.exact)
    elif args.command == "import-couchdb":
        run_import(args.db, source=args.source, url=args.url, database=args.database)
    elif args.command == "scramble-ids":
        run_scramble(args.db, args.target, seed=args.seed)


if __name__ == "__main__":
    main()
