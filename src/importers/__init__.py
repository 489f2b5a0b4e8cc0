"""Importers for transactions kept outside the SQLite ledger."""

from importers.couchdb_importer import CouchDBImporter, transactions_from_all_docs

__all__ = ["CouchDBImporter", "transactions_from_all_docs"]
