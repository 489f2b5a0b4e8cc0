"""Domain types for the sharebill ledger.

The exact rational amount type, its binary codec, the text literal grammars,
the ``sum_rat`` aggregate and the balance projection live here. They are
independent from persistence so that arithmetic and parsing can be tested
without a database.
"""

__all__ = [
    "aggregate",
    "balances",
    "codec",
    "ledger",
    "literals",
    "rational",
]
