"""
app/errors.py -- Exception types raised by the store, service and validators.

InvalidFilterError subclasses ValueError so Pydantic turns it into a normal
validation error when raised inside a field validator.
"""
from __future__ import annotations


class TransactionsApiError(Exception):
    """Base class for all service errors."""


class InvalidFilterError(TransactionsApiError, ValueError):
    """A query parameter could not be parsed."""


class TransactionNotFoundError(TransactionsApiError, LookupError):
    def __init__(self, txn_id: str) -> None:
        super().__init__(f"transaction not found: {txn_id}")
        self.txn_id = txn_id


class StoreError(TransactionsApiError):
    """Unexpected failure reading the record store."""


class StoreLoadError(StoreError):
    """The transaction source could not be loaded at startup."""
