"""
utils/filters.py -- Filter evaluation for a single transaction.

matches(txn, filters) -> bool
  Conjunction of every constraint that is set on `filters`:
    accountId  -- exact match
    startDate  -- txn.date >= startDate
    endDate    -- txn.date <= endDate
    category   -- exact, case-sensitive match
    minAmount  -- txn.amount >= minAmount  (inclusive)
    maxAmount  -- txn.amount <= maxAmount  (inclusive)

Pure function: no logging, no side effects. Gating happens in the service.
"""
from __future__ import annotations

from app.models import Transaction, TransactionFilters


def matches(txn: Transaction, filters: TransactionFilters) -> bool:
    if filters.accountId and txn.accountId != filters.accountId:
        return False

    if filters.startDate is not None and txn.date < filters.startDate:
        return False

    if filters.endDate is not None and txn.date > filters.endDate:
        return False

    if filters.category and txn.category != filters.category:
        return False

    if filters.minAmount is not None and txn.amount < filters.minAmount:
        return False

    if filters.maxAmount is not None and txn.amount > filters.maxAmount:
        return False

    return True
