"""
service.py -- Transaction query orchestration.

list_transactions(requested, user_id=None)
  1. read the feature gate ONCE (the whole response uses the same value)
  2. build the effective filter set: accountId always, the rest only if enabled
  3. scan the store with utils.filters.matches
  4. stable sort by date, most recent first (ties keep load order)

get_transaction(txn_id, user_id=None)
  Direct lookup; TransactionNotFoundError when the id is unknown.
"""
from __future__ import annotations

from typing import List, Optional

from app.features import FeatureGate
from app.logger import get_logger
from app.models import Transaction, TransactionFilters
from app.store import TransactionStore
from app.utils.filters import matches

log = get_logger("service")


class TransactionService:
    def __init__(self, store: TransactionStore, gate: FeatureGate) -> None:
        self.store = store
        self.gate = gate

    @staticmethod
    def effective_filters(requested: TransactionFilters, advanced_enabled: bool) -> TransactionFilters:
        """Drop every gated field unless advanced filtering is enabled."""
        if advanced_enabled:
            return requested
        return TransactionFilters(accountId=requested.accountId)

    def list_transactions(
        self,
        requested: TransactionFilters,
        user_id: Optional[str] = None,
    ) -> List[Transaction]:
        advanced_enabled = self.gate.is_advanced_filtering_enabled()
        effective = self.effective_filters(requested, advanced_enabled)
        ctx = log.bind(userId=user_id, accountId=requested.accountId)

        if advanced_enabled:
            ctx.bind(
                startDate=requested.startDate,
                endDate=requested.endDate,
                category=requested.category,
                minAmount=requested.minAmount,
                maxAmount=requested.maxAmount,
            ).debug("Using advanced filters")
        else:
            if requested.has_advanced:
                ctx.info(
                    "Advanced filters requested but feature flag is disabled, "
                    "only accountId filter will be applied"
                )
            ctx.debug("Using basic filters only")

        transactions = self.store.scan(lambda txn: matches(txn, effective))
        # sorted() is stable with reverse=True, so equal dates keep load order
        transactions = sorted(transactions, key=lambda txn: txn.date, reverse=True)

        ctx.bind(count=len(transactions)).info("Retrieved transactions")
        return transactions

    def get_transaction(self, txn_id: str, user_id: Optional[str] = None) -> Transaction:
        txn = self.store.get_by_id(txn_id)
        log.bind(userId=user_id, txnId=txn_id).debug("Retrieved transaction")
        return txn
