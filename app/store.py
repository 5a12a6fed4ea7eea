"""
app/store.py -- In-memory record store for transactions.

TransactionStore.from_json_file(path) loads a JSON array once at startup.
Records are kept in a dict keyed by id; dict insertion order is the load
order, which the service relies on for stable tie-breaking when sorting.

The store is read-only after load. Access still goes through a fair
read-write lock so a future write path can be added without touching readers.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError
from readerwriterlock import rwlock

from app.errors import StoreLoadError, TransactionNotFoundError
from app.logger import get_logger
from app.models import Transaction

log = get_logger("store")

_TRANSACTION_LIST = TypeAdapter(List[Transaction])

Predicate = Callable[[Transaction], bool]


class TransactionStore:
    def __init__(self, transactions: Iterable[Transaction] = ()) -> None:
        self._records: Dict[str, Transaction] = {}
        self._lock = rwlock.RWLockFair()

        with self._lock.gen_wlock():
            for txn in transactions:
                if txn.id in self._records:
                    log.bind(txnId=txn.id).warning("Duplicate transaction id; later record replaces earlier one")
                self._records[txn.id] = txn

    @classmethod
    def from_json_file(cls, path: Path | str) -> "TransactionStore":
        """
        Load every transaction from a JSON array file.

        Any failure (missing file, bad JSON, invalid record) raises
        StoreLoadError -- the process must not serve without a loaded store.
        """
        path = Path(path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise StoreLoadError(f"failed to read transactions from {path}: {exc}") from exc

        try:
            transactions = _TRANSACTION_LIST.validate_json(raw)
        except ValidationError as exc:
            raise StoreLoadError(f"failed to parse transactions from {path}: {exc}") from exc

        store = cls(transactions)
        log.bind(count=len(store), path=str(path)).info("Loaded transactions")
        return store

    def get_by_id(self, txn_id: str) -> Transaction:
        with self._lock.gen_rlock():
            txn = self._records.get(txn_id)
        if txn is None:
            raise TransactionNotFoundError(txn_id)
        return txn

    def scan(self, predicate: Optional[Predicate] = None) -> List[Transaction]:
        """Return matching records in load order. No predicate -> all records."""
        with self._lock.gen_rlock():
            if predicate is None:
                return list(self._records.values())
            return [txn for txn in self._records.values() if predicate(txn)]

    def __len__(self) -> int:
        with self._lock.gen_rlock():
            return len(self._records)
