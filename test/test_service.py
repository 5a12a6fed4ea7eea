# Test type: unit + randomized property
# Validation: flag gating, effective filters, ordering, lookup
# Command: pytest test/test_service.py -v

import random
from datetime import datetime, timedelta, timezone

import pytest

from app.errors import TransactionNotFoundError
from app.features import FeatureGate
from app.models import Transaction, TransactionFilters
from app.service import TransactionService
from app.store import TransactionStore
from app.utils.filters import matches


class _StaticProvider:
    def __init__(self, value: bool):
        self.value = value

    def setup(self) -> None:
        pass

    def fetch(self) -> bool:
        return self.value

    def shutdown(self) -> None:
        pass


def _gate(enabled: bool) -> FeatureGate:
    gate = FeatureGate(provider=_StaticProvider(enabled))
    gate.refresh()
    return gate


def _txn(txn_id: str, date: str, amount: float = 10.0, account: str = "acc-1", category: str = "dining") -> Transaction:
    return Transaction(id=txn_id, accountId=account, date=date, amount=amount, category=category)


def _service(txns, enabled: bool) -> TransactionService:
    return TransactionService(store=TransactionStore(txns), gate=_gate(enabled))


class TestScenarios:
    def test_gate_disabled_no_filters_sorted_desc(self):
        svc = _service(
            [
                _txn("jan", "2024-01-01T00:00:00Z"),
                _txn("mar", "2024-03-01T00:00:00Z"),
                _txn("feb", "2024-02-01T00:00:00Z"),
            ],
            enabled=False,
        )
        result = svc.list_transactions(TransactionFilters())
        assert [t.id for t in result] == ["mar", "feb", "jan"]

    def test_gate_enabled_amount_window(self):
        svc = _service(
            [
                _txn("a10", "2024-01-01T00:00:00Z", amount=10),
                _txn("a75", "2024-01-02T00:00:00Z", amount=75),
                _txn("a150", "2024-01-03T00:00:00Z", amount=150),
            ],
            enabled=True,
        )
        result = svc.list_transactions(TransactionFilters(minAmount=50, maxAmount=100))
        assert [t.id for t in result] == ["a75"]


class TestGating:
    def _store(self):
        return [
            _txn("t1", "2024-01-05T00:00:00Z", 20, "acc-1", "dining"),
            _txn("t2", "2024-02-05T00:00:00Z", 200, "acc-1", "rent"),
            _txn("t3", "2024-03-05T00:00:00Z", 60, "acc-2", "dining"),
            _txn("t4", "2024-04-05T00:00:00Z", 80, "acc-1", "dining"),
        ]

    def test_disabled_ignores_advanced_fields(self):
        svc = _service(self._store(), enabled=False)
        requested = TransactionFilters(accountId="acc-1", category="rent", minAmount=100)
        assert [t.id for t in svc.list_transactions(requested)] == ["t4", "t2", "t1"]

    def test_disabled_still_honors_account(self):
        svc = _service(self._store(), enabled=False)
        assert [t.id for t in svc.list_transactions(TransactionFilters(accountId="acc-2"))] == ["t3"]

    def test_enabled_applies_all_fields(self):
        svc = _service(self._store(), enabled=True)
        requested = TransactionFilters(
            accountId="acc-1", startDate="2024-01-01", endDate="2024-04-30", category="dining", minAmount=50
        )
        assert [t.id for t in svc.list_transactions(requested)] == ["t4"]

    def test_effective_filters_disabled_keeps_only_account(self):
        requested = TransactionFilters(accountId="acc-1", startDate="2024-01-01", category="x", maxAmount=5)
        effective = TransactionService.effective_filters(requested, advanced_enabled=False)
        assert effective == TransactionFilters(accountId="acc-1")

    def test_effective_filters_enabled_is_unchanged(self):
        requested = TransactionFilters(accountId="acc-1", startDate="2024-01-01", category="x", maxAmount=5)
        assert TransactionService.effective_filters(requested, advanced_enabled=True) == requested

    def test_gate_read_once_per_call(self):
        class CountingGate(FeatureGate):
            reads = 0

            def is_advanced_filtering_enabled(self) -> bool:
                CountingGate.reads += 1
                return super().is_advanced_filtering_enabled()

        svc = TransactionService(store=TransactionStore(self._store()), gate=CountingGate())
        svc.list_transactions(TransactionFilters(category="dining"))
        assert CountingGate.reads == 1

    def test_empty_result_is_not_an_error(self):
        svc = _service(self._store(), enabled=False)
        assert svc.list_transactions(TransactionFilters(accountId="nobody")) == []


class TestOrdering:
    def test_ties_keep_load_order(self):
        same = "2024-02-01T00:00:00Z"
        svc = _service(
            [
                _txn("first", same),
                _txn("newest", "2024-05-01T00:00:00Z"),
                _txn("second", same),
                _txn("third", same),
            ],
            enabled=False,
        )
        assert [t.id for t in svc.list_transactions(TransactionFilters())] == ["newest", "first", "second", "third"]


class TestLookup:
    def test_get_transaction(self):
        t = _txn("t1", "2024-01-01T00:00:00Z")
        svc = _service([t], enabled=False)
        assert svc.get_transaction("t1", user_id="user-001") == t

    def test_get_transaction_missing(self):
        svc = _service([], enabled=False)
        with pytest.raises(TransactionNotFoundError):
            svc.get_transaction("missing")


# ---------------------------------------------------------------------------
# Randomized: gating and ordering properties over a random store
# ---------------------------------------------------------------------------

_BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _random_store(rng: random.Random):
    return [
        Transaction(
            id=f"t{i}",
            accountId=rng.choice(["acc-1", "acc-2"]),
            date=_BASE + timedelta(days=rng.randint(0, 20)),
            amount=float(rng.randint(0, 150)),
            category=rng.choice(["dining", "rent", "groceries"]),
        )
        for i in range(40)
    ]


def _random_filters(rng: random.Random) -> TransactionFilters:
    def maybe(value):
        return value if rng.random() < 0.6 else None

    return TransactionFilters(
        accountId=maybe(rng.choice(["acc-1", "acc-2"])),
        startDate=maybe(_BASE + timedelta(days=rng.randint(0, 20))),
        endDate=maybe(_BASE + timedelta(days=rng.randint(0, 20))),
        category=maybe(rng.choice(["dining", "rent", "groceries"])),
        minAmount=maybe(float(rng.randint(0, 150))),
        maxAmount=maybe(float(rng.randint(0, 150))),
    )


class TestServiceProperties:
    def test_disabled_equals_account_only(self):
        rng = random.Random(7)
        records = _random_store(rng)
        svc = _service(records, enabled=False)
        for _ in range(100):
            f = _random_filters(rng)
            assert svc.list_transactions(f) == svc.list_transactions(TransactionFilters(accountId=f.accountId))

    def test_enabled_equals_matching_subset(self):
        rng = random.Random(11)
        records = _random_store(rng)
        svc = _service(records, enabled=True)
        for _ in range(100):
            f = _random_filters(rng)
            got = svc.list_transactions(f)
            assert {t.id for t in got} == {t.id for t in records if matches(t, f)}
            assert len(got) == len({t.id for t in got})

    def test_results_sorted_most_recent_first(self):
        rng = random.Random(3)
        svc = _service(_random_store(rng), enabled=True)
        for _ in range(50):
            got = svc.list_transactions(_random_filters(rng))
            assert all(a.date >= b.date for a, b in zip(got, got[1:]))
