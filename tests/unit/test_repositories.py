"""
Tests for the SQLModel repositories against a temporary SQLite store.
"""

from datetime import datetime

import pytest

import db_engine
from models import ProductType, Trader, Transaction, TransactionType
from repositories import (
    ProductTypeRepository,
    SnapshotRepository,
    TraderRepository,
    TransactionRepository,
)


def _tx(tx_id, trader_id="a", owner_id="local", **fields):
    values = dict(
        transaction_date=datetime(2024, 1, 1, 12, 0),
        transaction_type=TransactionType.CASH_LOAN_GIVEN.value,
        amount=10.0,
    )
    values.update(fields)
    return Transaction(owner_id=owner_id, id=tx_id, trader_id=trader_id, **values)


class TestTraderRepository:

    def test_upsert_replaces_by_id(self, store):
        TraderRepository.upsert(Trader(id="a", name="First"))
        TraderRepository.upsert(Trader(id="a", name="Second", phone="555"))

        traders = TraderRepository.get_all("local")

        assert len(traders) == 1
        assert traders[0].name == "Second"
        assert traders[0].phone == "555"

    def test_owners_are_isolated(self, store):
        TraderRepository.upsert(Trader(id="a", name="Local"))
        TraderRepository.upsert(Trader(owner_id="other", id="a", name="Other"))

        assert TraderRepository.get_by_id("local", "a").name == "Local"
        assert TraderRepository.get_by_id("other", "a").name == "Other"
        assert TraderRepository.get_by_id("nobody", "a") is None

    def test_touch_sets_last_transaction_date(self, store):
        TraderRepository.upsert(Trader(id="a", name="A", last_transaction_date=datetime(2020, 1, 1)))

        TraderRepository.touch("local", "a", datetime(2024, 6, 1, 9, 30))

        assert TraderRepository.get_by_id("local", "a").last_transaction_date == datetime(2024, 6, 1, 9, 30)

    def test_touch_missing_trader(self, store):
        assert TraderRepository.touch("local", "missing") is None

    def test_delete_cascades_to_transactions(self, store):
        TraderRepository.upsert(Trader(id="a", name="A"))
        TraderRepository.upsert(Trader(id="b", name="B"))
        TransactionRepository.upsert(_tx("x1", trader_id="a"))
        TransactionRepository.upsert(_tx("x2", trader_id="a"))
        TransactionRepository.upsert(_tx("x3", trader_id="b"))

        assert TraderRepository.delete("local", "a") is True

        assert TraderRepository.get_by_id("local", "a") is None
        assert [tx.id for tx in TransactionRepository.get_all("local")] == ["x3"]

    def test_delete_missing_trader(self, store):
        assert TraderRepository.delete("local", "missing") is False


class TestTransactionRepository:

    def test_upsert_replaces_whole_record(self, store):
        TransactionRepository.upsert(_tx("x1", notes="first", product_type="gold", quantity=2.0))
        TransactionRepository.upsert(_tx("x1", amount=99.0))

        stored = TransactionRepository.get_by_id("local", "x1")

        assert stored.amount == 99.0
        assert stored.notes == ""
        assert stored.product_type is None
        assert stored.quantity is None

    def test_get_by_trader(self, store):
        TransactionRepository.upsert(_tx("x1", trader_id="a"))
        TransactionRepository.upsert(_tx("x2", trader_id="b"))

        assert [tx.id for tx in TransactionRepository.get_by_trader("local", "b")] == ["x2"]

    def test_references_product_type(self, store):
        TransactionRepository.upsert(_tx("x1", product_type="gold", quantity=1.0))
        TransactionRepository.upsert(_tx("x2", owner_id="other", product_type="silver", quantity=1.0))

        assert TransactionRepository.references_product_type("local", "gold")
        assert not TransactionRepository.references_product_type("local", "silver")

    def test_delete(self, store):
        TransactionRepository.upsert(_tx("x1"))

        assert TransactionRepository.delete("local", "x1") is True
        assert TransactionRepository.delete("local", "x1") is False
        assert TransactionRepository.get_all("local") == []

    def test_delete_by_trader(self, store):
        TransactionRepository.upsert(_tx("x1", trader_id="a"))
        TransactionRepository.upsert(_tx("x2", trader_id="a"))
        TransactionRepository.upsert(_tx("x3", trader_id="b"))

        assert TransactionRepository.delete_by_trader("local", "a") == 2
        assert len(TransactionRepository.get_all("local")) == 1

    def test_correlation_id_is_persisted(self, store):
        TransactionRepository.upsert(_tx("x1", correlation_id="conv-1"))

        assert TransactionRepository.get_by_id("local", "x1").correlation_id == "conv-1"


class TestProductTypeRepository:

    def test_upsert_and_delete(self, store):
        ProductTypeRepository.upsert(ProductType(id="gold", name="Gold", current_price=10.0))
        ProductTypeRepository.upsert(ProductType(id="gold", name="Gold", current_price=12.5, display_order=1))

        stored = ProductTypeRepository.get_by_id("local", "gold")
        assert stored.current_price == 12.5
        assert stored.display_order == 1

        assert ProductTypeRepository.delete("local", "gold") is True
        assert ProductTypeRepository.get_all("local") == []


class TestSnapshotRepository:

    def test_load_reads_one_owner(self, store):
        TraderRepository.upsert(Trader(id="a", name="A"))
        TraderRepository.upsert(Trader(owner_id="other", id="z", name="Z"))
        TransactionRepository.upsert(_tx("x1"))
        ProductTypeRepository.upsert(ProductType(id="gold", name="Gold"))

        snapshot = SnapshotRepository.load("local")

        assert [t.id for t in snapshot.traders] == ["a"]
        assert [tx.id for tx in snapshot.transactions] == ["x1"]
        assert [pt.id for pt in snapshot.product_types] == ["gold"]

    @pytest.mark.parametrize("owner_id", ["local", "fresh-owner"])
    def test_empty_store(self, store, owner_id):
        snapshot = SnapshotRepository.load(owner_id)

        assert snapshot.traders == []
        assert snapshot.transactions == []
        assert snapshot.product_types == []

    def test_load_with_shared_session(self, store):
        TraderRepository.upsert(Trader(id="a", name="A"))

        with db_engine.get_session() as session:
            snapshot = SnapshotRepository.load("local", session=session)

        assert [t.name for t in snapshot.traders] == ["A"]
