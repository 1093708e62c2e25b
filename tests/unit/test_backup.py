"""
Tests for JSON backup export, import and restore.
"""

import json
import logging
from datetime import datetime

import pytest
from pydantic import ValidationError

from models import LedgerSnapshot, ProductType, Trader, Transaction, TransactionType
from repositories import SnapshotRepository, TraderRepository
from services.backup import export_snapshot, import_snapshot, restore_snapshot


@pytest.fixture
def snapshot():
    return LedgerSnapshot(
        traders=[
            Trader(id="t1", name="Ayşe", phone="555-0100", last_transaction_date=datetime(2024, 3, 1, 10, 0)),
        ],
        transactions=[
            Transaction(
                id="x1",
                trader_id="t1",
                transaction_date=datetime(2024, 3, 1, 10, 0),
                transaction_type=TransactionType.GOODS_PURCHASED.value,
                product_type="gold",
                quantity=2.5,
                unit_price=40.0,
                amount=100.0,
                notes="first lot"
            ),
            Transaction(
                id="x2",
                trader_id="t1",
                transaction_date=datetime(2024, 3, 2, 9, 0),
                transaction_type=TransactionType.CASH_PAYMENT_MADE.value,
                amount=60.0,
                correlation_id=None
            ),
        ],
        product_types=[
            ProductType(id="gold", name="Gold", unit="gram", current_price=1850.0, display_order=1),
        ]
    )


class TestExport:

    def test_uses_camel_case_keys_and_type_ids(self, snapshot):
        data = json.loads(export_snapshot(snapshot))

        assert set(data) == {"traders", "transactions", "productTypes"}
        first = data["transactions"][0]
        assert first["traderId"] == "t1"
        assert first["type"] == "mal_alimi"
        assert first["productType"] == "gold"
        assert first["date"] == "2024-03-01T10:00:00"
        assert data["productTypes"][0]["currentPrice"] == 1850.0
        assert data["traders"][0]["lastTransactionDate"] == "2024-03-01T10:00:00"

    def test_absent_fields_are_omitted(self, snapshot):
        data = json.loads(export_snapshot(snapshot))

        assert "productType" not in data["transactions"][1]
        assert "correlationId" not in data["transactions"][1]


class TestImport:

    def test_export_then_import(self, snapshot):
        restored = import_snapshot(export_snapshot(snapshot), owner_id="alice")

        tx = restored.transactions[0]
        assert tx.owner_id == "alice"
        assert tx.transaction_date == datetime(2024, 3, 1, 10, 0)
        assert tx.quantity == 2.5
        assert tx.unit_price == 40.0
        assert tx.notes == "first lot"
        assert restored.traders[0].phone == "555-0100"
        assert restored.product_types[0].display_order == 1

    def test_legacy_payload_is_accepted(self, caplog):
        payload = json.dumps({
            "traders": [{
                "id": "t1",
                "name": "Old Trader",
                "moneyBalance": 1234.5,
                "productBalances": {"gold": 2},
                "lastTransactionDate": "yesterday"
            }],
            "transactions": [{
                "id": "x1",
                "traderId": "t1",
                "date": "2024-03-01T10:00:00.000Z",
                "type": "tahsilat",
                "amount": 50,
                "notes": None
            }]
        })

        before = datetime.now()
        with caplog.at_level(logging.WARNING):
            restored = import_snapshot(payload)

        trader = restored.traders[0]
        assert not hasattr(trader, "money_balance")
        assert trader.last_transaction_date >= before
        assert "trader t1" in caplog.text

        tx = restored.transactions[0]
        assert tx.notes == ""
        assert tx.transaction_date.tzinfo is None
        assert restored.product_types == []

    @pytest.mark.parametrize("number", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_numbers_are_rejected(self, number):
        payload = (
            '{"transactions": [{"id": "x1", "traderId": "t1", "type": "tahsilat", '
            f'"amount": {number}}}]}}'
        )

        with pytest.raises(ValidationError):
            import_snapshot(payload)

    def test_non_finite_quantity_is_rejected(self):
        payload = json.dumps({"transactions": [{
            "id": "x1", "traderId": "t1", "type": "mal_alimi", "productType": "gold", "quantity": float("nan")
        }]})

        with pytest.raises(ValidationError):
            import_snapshot(payload)

    def test_missing_required_field_is_rejected(self):
        payload = json.dumps({"transactions": [{"id": "x1", "traderId": "t1"}]})

        with pytest.raises(ValidationError):
            import_snapshot(payload)


class TestRestore:

    def test_restore_writes_every_record(self, store, snapshot):
        written = restore_snapshot("alice", snapshot)

        assert written == 4
        loaded = SnapshotRepository.load("alice")
        assert [t.id for t in loaded.traders] == ["t1"]
        assert sorted(tx.id for tx in loaded.transactions) == ["x1", "x2"]
        assert SnapshotRepository.load("local").traders == []

    def test_restore_replaces_existing_records(self, store, snapshot):
        TraderRepository.upsert(Trader(owner_id="alice", id="t1", name="Stale"))

        restore_snapshot("alice", snapshot)
        restore_snapshot("alice", import_snapshot(export_snapshot(snapshot)))

        loaded = SnapshotRepository.load("alice")
        assert [t.name for t in loaded.traders] == ["Ayşe"]
        assert len(loaded.transactions) == 2
