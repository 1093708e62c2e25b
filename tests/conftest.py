"""
Shared fixtures: transaction builders and a throwaway SQLite store.
"""

from datetime import datetime
from itertools import count

import pytest

import db_engine
from config import reload_settings
from models import Transaction, Trader, ProductType

_ids = count(1)


def make_tx(transaction_type, trader_id="t1", amount=0.0, product_type=None, quantity=None,
            when=None, **extra):
    """Build an unsaved transaction with sensible defaults."""
    return Transaction(
        id=extra.pop('id', f"tx{next(_ids)}"),
        trader_id=trader_id,
        transaction_date=when or datetime(2024, 1, 1, 12, 0),
        transaction_type=getattr(transaction_type, 'value', transaction_type),
        amount=amount,
        product_type=product_type,
        quantity=quantity,
        **extra
    )


@pytest.fixture
def tx_factory():
    return make_tx


@pytest.fixture
def catalog():
    return [
        ProductType(id="gold", name="Gold", unit="gram", current_price=1850.0, display_order=2),
        ProductType(id="silver", name="Silver", unit="gram", current_price=25.0, display_order=1),
        ProductType(id="coin", name="Quarter Coin", unit="adet", current_price=4800.0),
    ]


@pytest.fixture
def traders():
    return [
        Trader(id="t1", name="Ayşe Kuyumcu"),
        Trader(id="t2", name="Mehmet Toptan"),
        Trader(id="t3", name="Idle Trader"),
    ]


@pytest.fixture
def store(tmp_path, monkeypatch):
    """Point the engine at a fresh SQLite file and create the tables."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'ledger.db'}")
    monkeypatch.setenv("DEFAULT_OWNER_ID", "local")
    reload_settings()
    db_engine.reset_engine()
    db_engine.init_db()
    yield db_engine.get_engine()
    db_engine.reset_engine()
    reload_settings()
