"""
Tests for the SQLite column migrations.
"""

import sqlite3

import pytest

import migrate
from config import reload_settings


@pytest.fixture
def legacy_db(tmp_path, monkeypatch):
    """A database created before correlation ids and display order existed."""
    db_file = tmp_path / "legacy.db"
    conn = sqlite3.connect(db_file)
    conn.execute('CREATE TABLE "transaction" (owner_id VARCHAR, id VARCHAR, trader_id VARCHAR)')
    conn.execute('CREATE TABLE "producttype" (owner_id VARCHAR, id VARCHAR, name VARCHAR)')
    conn.commit()
    conn.close()

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    reload_settings()
    yield db_file
    monkeypatch.undo()
    reload_settings()


def _columns(db_file, table):
    conn = sqlite3.connect(db_file)
    try:
        return [row[1] for row in conn.execute(f'PRAGMA table_info("{table}")')]
    finally:
        conn.close()


class TestMigrations:

    def test_adds_missing_columns(self, legacy_db):
        migrate.run_all_migrations()

        assert "correlation_id" in _columns(legacy_db, "transaction")
        assert "display_order" in _columns(legacy_db, "producttype")

    def test_second_run_is_a_no_op(self, legacy_db, capsys):
        migrate.migrate_transaction_add_correlation_id()
        migrate.migrate_transaction_add_correlation_id()

        assert "already exists" in capsys.readouterr().out
        assert _columns(legacy_db, "transaction").count("correlation_id") == 1

    def test_missing_database_file(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'absent.db'}")
        reload_settings()

        migrate.migrate_producttype_add_display_order()

        assert "Nothing to migrate" in capsys.readouterr().out
        assert not (tmp_path / "absent.db").exists()
