"""
Database migration script for the trader ledger.
Adds columns introduced after the first schema to existing SQLite databases.
"""

import sqlite3
import os

from config import get_settings


def _db_file() -> str:
    url = get_settings().database_url
    return url.replace("sqlite:///", "", 1)


def _add_column_if_missing(table: str, column: str, ddl: str):
    """Add a column to a table unless it already exists."""
    db_file = _db_file()
    if not os.path.exists(db_file):
        print(f"Database {db_file} does not exist. Nothing to migrate.")
        return

    conn = sqlite3.connect(db_file)
    cursor = conn.cursor()

    try:
        cursor.execute(f'PRAGMA table_info("{table}")')
        columns = [col[1] for col in cursor.fetchall()]

        if not columns:
            print(f"✓ Table '{table}' does not exist yet; init_db will create it.")
        elif column not in columns:
            print(f"Adding '{column}' column to {table} table...")
            cursor.execute(f'ALTER TABLE "{table}" ADD COLUMN {column} {ddl}')
            conn.commit()
            print(f"✓ Added '{column}' column successfully.")
        else:
            print(f"✓ Column '{column}' already exists in {table} table.")

    except sqlite3.OperationalError as e:
        print(f"Error during migration: {e}")
        conn.rollback()
    finally:
        conn.close()


def migrate_transaction_add_correlation_id():
    """Add correlation_id so debt conversion halves can be matched up."""
    _add_column_if_missing("transaction", "correlation_id", "VARCHAR")


def migrate_producttype_add_display_order():
    """Add display_order for custom commodity ordering."""
    _add_column_if_missing("producttype", "display_order", "INTEGER")


def run_all_migrations():
    """Run all pending migrations."""
    print("=" * 60)
    print("Trader Ledger Database Migration")
    print("=" * 60)

    migrate_transaction_add_correlation_id()
    migrate_producttype_add_display_order()

    print("=" * 60)
    print("Migration complete!")
    print("=" * 60)


if __name__ == "__main__":
    run_all_migrations()
