"""
Test suite for the trader ledger.

Contains:
- tests/unit/          : Unit tests for the balance engine, services and repositories
"""
