"""
Repositories package for the trader ledger.
Provides the data access layer for all store operations.
"""

from repositories.errors import StoreError
from repositories.trader_repository import TraderRepository
from repositories.transaction_repository import TransactionRepository
from repositories.product_type_repository import ProductTypeRepository
from repositories.snapshot_repository import SnapshotRepository

__all__ = [
    'StoreError',
    'TraderRepository',
    'TransactionRepository',
    'ProductTypeRepository',
    'SnapshotRepository',
]
