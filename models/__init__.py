"""
Database models for the trader ledger.
All SQLModel table definitions are centralized here.
"""

from models.trader import Trader
from models.transaction import Transaction, TransactionType, PRODUCT_BEARING_TYPES
from models.product_type import ProductType, ProductUnit, DEFAULT_PRODUCT_TYPES
from models.snapshot import LedgerSnapshot

__all__ = [
    'Trader',
    'Transaction',
    'TransactionType',
    'PRODUCT_BEARING_TYPES',
    'ProductType',
    'ProductUnit',
    'DEFAULT_PRODUCT_TYPES',
    'LedgerSnapshot',
]
