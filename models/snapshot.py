"""
LedgerSnapshot - the full read the store hands to the core.
"""

from dataclasses import dataclass, field
from typing import List

from models.trader import Trader
from models.transaction import Transaction
from models.product_type import ProductType


@dataclass
class LedgerSnapshot:
    """Immutable-by-convention view of one owner's traders, transactions and catalog."""
    traders: List[Trader] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)
    product_types: List[ProductType] = field(default_factory=list)
