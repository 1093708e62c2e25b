"""
ProductType model - a unit-tracked commodity (gold by gram, coins by count).
"""

from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field


class ProductUnit(str, Enum):
    GRAM = "gram"
    COUNT = "adet"


class ProductType(SQLModel, table=True):
    """
    Commodity catalog entry.
    current_price is only a suggestion at entry time; balances never use it.
    """
    owner_id: str = Field(default="local", primary_key=True)
    id: str = Field(primary_key=True)
    name: str
    unit: str = ProductUnit.GRAM.value  # "gram" or "adet"
    current_price: float = 0.0
    display_order: Optional[int] = Field(default=None)  # Absent values sort last


# Seeded into an empty store
DEFAULT_PRODUCT_TYPES = [
    {'id': 'altın', 'name': 'Altın', 'unit': ProductUnit.GRAM.value, 'current_price': 1850.0, 'display_order': 1},
    {'id': 'gümüş', 'name': 'Gümüş', 'unit': ProductUnit.GRAM.value, 'current_price': 25.0, 'display_order': 2},
    {'id': 'çeyrek', 'name': 'Çeyrek Altın', 'unit': ProductUnit.COUNT.value, 'current_price': 4800.0, 'display_order': 3},
]
