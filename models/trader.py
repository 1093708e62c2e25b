"""
Trader model - a counterparty the business buys from, sells to, or lends to.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class Trader(SQLModel, table=True):
    """
    Identity record for a counterparty.
    Balances are never stored here; they are always derived from transactions.
    """
    owner_id: str = Field(default="local", primary_key=True)
    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    phone: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    last_transaction_date: datetime = Field(default_factory=datetime.now)
