"""
Transaction model - one immutable fact in a trader's history.
"""

from enum import Enum
from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class TransactionType(str, Enum):
    """
    The ten kinds of transaction.
    Values are the persisted ids and must not change.
    """
    GOODS_PURCHASED = "mal_alimi"
    GOODS_SOLD = "mal_satisi"
    CASH_PAYMENT_MADE = "odeme_yapildi"
    CASH_COLLECTED = "tahsilat"
    CASH_LOAN_GIVEN = "nakit_borc"
    CASH_COLLECTED_ALT = "nakit_tahsilat"
    PAID_WITH_GOODS = "urun_ile_odeme_yapildi"
    RECEIVED_GOODS_AS_PAYMENT = "urun_ile_odeme_alindi"
    LENT_VIA_GOODS = "urun_ile_borc_verme"
    BORROWED_VIA_GOODS = "urun_ile_borc_alma"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    TransactionType.GOODS_PURCHASED: "Goods purchased",
    TransactionType.GOODS_SOLD: "Goods sold",
    TransactionType.CASH_PAYMENT_MADE: "Cash payment made",
    TransactionType.CASH_COLLECTED: "Cash collected (debt increased)",
    TransactionType.CASH_LOAN_GIVEN: "Cash loan given",
    TransactionType.CASH_COLLECTED_ALT: "Cash collected (debt increased)",
    TransactionType.PAID_WITH_GOODS: "Paid with goods (debt decreased)",
    TransactionType.RECEIVED_GOODS_AS_PAYMENT: "Received goods as payment (receivable decreased)",
    TransactionType.LENT_VIA_GOODS: "Lent via goods (receivable created)",
    TransactionType.BORROWED_VIA_GOODS: "Borrowed via goods (debt created)",
}

# Types whose records carry a product_type and quantity
PRODUCT_BEARING_TYPES = frozenset({
    TransactionType.GOODS_PURCHASED,
    TransactionType.GOODS_SOLD,
    TransactionType.PAID_WITH_GOODS,
    TransactionType.RECEIVED_GOODS_AS_PAYMENT,
    TransactionType.LENT_VIA_GOODS,
    TransactionType.BORROWED_VIA_GOODS,
})


class Transaction(SQLModel, table=True):
    """Represents one transaction with a trader. Edits replace the whole record by id."""
    owner_id: str = Field(default="local", primary_key=True)
    id: str = Field(primary_key=True)
    trader_id: str = Field(index=True)
    transaction_date: datetime = Field(default_factory=datetime.now, index=True)
    transaction_type: str  # TransactionType value, e.g. "mal_alimi"
    product_type: Optional[str] = Field(default=None)  # ProductType id
    quantity: Optional[float] = Field(default=None)
    unit_price: Optional[float] = Field(default=None)  # Only meaningful for purchases and sales
    amount: float = 0.0  # Non-negative magnitude; direction comes from transaction_type
    notes: str = ""
    correlation_id: Optional[str] = Field(default=None, index=True)  # Links the halves of a debt conversion
