"""
JSON backup of a ledger snapshot.

The payload keeps the camelCase keys and transaction type ids of the
original data files so older exports can still be imported. Dates that
cannot be parsed are replaced by the current time, never rejected; NaN and
infinite numbers are rejected like any other malformed value.
"""

import logging
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from models import LedgerSnapshot, ProductType, Trader, Transaction
from repositories import ProductTypeRepository, TraderRepository, TransactionRepository
from services.common import parse_date

logger = logging.getLogger(__name__)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore', allow_inf_nan=False)


class ProductTypePayload(_Payload):
    id: str
    name: str
    unit: str = "gram"
    current_price: float = Field(default=0.0, alias="currentPrice")
    order: Optional[int] = None


class TraderPayload(_Payload):
    """Cached moneyBalance / productBalances of legacy exports are dropped."""
    id: str
    name: str
    phone: Optional[str] = None
    notes: Optional[str] = None
    last_transaction_date: datetime = Field(default_factory=datetime.now, alias="lastTransactionDate")

    @field_validator('last_transaction_date', mode='before')
    @classmethod
    def _tolerant_date(cls, value, info: ValidationInfo):
        return parse_date(value, context=f"trader {info.data.get('id')}")


class TransactionPayload(_Payload):
    id: str
    trader_id: str = Field(alias="traderId")
    transaction_date: datetime = Field(default_factory=datetime.now, alias="date")
    transaction_type: str = Field(alias="type")
    product_type: Optional[str] = Field(default=None, alias="productType")
    quantity: Optional[float] = None
    unit_price: Optional[float] = Field(default=None, alias="unitPrice")
    amount: float = 0.0
    notes: str = ""
    correlation_id: Optional[str] = Field(default=None, alias="correlationId")

    @field_validator('transaction_date', mode='before')
    @classmethod
    def _tolerant_date(cls, value, info: ValidationInfo):
        return parse_date(value, context=f"transaction {info.data.get('id')}")

    @field_validator('notes', mode='before')
    @classmethod
    def _none_as_empty(cls, value):
        return value or ""


class SnapshotPayload(_Payload):
    traders: List[TraderPayload] = Field(default_factory=list)
    transactions: List[TransactionPayload] = Field(default_factory=list)
    product_types: List[ProductTypePayload] = Field(default_factory=list, alias="productTypes")


def export_snapshot(snapshot: LedgerSnapshot) -> str:
    """
    Serialize a snapshot to indented JSON.

    Args:
        snapshot: Snapshot to export

    Returns:
        JSON text with camelCase keys and ISO-8601 dates
    """
    payload = SnapshotPayload(
        traders=[
            TraderPayload(
                id=t.id,
                name=t.name,
                phone=t.phone,
                notes=t.notes,
                last_transaction_date=t.last_transaction_date
            )
            for t in snapshot.traders
        ],
        transactions=[
            TransactionPayload(
                id=tx.id,
                trader_id=tx.trader_id,
                transaction_date=tx.transaction_date,
                transaction_type=str(getattr(tx.transaction_type, 'value', tx.transaction_type)),
                product_type=tx.product_type,
                quantity=tx.quantity,
                unit_price=tx.unit_price,
                amount=tx.amount,
                notes=tx.notes,
                correlation_id=tx.correlation_id
            )
            for tx in snapshot.transactions
        ],
        product_types=[
            ProductTypePayload(
                id=pt.id,
                name=pt.name,
                unit=pt.unit,
                current_price=pt.current_price,
                order=pt.display_order
            )
            for pt in snapshot.product_types
        ]
    )
    return payload.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def import_snapshot(payload: str, owner_id: str = "local") -> LedgerSnapshot:
    """
    Parse exported JSON back into a snapshot.

    Args:
        payload: JSON text produced by export_snapshot or an older export
        owner_id: Store partition the records will belong to

    Returns:
        LedgerSnapshot of unsaved records

    Raises:
        pydantic.ValidationError: if the JSON is malformed or a required field is missing
    """
    data = SnapshotPayload.model_validate_json(payload)

    snapshot = LedgerSnapshot(
        traders=[
            Trader(owner_id=owner_id, **t.model_dump())
            for t in data.traders
        ],
        transactions=[
            Transaction(owner_id=owner_id, **tx.model_dump())
            for tx in data.transactions
        ],
        product_types=[
            ProductType(
                owner_id=owner_id,
                id=pt.id,
                name=pt.name,
                unit=pt.unit,
                current_price=pt.current_price,
                display_order=pt.order
            )
            for pt in data.product_types
        ]
    )
    logger.info(
        f"Imported {len(snapshot.traders)} traders, {len(snapshot.transactions)} transactions "
        f"and {len(snapshot.product_types)} product types"
    )
    return snapshot


def restore_snapshot(owner_id: str, snapshot: LedgerSnapshot) -> int:
    """
    Write every record of a snapshot into the store under owner_id.
    Existing records with the same ids are replaced.

    Returns:
        Number of records written
    """
    written = 0
    for product_type in snapshot.product_types:
        product_type.owner_id = owner_id
        ProductTypeRepository.upsert(product_type)
        written += 1
    for trader in snapshot.traders:
        trader.owner_id = owner_id
        TraderRepository.upsert(trader)
        written += 1
    for transaction in snapshot.transactions:
        transaction.owner_id = owner_id
        TransactionRepository.upsert(transaction)
        written += 1
    logger.info(f"Restored {written} records for {owner_id}")
    return written
