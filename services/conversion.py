"""
Debt conversion composer.

A conversion settles a commodity debt against a commodity receivable with a
multiplier, and is recorded as two linked transactions with no money effect.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Tuple

from models import Transaction, TransactionType
from services.common import generate_id, round_money

logger = logging.getLogger(__name__)


@dataclass
class TransactionDraft:
    """A transaction that has not been given an id or written to the store yet."""
    trader_id: str
    transaction_date: datetime
    transaction_type: str
    amount: float = 0.0
    product_type: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    notes: str = ""
    correlation_id: Optional[str] = None

    def to_transaction(self, transaction_id: Optional[str] = None, owner_id: Optional[str] = None) -> Transaction:
        """Materialize the draft, generating an id unless one is supplied."""
        values = asdict(self)
        if owner_id is not None:
            values['owner_id'] = owner_id
        return Transaction(id=transaction_id or generate_id(), **values)


def calculate_receivable_quantity(debt_quantity: float, multiplier: float) -> float:
    """Receivable quantity a conversion settles: debt x multiplier, rounded to 2 decimals."""
    return round_money(debt_quantity * multiplier)


def compose_conversion(
    trader_id: str,
    debt_product_id: str,
    debt_quantity: float,
    receivable_product_id: str,
    receivable_quantity: float,
    multiplier: float,
    when: Optional[datetime] = None,
    correlation_id: Optional[str] = None
) -> Tuple[TransactionDraft, TransactionDraft]:
    """
    Build the two drafts that record a debt conversion.

    The composer does not check receivable_quantity against
    debt_quantity x multiplier; the multiplier only ends up in the notes.

    Args:
        trader_id: Trader both drafts belong to
        debt_product_id: Commodity the business owes
        debt_quantity: Quantity of that debt being settled
        receivable_product_id: Commodity the trader owes
        receivable_quantity: Quantity of the receivable being given up
        multiplier: Conversion rate, recorded for humans only
        when: Shared timestamp (default: now)
        correlation_id: Shared link id (default: freshly generated)

    Returns:
        (paid_with_goods draft, received_goods_as_payment draft)
    """
    when = when or datetime.now()
    correlation_id = correlation_id or generate_id()

    debt_side = TransactionDraft(
        trader_id=trader_id,
        transaction_date=when,
        transaction_type=TransactionType.PAID_WITH_GOODS.value,
        product_type=debt_product_id,
        quantity=debt_quantity,
        amount=0.0,
        notes=(
            f"Debt conversion: {debt_quantity} {debt_product_id} debt settled against "
            f"{receivable_quantity} {receivable_product_id} (multiplier: {multiplier})"
        ),
        correlation_id=correlation_id,
    )
    receivable_side = TransactionDraft(
        trader_id=trader_id,
        transaction_date=when,
        transaction_type=TransactionType.RECEIVED_GOODS_AS_PAYMENT.value,
        product_type=receivable_product_id,
        quantity=receivable_quantity,
        amount=0.0,
        notes=(
            f"Debt conversion: {receivable_quantity} {receivable_product_id} receivable settled against "
            f"{debt_quantity} {debt_product_id} (multiplier: {multiplier})"
        ),
        correlation_id=correlation_id,
    )

    logger.debug(f"Composed debt conversion {correlation_id} for trader {trader_id}")
    return debt_side, receivable_side
