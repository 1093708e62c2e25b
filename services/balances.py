"""
Balance engine: folds a trader's transactions into money and commodity balances.

Positive money balance means the trader owes the business; positive commodity
balance means the trader owes the business that commodity. Every function here
is pure: inputs are never mutated and nothing is read from the store.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

from models import Transaction, TransactionType, ProductType
from services.common import normalize_cutoff, round_money, round_quantity, sort_product_types, to_naive_local

logger = logging.getLogger(__name__)


# TransactionType -> (money sign, quantity sign). A quantity sign of 0 means
# the type never touches commodity balances.
BALANCE_EFFECTS: Dict[TransactionType, Tuple[int, int]] = {
    TransactionType.GOODS_PURCHASED: (-1, +1),
    TransactionType.GOODS_SOLD: (+1, -1),
    TransactionType.CASH_PAYMENT_MADE: (+1, 0),
    TransactionType.CASH_COLLECTED: (-1, 0),
    TransactionType.CASH_LOAN_GIVEN: (+1, 0),
    TransactionType.CASH_COLLECTED_ALT: (-1, 0),
    TransactionType.PAID_WITH_GOODS: (+1, +1),
    TransactionType.RECEIVED_GOODS_AS_PAYMENT: (-1, -1),
    TransactionType.LENT_VIA_GOODS: (+1, +1),
    TransactionType.BORROWED_VIA_GOODS: (-1, -1),
}


@dataclass
class TraderBalance:
    """Derived position with one trader."""
    money_balance: float = 0.0
    product_balances: Dict[str, float] = field(default_factory=dict)

    @property
    def is_settled(self) -> bool:
        """True when neither money nor any commodity is outstanding."""
        return self.money_balance == 0 and all(v == 0 for v in self.product_balances.values())


AsOf = Optional[Union[datetime, date]]


def _finite_or_none(value: Optional[float], tx_id: str, field_name: str) -> Optional[float]:
    """Treat NaN and infinite values as missing, with a warning."""
    if value is None or math.isfinite(value):
        return value
    logger.warning(f"Ignoring non-finite {field_name} {value!r} on transaction {tx_id}")
    return None


def compute_balances(
    transactions: Iterable[Transaction],
    trader_id: str,
    as_of: AsOf = None
) -> TraderBalance:
    """
    Compute a trader's balances from the full transaction collection.

    Args:
        transactions: Every known transaction; filtered here to trader_id
        trader_id: Trader whose position is wanted
        as_of: Optional inclusive cutoff. A date covers the whole day.

    Returns:
        TraderBalance with money rounded to 2 and quantities to 3 decimals
    """
    cutoff = normalize_cutoff(as_of)

    money_balance = 0.0
    product_balances: Dict[str, float] = {}

    for tx in transactions:
        if tx.trader_id != trader_id:
            continue
        if cutoff is not None and to_naive_local(tx.transaction_date) > cutoff:
            continue

        effect = BALANCE_EFFECTS.get(tx.transaction_type)
        if effect is None:
            logger.debug(f"Skipping transaction {tx.id} with unknown type {tx.transaction_type!r}")
            continue

        money_sign, quantity_sign = effect
        amount = _finite_or_none(tx.amount, tx.id, "amount") or 0.0
        money_balance += money_sign * amount

        quantity = _finite_or_none(tx.quantity, tx.id, "quantity")
        if quantity_sign and tx.product_type and quantity:
            product_balances[tx.product_type] = (
                product_balances.get(tx.product_type, 0.0) + quantity_sign * quantity
            )

    return TraderBalance(
        money_balance=round_money(money_balance),
        product_balances={pid: round_quantity(qty) for pid, qty in product_balances.items()}
    )


def compute_balance_history(
    transactions: Iterable[Transaction],
    trader_id: str
) -> List[Tuple[Transaction, TraderBalance]]:
    """
    Running position after each of a trader's transactions, oldest first.

    Each balance is the as-of balance at that transaction's timestamp, so
    transactions sharing a timestamp report the same combined position.
    """
    own = [tx for tx in transactions if tx.trader_id == trader_id]
    own.sort(key=lambda tx: to_naive_local(tx.transaction_date))
    return [(tx, compute_balances(own, trader_id, to_naive_local(tx.transaction_date))) for tx in own]


def visible_product_balances(
    product_balances: Dict[str, float],
    product_types: Iterable[ProductType]
) -> List[Tuple[ProductType, float]]:
    """
    Join a balance map against the commodity catalog for display.

    Balances under ids missing from the catalog are dropped, as are zero
    balances. Result follows catalog display order.
    """
    rows = []
    for product_type in sort_product_types(product_types):
        balance = product_balances.get(product_type.id, 0.0)
        if balance != 0:
            rows.append((product_type, balance))
    return rows


def split_product_balances(product_balances: Dict[str, float]) -> Tuple[Dict[str, float], Dict[str, float]]:
    """
    Separate commodity balances into receivables and debts.

    Returns:
        (receivables, debts); debts are reported as positive magnitudes
    """
    receivables = {}
    debts = {}
    for product_id, balance in product_balances.items():
        if balance > 0:
            receivables[product_id] = balance
        elif balance < 0:
            debts[product_id] = abs(balance)
    return receivables, debts
