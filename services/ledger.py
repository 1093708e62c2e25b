"""
Ledger service: the user actions that write to the store.

Each action is a sequence of independent store writes. Writes that belong
together (a transaction and its trader's last_transaction_date, the two
halves of a debt conversion) are compensated when a later write fails, so
the store is never left holding half of an action.
"""

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union

from config import get_settings
from models import (
    DEFAULT_PRODUCT_TYPES,
    LedgerSnapshot,
    PRODUCT_BEARING_TYPES,
    ProductType,
    Trader,
    Transaction,
    TransactionType,
)
from repositories import (
    ProductTypeRepository,
    SnapshotRepository,
    StoreError,
    TraderRepository,
    TransactionRepository,
)
from services.balances import TraderBalance, compute_balances
from services.common import generate_id
from services.conversion import compose_conversion

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for rejected ledger actions."""


class TraderNotFoundError(LedgerError):
    pass


class ProductTypeInUseError(LedgerError):
    """The commodity is still referenced by at least one transaction."""


_CONVERSION_SIDES = (
    TransactionType.PAID_WITH_GOODS.value,
    TransactionType.RECEIVED_GOODS_AS_PAYMENT.value,
)


def describe_transaction_type(transaction_type: str) -> str:
    """Human-readable label for a stored type id; unknown ids are returned as-is."""
    try:
        return TransactionType(transaction_type).label
    except ValueError:
        return str(transaction_type)



def find_incomplete_conversions(transactions: List[Transaction]) -> Dict[str, List[Transaction]]:
    """
    Reconciliation sweep over debt conversions.

    Groups transactions by correlation_id and returns the groups that are not
    exactly one paid_with_goods plus one received_goods_as_payment.

    Args:
        transactions: Transactions to inspect

    Returns:
        Mapping of correlation id to the transactions found for it
    """
    groups: Dict[str, List[Transaction]] = defaultdict(list)
    for tx in transactions:
        if tx.correlation_id:
            groups[tx.correlation_id].append(tx)

    incomplete = {}
    for correlation_id, members in groups.items():
        kinds = sorted(str(getattr(tx.transaction_type, 'value', tx.transaction_type)) for tx in members)
        if kinds != sorted(_CONVERSION_SIDES):
            incomplete[correlation_id] = members
    return incomplete


class LedgerService:
    """
    Store-backed actions for one owner.
    Balances are always re-derived from the store; nothing is cached.
    """

    def __init__(self, owner_id: Optional[str] = None):
        self.owner_id = owner_id or get_settings().default_owner_id

    # ==================== Reads ====================

    def snapshot(self) -> LedgerSnapshot:
        """Load the full ledger and flag half-written debt conversions."""
        snapshot = SnapshotRepository.load(self.owner_id)
        for correlation_id, members in find_incomplete_conversions(snapshot.transactions).items():
            ids = ", ".join(tx.id for tx in members)
            logger.warning(f"Incomplete debt conversion {correlation_id}: found [{ids}]")
        return snapshot

    def trader_balance(self, trader_id: str, as_of: Optional[Union[datetime, date]] = None) -> TraderBalance:
        """Balance of a single trader, optionally as it stood on a date."""
        transactions = TransactionRepository.get_by_trader(self.owner_id, trader_id)
        return compute_balances(transactions, trader_id, as_of)

    # ==================== Traders ====================

    def add_trader(self, name: str, phone: Optional[str] = None, notes: Optional[str] = None) -> Trader:
        trader = Trader(
            owner_id=self.owner_id,
            id=generate_id(),
            name=name,
            phone=phone,
            notes=notes,
            last_transaction_date=datetime.now()
        )
        stored = TraderRepository.upsert(trader)
        logger.info(f"Added trader {stored.id} ({stored.name})")
        return stored

    def update_trader(
        self,
        trader_id: str,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Trader:
        """Replace a trader's identity fields; last_transaction_date is preserved."""
        existing = TraderRepository.get_by_id(self.owner_id, trader_id)
        if existing is None:
            raise TraderNotFoundError(f"Trader {trader_id} does not exist")

        updated = Trader(
            owner_id=self.owner_id,
            id=trader_id,
            name=name if name is not None else existing.name,
            phone=phone if phone is not None else existing.phone,
            notes=notes if notes is not None else existing.notes,
            last_transaction_date=existing.last_transaction_date
        )
        return TraderRepository.upsert(updated)

    def delete_trader(self, trader_id: str) -> bool:
        """Delete a trader together with its whole transaction history."""
        deleted = TraderRepository.delete(self.owner_id, trader_id)
        if deleted:
            logger.info(f"Deleted trader {trader_id} and its transactions")
        return deleted

    # ==================== Transactions ====================

    def add_transaction(self, transaction: Transaction) -> Transaction:
        """Record a new transaction, assigning an id when it has none."""
        if not getattr(transaction, 'id', None):
            transaction.id = generate_id()
        transaction.owner_id = self.owner_id
        return self._save_transaction(transaction)

    def update_transaction(self, transaction: Transaction) -> Transaction:
        """Replace a stored transaction by id."""
        transaction.owner_id = self.owner_id
        return self._save_transaction(transaction)

    def _save_transaction(self, transaction: Transaction) -> Transaction:
        """
        Write a transaction, then touch its trader.
        If the trader update fails the transaction write is undone.
        """
        if TraderRepository.get_by_id(self.owner_id, transaction.trader_id) is None:
            raise TraderNotFoundError(f"Trader {transaction.trader_id} does not exist")

        if transaction.transaction_type in PRODUCT_BEARING_TYPES and not (
            transaction.product_type and transaction.quantity
        ):
            logger.debug(
                f"Transaction {transaction.id} ({describe_transaction_type(transaction.transaction_type)}) "
                f"has no commodity; only its amount counts"
            )

        previous = TransactionRepository.get_by_id(self.owner_id, transaction.id)
        stored = TransactionRepository.upsert(transaction)

        try:
            TraderRepository.touch(self.owner_id, stored.trader_id, datetime.now())
        except StoreError:
            logger.warning(f"Rolling back transaction {stored.id} after trader update failed")
            self._restore_transaction(stored.id, previous)
            raise

        logger.info(
            f"Recorded {describe_transaction_type(stored.transaction_type)} {stored.id} "
            f"for trader {stored.trader_id}"
        )
        return stored

    def _restore_transaction(self, transaction_id: str, previous: Optional[Transaction]):
        try:
            if previous is None:
                TransactionRepository.delete(self.owner_id, transaction_id)
            else:
                TransactionRepository.upsert(previous)
        except StoreError:
            logger.error(f"Compensation failed for transaction {transaction_id}; store may hold a partial write")
            raise

    def delete_transaction(self, transaction_id: str) -> bool:
        """Permanently delete a transaction. There is no undo."""
        return TransactionRepository.delete(self.owner_id, transaction_id)

    # ==================== Debt conversion ====================

    def convert_debt(
        self,
        trader_id: str,
        debt_product_id: str,
        debt_quantity: float,
        receivable_product_id: str,
        receivable_quantity: float,
        multiplier: float
    ) -> Tuple[Transaction, Transaction]:
        """
        Record a debt conversion as two linked transactions.

        Both are written in order, then the trader is touched. If a later
        write fails the earlier ones are deleted again and the store error
        is re-raised.

        Returns:
            (paid_with_goods transaction, received_goods_as_payment transaction)
        """
        if TraderRepository.get_by_id(self.owner_id, trader_id) is None:
            raise TraderNotFoundError(f"Trader {trader_id} does not exist")

        debt_draft, receivable_draft = compose_conversion(
            trader_id,
            debt_product_id,
            debt_quantity,
            receivable_product_id,
            receivable_quantity,
            multiplier
        )

        first = TransactionRepository.upsert(debt_draft.to_transaction(owner_id=self.owner_id))
        try:
            second = TransactionRepository.upsert(receivable_draft.to_transaction(owner_id=self.owner_id))
        except StoreError:
            logger.warning(f"Rolling back first half {first.id} of debt conversion {first.correlation_id}")
            self._restore_transaction(first.id, None)
            raise

        try:
            TraderRepository.touch(self.owner_id, trader_id, datetime.now())
        except StoreError:
            logger.warning(f"Rolling back debt conversion {first.correlation_id} after trader update failed")
            self._restore_transaction(second.id, None)
            self._restore_transaction(first.id, None)
            raise

        logger.info(
            f"Converted {debt_quantity} {debt_product_id} debt against "
            f"{receivable_quantity} {receivable_product_id} for trader {trader_id}"
        )
        return first, second

    # ==================== Product types ====================

    def save_product_type(self, product_type: ProductType) -> ProductType:
        """Insert or replace a commodity, assigning an id when it has none."""
        if not getattr(product_type, 'id', None):
            product_type.id = generate_id()
        product_type.owner_id = self.owner_id
        return ProductTypeRepository.upsert(product_type)

    def delete_product_type(self, product_type_id: str) -> bool:
        """Delete a commodity that no transaction references."""
        if TransactionRepository.references_product_type(self.owner_id, product_type_id):
            raise ProductTypeInUseError(
                f"Product type {product_type_id} is used by existing transactions; "
                f"delete or edit those first"
            )
        return ProductTypeRepository.delete(self.owner_id, product_type_id)

    def ensure_default_product_types(self) -> List[ProductType]:
        """Seed the default catalog when the owner has no commodities yet."""
        existing = ProductTypeRepository.get_all(self.owner_id)
        if existing or not get_settings().seed_default_product_types:
            return existing

        seeded = []
        for values in DEFAULT_PRODUCT_TYPES:
            seeded.append(ProductTypeRepository.upsert(ProductType(owner_id=self.owner_id, **values)))
        logger.info(f"Seeded {len(seeded)} default product types for {self.owner_id}")
        return seeded
