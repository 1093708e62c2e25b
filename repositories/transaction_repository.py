"""
Transaction Repository - data access layer for Transaction model.
Optimized with optional session parameter for transaction reuse.
"""

import logging
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from db_engine import get_engine
from models import Transaction
from repositories.errors import StoreError

logger = logging.getLogger(__name__)


class TransactionRepository:
    """Repository for Transaction CRUD operations. Records are replaced whole, never patched."""

    @staticmethod
    def upsert(transaction: Transaction, session: Optional[Session] = None) -> Transaction:
        """
        Insert a transaction or replace the stored record with the same id.

        Args:
            transaction: Full transaction record
            session: Optional existing session for transaction reuse

        Returns:
            Stored Transaction object
        """
        def _upsert(sess: Session) -> Transaction:
            try:
                statement = select(Transaction).where(
                    Transaction.owner_id == transaction.owner_id,
                    Transaction.id == transaction.id
                )
                existing = sess.exec(statement).first()
                if existing:
                    for key, value in transaction.model_dump().items():
                        setattr(existing, key, value)
                    record = existing
                else:
                    record = transaction
                sess.add(record)
                sess.commit()
                sess.refresh(record)
                return record
            except SQLAlchemyError as e:
                sess.rollback()
                logger.error(f"Failed to save transaction {transaction.id}: {e}")
                raise StoreError(f"Could not save transaction {transaction.id}") from e

        if session is not None:
            return _upsert(session)
        else:
            with Session(get_engine()) as session:
                return _upsert(session)

    @staticmethod
    def get_all(owner_id: str, session: Optional[Session] = None) -> List[Transaction]:
        """
        Retrieve all transactions of an owner.

        Args:
            owner_id: Store partition
            session: Optional existing session for transaction reuse

        Returns:
            List of all Transaction objects
        """
        def _get_all(sess: Session) -> List[Transaction]:
            try:
                statement = select(Transaction).where(Transaction.owner_id == owner_id)
                return list(sess.exec(statement).all())
            except SQLAlchemyError as e:
                logger.error(f"Failed to load transactions for {owner_id}: {e}")
                raise StoreError("Could not load transactions") from e

        if session is not None:
            return _get_all(session)
        else:
            with Session(get_engine()) as session:
                return _get_all(session)

    @staticmethod
    def get_by_trader(owner_id: str, trader_id: str, session: Optional[Session] = None) -> List[Transaction]:
        """Retrieve all transactions for a specific trader."""
        def _get_by_trader(sess: Session) -> List[Transaction]:
            try:
                statement = select(Transaction).where(
                    Transaction.owner_id == owner_id,
                    Transaction.trader_id == trader_id
                )
                return list(sess.exec(statement).all())
            except SQLAlchemyError as e:
                logger.error(f"Failed to load transactions for trader {trader_id}: {e}")
                raise StoreError(f"Could not load transactions for trader {trader_id}") from e

        if session is not None:
            return _get_by_trader(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_trader(session)

    @staticmethod
    def get_by_id(owner_id: str, transaction_id: str, session: Optional[Session] = None) -> Optional[Transaction]:
        """Retrieve a transaction by its id, or None if not found."""
        def _get_by_id(sess: Session) -> Optional[Transaction]:
            try:
                statement = select(Transaction).where(
                    Transaction.owner_id == owner_id,
                    Transaction.id == transaction_id
                )
                return sess.exec(statement).first()
            except SQLAlchemyError as e:
                logger.error(f"Failed to load transaction {transaction_id}: {e}")
                raise StoreError(f"Could not load transaction {transaction_id}") from e

        if session is not None:
            return _get_by_id(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_id(session)

    @staticmethod
    def references_product_type(owner_id: str, product_type_id: str, session: Optional[Session] = None) -> bool:
        """Check whether any transaction points at a commodity."""
        def _references(sess: Session) -> bool:
            try:
                statement = select(Transaction.id).where(
                    Transaction.owner_id == owner_id,
                    Transaction.product_type == product_type_id
                ).limit(1)
                return sess.exec(statement).first() is not None
            except SQLAlchemyError as e:
                logger.error(f"Failed to check references to product type {product_type_id}: {e}")
                raise StoreError(f"Could not check product type {product_type_id}") from e

        if session is not None:
            return _references(session)
        else:
            with Session(get_engine()) as session:
                return _references(session)

    @staticmethod
    def delete(owner_id: str, transaction_id: str, session: Optional[Session] = None) -> bool:
        """
        Delete a transaction by its id. Deletion is permanent.

        Args:
            owner_id: Store partition
            transaction_id: Transaction id to delete
            session: Optional existing session for transaction reuse

        Returns:
            True if a record was deleted, False otherwise
        """
        def _delete(sess: Session) -> bool:
            try:
                statement = select(Transaction).where(
                    Transaction.owner_id == owner_id,
                    Transaction.id == transaction_id
                )
                transaction = sess.exec(statement).first()
                if transaction:
                    sess.delete(transaction)
                    sess.commit()
                    return True
                return False
            except SQLAlchemyError as e:
                sess.rollback()
                logger.error(f"Failed to delete transaction {transaction_id}: {e}")
                raise StoreError(f"Could not delete transaction {transaction_id}") from e

        if session is not None:
            return _delete(session)
        else:
            with Session(get_engine()) as session:
                return _delete(session)

    @staticmethod
    def delete_by_trader(owner_id: str, trader_id: str, session: Optional[Session] = None) -> int:
        """
        Delete all transactions for a specific trader.

        Returns:
            Number of transactions deleted
        """
        def _delete_by_trader(sess: Session) -> int:
            try:
                statement = select(Transaction).where(
                    Transaction.owner_id == owner_id,
                    Transaction.trader_id == trader_id
                )
                transactions = sess.exec(statement).all()
                count = 0
                for tx in transactions:
                    sess.delete(tx)
                    count += 1
                sess.commit()
                return count
            except SQLAlchemyError as e:
                sess.rollback()
                logger.error(f"Failed to delete transactions of trader {trader_id}: {e}")
                raise StoreError(f"Could not delete transactions of trader {trader_id}") from e

        if session is not None:
            return _delete_by_trader(session)
        else:
            with Session(get_engine()) as session:
                return _delete_by_trader(session)
