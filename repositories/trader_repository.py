"""
Trader Repository - data access layer for Trader model.
Optimized with optional session parameter for transaction reuse.
"""

import logging
from typing import Optional, List
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from db_engine import get_engine
from models import Trader, Transaction
from repositories.errors import StoreError

logger = logging.getLogger(__name__)


class TraderRepository:
    """Repository for Trader CRUD operations."""

    @staticmethod
    def upsert(trader: Trader, session: Optional[Session] = None) -> Trader:
        """
        Insert a trader or replace the stored record with the same id.

        Args:
            trader: Full trader record
            session: Optional existing session for transaction reuse

        Returns:
            Stored Trader object
        """
        def _upsert(sess: Session) -> Trader:
            try:
                statement = select(Trader).where(
                    Trader.owner_id == trader.owner_id,
                    Trader.id == trader.id
                )
                existing = sess.exec(statement).first()
                if existing:
                    for key, value in trader.model_dump().items():
                        setattr(existing, key, value)
                    record = existing
                else:
                    record = trader
                sess.add(record)
                sess.commit()
                sess.refresh(record)
                return record
            except SQLAlchemyError as e:
                sess.rollback()
                logger.error(f"Failed to save trader {trader.id}: {e}")
                raise StoreError(f"Could not save trader {trader.id}") from e

        if session is not None:
            return _upsert(session)
        else:
            with Session(get_engine()) as session:
                return _upsert(session)

    @staticmethod
    def get_all(owner_id: str, session: Optional[Session] = None) -> List[Trader]:
        """
        Retrieve all traders of an owner.

        Args:
            owner_id: Store partition
            session: Optional existing session for transaction reuse

        Returns:
            List of Trader objects
        """
        def _get_all(sess: Session) -> List[Trader]:
            try:
                statement = select(Trader).where(Trader.owner_id == owner_id)
                return list(sess.exec(statement).all())
            except SQLAlchemyError as e:
                logger.error(f"Failed to load traders for {owner_id}: {e}")
                raise StoreError("Could not load traders") from e

        if session is not None:
            return _get_all(session)
        else:
            with Session(get_engine()) as session:
                return _get_all(session)

    @staticmethod
    def get_by_id(owner_id: str, trader_id: str, session: Optional[Session] = None) -> Optional[Trader]:
        """Retrieve a trader by its id, or None if not found."""
        def _get_by_id(sess: Session) -> Optional[Trader]:
            try:
                statement = select(Trader).where(
                    Trader.owner_id == owner_id,
                    Trader.id == trader_id
                )
                return sess.exec(statement).first()
            except SQLAlchemyError as e:
                logger.error(f"Failed to load trader {trader_id}: {e}")
                raise StoreError(f"Could not load trader {trader_id}") from e

        if session is not None:
            return _get_by_id(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_id(session)

    @staticmethod
    def touch(
        owner_id: str,
        trader_id: str,
        when: Optional[datetime] = None,
        session: Optional[Session] = None
    ) -> Optional[Trader]:
        """
        Set a trader's last_transaction_date.

        Returns:
            Updated Trader object or None if not found
        """
        def _touch(sess: Session) -> Optional[Trader]:
            try:
                statement = select(Trader).where(
                    Trader.owner_id == owner_id,
                    Trader.id == trader_id
                )
                trader = sess.exec(statement).first()
                if trader:
                    trader.last_transaction_date = when or datetime.now()
                    sess.add(trader)
                    sess.commit()
                    sess.refresh(trader)
                    return trader
                return None
            except SQLAlchemyError as e:
                sess.rollback()
                logger.error(f"Failed to update trader {trader_id}: {e}")
                raise StoreError(f"Could not update trader {trader_id}") from e

        if session is not None:
            return _touch(session)
        else:
            with Session(get_engine()) as session:
                return _touch(session)

    @staticmethod
    def delete(owner_id: str, trader_id: str, session: Optional[Session] = None) -> bool:
        """
        Delete a trader and all its transactions.
        Transactions go first, in the same commit.

        Args:
            owner_id: Store partition
            trader_id: Trader to delete
            session: Optional existing session for transaction reuse

        Returns:
            True if the trader existed, False otherwise
        """
        def _delete(sess: Session) -> bool:
            try:
                statement = select(Transaction).where(
                    Transaction.owner_id == owner_id,
                    Transaction.trader_id == trader_id
                )
                for tx in sess.exec(statement).all():
                    sess.delete(tx)

                trader = sess.exec(
                    select(Trader).where(Trader.owner_id == owner_id, Trader.id == trader_id)
                ).first()
                if trader:
                    sess.delete(trader)
                sess.commit()
                return trader is not None
            except SQLAlchemyError as e:
                sess.rollback()
                logger.error(f"Failed to delete trader {trader_id}: {e}")
                raise StoreError(f"Could not delete trader {trader_id}") from e

        if session is not None:
            return _delete(session)
        else:
            with Session(get_engine()) as session:
                return _delete(session)
