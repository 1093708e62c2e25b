"""
ProductType Repository - data access layer for the commodity catalog.
"""

import logging
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from db_engine import get_engine
from models import ProductType
from repositories.errors import StoreError

logger = logging.getLogger(__name__)


class ProductTypeRepository:
    """Repository for ProductType CRUD operations."""

    @staticmethod
    def upsert(product_type: ProductType, session: Optional[Session] = None) -> ProductType:
        """Insert a commodity or replace the stored record with the same id."""
        def _upsert(sess: Session) -> ProductType:
            try:
                statement = select(ProductType).where(
                    ProductType.owner_id == product_type.owner_id,
                    ProductType.id == product_type.id
                )
                existing = sess.exec(statement).first()
                if existing:
                    for key, value in product_type.model_dump().items():
                        setattr(existing, key, value)
                    record = existing
                else:
                    record = product_type
                sess.add(record)
                sess.commit()
                sess.refresh(record)
                return record
            except SQLAlchemyError as e:
                sess.rollback()
                logger.error(f"Failed to save product type {product_type.id}: {e}")
                raise StoreError(f"Could not save product type {product_type.id}") from e

        if session is not None:
            return _upsert(session)
        else:
            with Session(get_engine()) as session:
                return _upsert(session)

    @staticmethod
    def get_all(owner_id: str, session: Optional[Session] = None) -> List[ProductType]:
        """Retrieve the whole commodity catalog of an owner."""
        def _get_all(sess: Session) -> List[ProductType]:
            try:
                statement = select(ProductType).where(ProductType.owner_id == owner_id)
                return list(sess.exec(statement).all())
            except SQLAlchemyError as e:
                logger.error(f"Failed to load product types for {owner_id}: {e}")
                raise StoreError("Could not load product types") from e

        if session is not None:
            return _get_all(session)
        else:
            with Session(get_engine()) as session:
                return _get_all(session)

    @staticmethod
    def get_by_id(owner_id: str, product_type_id: str, session: Optional[Session] = None) -> Optional[ProductType]:
        """Retrieve a commodity by its id, or None if not found."""
        def _get_by_id(sess: Session) -> Optional[ProductType]:
            try:
                statement = select(ProductType).where(
                    ProductType.owner_id == owner_id,
                    ProductType.id == product_type_id
                )
                return sess.exec(statement).first()
            except SQLAlchemyError as e:
                logger.error(f"Failed to load product type {product_type_id}: {e}")
                raise StoreError(f"Could not load product type {product_type_id}") from e

        if session is not None:
            return _get_by_id(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_id(session)

    @staticmethod
    def delete(owner_id: str, product_type_id: str, session: Optional[Session] = None) -> bool:
        """
        Delete a commodity.
        Callers must make sure no transaction references it first.
        """
        def _delete(sess: Session) -> bool:
            try:
                statement = select(ProductType).where(
                    ProductType.owner_id == owner_id,
                    ProductType.id == product_type_id
                )
                product_type = sess.exec(statement).first()
                if product_type:
                    sess.delete(product_type)
                    sess.commit()
                    return True
                return False
            except SQLAlchemyError as e:
                sess.rollback()
                logger.error(f"Failed to delete product type {product_type_id}: {e}")
                raise StoreError(f"Could not delete product type {product_type_id}") from e

        if session is not None:
            return _delete(session)
        else:
            with Session(get_engine()) as session:
                return _delete(session)
