"""
Snapshot Repository - reads one owner's complete ledger in a single session.
"""

from typing import Optional
from sqlmodel import Session

from db_engine import get_engine
from models import LedgerSnapshot
from repositories.trader_repository import TraderRepository
from repositories.transaction_repository import TransactionRepository
from repositories.product_type_repository import ProductTypeRepository


class SnapshotRepository:
    """Full-snapshot reads. The core never asks the store for partial slices."""

    @staticmethod
    def load(owner_id: str, session: Optional[Session] = None) -> LedgerSnapshot:
        def _load(sess: Session) -> LedgerSnapshot:
            return LedgerSnapshot(
                traders=TraderRepository.get_all(owner_id, session=sess),
                transactions=TransactionRepository.get_all(owner_id, session=sess),
                product_types=ProductTypeRepository.get_all(owner_id, session=sess)
            )

        if session is not None:
            return _load(session)
        else:
            with Session(get_engine()) as session:
                return _load(session)
