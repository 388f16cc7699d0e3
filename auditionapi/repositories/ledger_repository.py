from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from auditionapi.models.ledger import DiamondTransactionLog
from auditionapi.repositories.base import BaseRepository
from auditionapi.schemas.wallet import LedgerEntry


class LedgerRepository(BaseRepository[DiamondTransactionLog, LedgerEntry]):
    """Append-only access to diamond_transactions_log (no update/delete here)"""

    def __init__(self, db: Session):
        super().__init__(DiamondTransactionLog, LedgerEntry, db)

    def append(
        self, user_id: str, amount: int, transaction_type: str, description: str
    ) -> LedgerEntry:
        return self.create(
            user_id=user_id,
            amount=amount,
            transaction_type=transaction_type,
            description=description,
        )

    def latest(self, user_id: str, limit: int = 50) -> List[LedgerEntry]:
        stmt = (
            select(DiamondTransactionLog)
            .where(DiamondTransactionLog.user_id == user_id)
            .order_by(
                DiamondTransactionLog.created_at.desc(), DiamondTransactionLog.id.desc()
            )
            .limit(limit)
        )
        return [self._to_schema(row) for row in self.db.execute(stmt).scalars()]

    def has_entry(
        self, user_id: str, transaction_type: str, since: Optional[datetime] = None
    ) -> bool:
        stmt = select(DiamondTransactionLog.id).where(
            DiamondTransactionLog.user_id == user_id,
            DiamondTransactionLog.transaction_type == transaction_type,
        )
        if since is not None:
            stmt = stmt.where(DiamondTransactionLog.created_at >= since)
        return self.db.execute(stmt.limit(1)).first() is not None

    def sum_for_user(self, user_id: str) -> Tuple[int, int]:
        """(sum of amounts, number of entries)"""
        stmt = select(
            func.coalesce(func.sum(DiamondTransactionLog.amount), 0),
            func.count(DiamondTransactionLog.id),
        ).where(DiamondTransactionLog.user_id == user_id)
        total, count = self.db.execute(stmt).one()
        return int(total), int(count)
