from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from auditionapi.models.payment import CreditPackage, PaymentStatus, PaymentTransaction
from auditionapi.repositories.base import BaseRepository
from auditionapi.schemas.payment import CreditPackageOut, PaymentTransactionOut


class CreditPackageRepository(BaseRepository[CreditPackage, CreditPackageOut]):
    def __init__(self, db: Session):
        super().__init__(CreditPackage, CreditPackageOut, db)

    def list_active(self) -> List[CreditPackageOut]:
        return self.find_all(
            filters={"is_active": True}, order_by=CreditPackage.display_order
        )

    def get_active(self, package_id: str) -> Optional[CreditPackage]:
        stmt = select(CreditPackage).where(
            CreditPackage.id == package_id, CreditPackage.is_active.is_(True)
        )
        return self.db.execute(stmt).scalar_one_or_none()


class PaymentRepository(BaseRepository[PaymentTransaction, PaymentTransactionOut]):
    def __init__(self, db: Session):
        super().__init__(PaymentTransaction, PaymentTransactionOut, db)

    def get_by_order_code(self, order_code: int) -> Optional[PaymentTransactionOut]:
        stmt = (
            select(PaymentTransaction)
            .where(PaymentTransaction.order_code == order_code)
            .execution_options(populate_existing=True)
        )
        return self._to_schema(self.db.execute(stmt).scalar_one_or_none())

    def list_by_status(
        self, statuses: Iterable[PaymentStatus], limit: int = 100
    ) -> List[PaymentTransactionOut]:
        stmt = (
            select(PaymentTransaction)
            .where(PaymentTransaction.status.in_([s.value for s in statuses]))
            .order_by(PaymentTransaction.created_at, PaymentTransaction.id)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return [self._to_schema(row) for row in self.db.execute(stmt).scalars()]

    def transition(
        self,
        transaction_id: int,
        from_statuses: Iterable[PaymentStatus],
        to_status: PaymentStatus,
    ) -> bool:
        stmt = (
            update(PaymentTransaction)
            .where(
                PaymentTransaction.id == transaction_id,
                PaymentTransaction.status.in_([s.value for s in from_statuses]),
            )
            .values(status=to_status.value)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1
