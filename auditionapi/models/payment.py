"""
Top-up catalogue and PayOS payment orders.
"""

from enum import Enum

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
)

from auditionapi.models.base import BaseModel, BigIntPK


class PaymentStatus(str, Enum):
    PENDING = "pending"
    AWAITING_APPROVAL = "awaiting_approval"
    COMPLETED = "completed"
    REJECTED = "rejected"


class CreditPackage(BaseModel):
    __tablename__ = "credit_packages"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    credits_amount = Column(Integer, nullable=False)
    bonus_credits = Column(Integer, nullable=False, default=0)
    price_vnd = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=False, default=0)

    @property
    def total_diamonds(self) -> int:
        return (self.credits_amount or 0) + (self.bonus_credits or 0)


class PaymentTransaction(BaseModel):
    """A payment order. Diamonds are credited once, on completion."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_user", "user_id"),
        Index("idx_transactions_status", "status"),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)

    # PayOS order code (millisecond timestamp at creation)
    order_code = Column(BigInteger, nullable=False, unique=True)

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    package_id = Column(String(64), ForeignKey("credit_packages.id"), nullable=True)

    amount_vnd = Column(Integer, nullable=False)
    diamonds_received = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
