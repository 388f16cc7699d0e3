"""
Diamond ledger.

Every balance change appends one row here. Rows are never updated or
deleted; the sum of ``amount`` per user should reconcile with
``users.diamonds`` but that is only reported, not enforced.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func

from auditionapi.models.base import Base, BigIntPK


class TransactionType(str, Enum):
    """Reason codes written to ``transaction_type``"""

    DAILY_CHECK_IN = "DAILY_CHECK_IN"
    SHARE_IMAGE = "SHARE_IMAGE"
    GROUP_IMAGE = "GROUP_IMAGE"
    COMIC_RENDER = "COMIC_RENDER"
    REFUND = "REFUND"
    REFERRAL_BONUS_RECEIVED = "REFERRAL_BONUS_RECEIVED"
    REFERRAL_BONUS_GIVEN = "REFERRAL_BONUS_GIVEN"
    ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT"
    PAYMENT_TOPUP = "PAYMENT_TOPUP"

    @staticmethod
    def milestone(days: int) -> str:
        return f"MILESTONE_REWARD_{days}"


class DiamondTransactionLog(Base):
    __tablename__ = "diamond_transactions_log"
    __table_args__ = (
        Index("idx_diamond_log_user_created", "user_id", "created_at"),
        Index("idx_diamond_log_user_type", "user_id", "transaction_type"),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    # Signed delta: positive for credits, negative for debits
    amount = Column(Integer, nullable=False)

    transaction_type = Column(String(64), nullable=False)

    description = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
