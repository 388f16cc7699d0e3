from sqlalchemy import Column, Date, ForeignKey, Integer, String, UniqueConstraint

from auditionapi.models.base import BaseModel, BigIntPK


class DailyCheckIn(BaseModel):
    """One row per user per local calendar day"""

    __tablename__ = "daily_check_ins"
    __table_args__ = (
        UniqueConstraint("user_id", "check_in_date", name="uq_daily_check_in_user_date"),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    check_in_date = Column(Date, nullable=False)


class CheckInReward(BaseModel):
    """Milestone reward configuration keyed by streak length"""

    __tablename__ = "check_in_rewards"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    consecutive_days = Column(Integer, nullable=False, unique=True)
    diamond_reward = Column(Integer, nullable=False, default=0)
    xp_reward = Column(Integer, nullable=False, default=0)
