from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from auditionapi.models.check_in import CheckInReward, DailyCheckIn


class CheckInRepository:
    def __init__(self, db: Session):
        self.db = db

    def has_checked_in(self, user_id: str, check_in_date: date) -> bool:
        stmt = select(DailyCheckIn.id).where(
            DailyCheckIn.user_id == user_id,
            DailyCheckIn.check_in_date == check_in_date,
        )
        return self.db.execute(stmt).first() is not None

    def record(self, user_id: str, check_in_date: date) -> DailyCheckIn:
        """Insert today's row. Raises IntegrityError on a same-day duplicate."""
        row = DailyCheckIn(user_id=user_id, check_in_date=check_in_date)
        self.db.add(row)
        self.db.flush()
        return row

    def get_reward_config(self, consecutive_days: int) -> Optional[CheckInReward]:
        stmt = select(CheckInReward).where(
            CheckInReward.consecutive_days == consecutive_days
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert_reward_config(
        self, consecutive_days: int, diamond_reward: int, xp_reward: int
    ) -> CheckInReward:
        row = self.get_reward_config(consecutive_days)
        if row is None:
            row = CheckInReward(consecutive_days=consecutive_days)
            self.db.add(row)
        row.diamond_reward = diamond_reward
        row.xp_reward = xp_reward
        self.db.flush()
        return row
