from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from auditionapi.models.user import User as UserModel
from auditionapi.repositories.base import BaseRepository
from auditionapi.schemas.user import UserProfile


class UserRepository(BaseRepository[UserModel, UserProfile]):
    """Users and the balance column.

    Balance changes are issued as single UPDATE statements evaluated by the
    database, never as read-modify-write in Python.
    """

    def __init__(self, db: Session):
        super().__init__(UserModel, UserProfile, db)

    def exists(self, user_id: str) -> bool:
        stmt = select(UserModel.id).where(UserModel.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none() is not None

    def get_balance(self, user_id: str) -> Optional[int]:
        stmt = select(UserModel.diamonds).where(UserModel.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_counters(self, user_id: str) -> Optional[dict]:
        """diamonds / xp / spin_tickets straight from the row"""
        stmt = select(UserModel.diamonds, UserModel.xp, UserModel.spin_tickets).where(
            UserModel.id == user_id
        )
        row = self.db.execute(stmt).one_or_none()
        if row is None:
            return None
        return {"diamonds": row.diamonds, "xp": row.xp, "spin_tickets": row.spin_tickets}

    def debit_if_sufficient(self, user_id: str, amount: int) -> bool:
        """UPDATE ... SET diamonds = diamonds - :amount WHERE diamonds >= :amount

        Returns False when no row matched (missing user or not enough diamonds).
        """
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.diamonds >= amount)
            .values(diamonds=UserModel.diamonds - amount)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def increment(
        self, user_id: str, diamonds: int = 0, xp: int = 0, spin_tickets: int = 0
    ) -> bool:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(
                diamonds=UserModel.diamonds + diamonds,
                xp=UserModel.xp + xp,
                spin_tickets=UserModel.spin_tickets + spin_tickets,
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def set_fields(self, user_id: str, **values) -> bool:
        if not values:
            return self.exists(user_id)
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def find_by_id_prefix(self, prefix: str) -> Optional[UserProfile]:
        """First user whose id starts with ``prefix`` (case-insensitive)"""
        # LIKE wildcards in the code are matched literally
        escaped = (
            prefix.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        stmt = (
            select(UserModel)
            .where(func.lower(UserModel.id).like(escaped + "%", escape="\\"))
            .order_by(UserModel.created_at)
            .limit(1)
        )
        return self._to_schema(self.db.execute(stmt).scalar_one_or_none())

    def list_users(self, limit: int = 100, offset: int = 0) -> List[UserProfile]:
        return self.find_all(
            order_by=UserModel.created_at.desc(), limit=limit, offset=offset
        )
