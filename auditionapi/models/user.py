from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from auditionapi.config import settings
from auditionapi.models.base import BaseModel


class User(BaseModel):
    """Public profile row mirrored from the identity provider's auth.users.

    ``diamonds`` is the spendable balance. It is only ever changed through
    conditional UPDATE statements issued by the wallet repository, and the
    check constraint keeps it from going negative even if a caller forgets.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("diamonds >= 0", name="ck_users_diamonds_non_negative"),
    )

    # auth.users.id (UUID rendered as text)
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    display_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    photo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    diamonds: Mapped[int] = mapped_column(
        Integer, default=settings.SIGNUP_DIAMONDS, nullable=False
    )
    xp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    spin_tickets: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    consecutive_check_in_days: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    last_check_in_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, diamonds={self.diamonds})>"

    @property
    def referral_code(self) -> str:
        """First eight characters of the id, upper-cased, as shown in the app"""
        return str(self.id)[:8].upper()
