import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auditionapi.config import Settings
from auditionapi.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from auditionapi.models.ledger import TransactionType
from auditionapi.repositories.check_in_repository import CheckInRepository
from auditionapi.schemas.rewards import DailyCheckInResponse, MilestoneClaimResponse
from auditionapi.services.wallet_service import WalletService
from auditionapi.utils.timezone_utils import (
    ensure_aware,
    is_previous_day,
    local_date,
    utc_now,
)

logger = logging.getLogger(__name__)


def calculate_streak(
    last_check_in_at: Optional[datetime], previous_streak: int, now: datetime
) -> int:
    """Streak continues only if the last check-in was on the previous local day"""
    if last_check_in_at is None:
        return 1
    if is_previous_day(local_date(ensure_aware(last_check_in_at)), local_date(now)):
        return (previous_streak or 0) + 1
    return 1


def calculate_reward(streak: int, settings: Settings) -> int:
    bonus_days = min(max(streak - 1, 0), settings.CHECK_IN_MAX_STREAK_BONUS)
    return settings.CHECK_IN_BASE_REWARD + bonus_days * settings.CHECK_IN_BONUS_PER_DAY


class CheckInService:
    """Daily check-in and streak milestone rewards"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.wallet = WalletService(db)
        self.check_in_repo = CheckInRepository(db)

    def daily_check_in(
        self, user_id: str, now: Optional[datetime] = None
    ) -> DailyCheckInResponse:
        now = now or utc_now()
        today = local_date(now)

        with self.wallet.transaction():
            user = self.wallet.user_repo.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User not found")

            already = self.check_in_repo.has_checked_in(user_id, today) or (
                user.last_check_in_at is not None
                and local_date(ensure_aware(user.last_check_in_at)) == today
            )
            if already:
                raise RateLimitError(
                    "You have already checked in today",
                    details={"streak": user.consecutive_check_in_days},
                )

            streak = calculate_streak(
                user.last_check_in_at, user.consecutive_check_in_days, now
            )
            reward = calculate_reward(streak, self.settings)
            xp_reward = self.settings.CHECK_IN_XP_REWARD

            try:
                self.check_in_repo.record(user_id, today)
            except IntegrityError as e:
                # Concurrent check-in for the same day won the unique constraint
                raise RateLimitError("You have already checked in today") from e

            self.wallet.user_repo.set_fields(
                user_id, consecutive_check_in_days=streak, last_check_in_at=now
            )
            if xp_reward:
                self.wallet.user_repo.increment(user_id, xp=xp_reward)
            new_balance = self.wallet.reward(
                user_id,
                reward,
                TransactionType.DAILY_CHECK_IN.value,
                f"Daily check-in (day {streak} streak)",
            )
            counters = self.wallet.user_repo.get_counters(user_id)

        logger.info(f"User {user_id} checked in: streak={streak} reward={reward}")
        return DailyCheckInResponse(
            reward=reward,
            streak=streak,
            new_diamond_count=new_balance,
            xp_reward=xp_reward,
            new_xp=counters["xp"],
            message=f"Check-in successful! +{reward} diamonds",
        )

    def claim_milestone(
        self, user_id: str, milestone_days: Optional[int], now: Optional[datetime] = None
    ) -> MilestoneClaimResponse:
        if milestone_days not in self.settings.MILESTONE_DAYS:
            raise ValidationError(
                "Invalid milestone",
                details={"allowed": list(self.settings.MILESTONE_DAYS)},
            )
        now = now or utc_now()
        reason = TransactionType.milestone(milestone_days)

        with self.wallet.transaction():
            user = self.wallet.user_repo.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User not found")

            config = self.check_in_repo.get_reward_config(milestone_days)
            if config is None:
                raise NotFoundError(
                    "Milestone reward is not configured",
                    details={"milestone_days": milestone_days},
                )

            if (user.consecutive_check_in_days or 0) < milestone_days:
                raise AuthorizationError(
                    f"A {milestone_days}-day streak is required",
                    details={"streak": user.consecutive_check_in_days},
                )

            # One claim per milestone window
            since = now - timedelta(days=milestone_days)
            if self.wallet.ledger_repo.has_entry(user_id, reason, since=since):
                raise ConflictError("Milestone reward already claimed")

            description = f"{milestone_days}-day streak milestone"
            if config.diamond_reward > 0:
                self.wallet.reward(user_id, config.diamond_reward, reason, description)
            else:
                self.wallet.append_ledger_entry(user_id, 0, reason, description)
            if config.xp_reward:
                self.wallet.user_repo.increment(user_id, xp=config.xp_reward)
            counters = self.wallet.user_repo.get_counters(user_id)

        return MilestoneClaimResponse(
            milestone_days=milestone_days,
            diamond_reward=config.diamond_reward,
            xp_reward=config.xp_reward,
            new_diamond_count=counters["diamonds"],
            new_xp=counters["xp"],
            message=f"Claimed the {milestone_days}-day milestone reward",
        )
