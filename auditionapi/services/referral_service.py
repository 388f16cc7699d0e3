import logging
from typing import Optional

from sqlalchemy.orm import Session

from auditionapi.config import Settings
from auditionapi.core.exceptions import ConflictError, NotFoundError, ValidationError
from auditionapi.models.ledger import TransactionType
from auditionapi.schemas.rewards import ReferralResponse
from auditionapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)


class ReferralService:
    def __init__(self, db: Session, settings: Settings):
        self.settings = settings
        self.wallet = WalletService(db)

    def process_referral(self, user_id: str, referral_code: Optional[str]) -> ReferralResponse:
        code = (referral_code or "").strip()
        if len(code) < self.settings.REFERRAL_CODE_MIN_LENGTH:
            raise ValidationError("Invalid referral code")

        bonus = self.settings.REFERRAL_BONUS
        received = TransactionType.REFERRAL_BONUS_RECEIVED.value

        with self.wallet.transaction():
            if self.wallet.ledger_repo.has_entry(user_id, received):
                raise ConflictError("You have already used a referral code")

            referrer = self.wallet.user_repo.find_by_id_prefix(code)
            if referrer is None:
                raise NotFoundError("Referral code not found")
            if referrer.id == user_id:
                raise ValidationError("You cannot refer yourself")

            new_balance = self.wallet.reward(
                user_id, bonus, received, f"Referral bonus from {referrer.referral_code}"
            )
            self.wallet.reward(
                referrer.id,
                bonus,
                TransactionType.REFERRAL_BONUS_GIVEN.value,
                f"Referral bonus for inviting {user_id[:8].upper()}",
            )

        logger.info(f"Referral processed: {referrer.id} -> {user_id}")
        return ReferralResponse(
            bonus=bonus,
            new_diamond_count=new_balance,
            message=f"Referral applied! +{bonus} diamonds",
        )
