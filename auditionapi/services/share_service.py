import logging
from typing import Optional

from sqlalchemy.orm import Session

from auditionapi.config import Settings
from auditionapi.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from auditionapi.models.ledger import TransactionType
from auditionapi.schemas.images import ShareImageResponse
from auditionapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)


class ShareService:
    """Publishing a generated image to the public gallery costs diamonds and
    grants a lucky-wheel spin ticket."""

    def __init__(self, db: Session, settings: Settings):
        self.settings = settings
        self.wallet = WalletService(db)

    def share_image(self, user_id: str, image_id: Optional[str]) -> ShareImageResponse:
        if not image_id:
            raise ValidationError("Image ID is required")

        cost = self.settings.SHARE_IMAGE_COST

        with self.wallet.transaction():
            # Order of checks: balance, existence, ownership, already shared
            if not self.wallet.check_balance(user_id, cost):
                raise InsufficientBalanceError(
                    f"Sharing an image costs {cost} diamond(s)",
                    details={"required": cost},
                )

            image = self.wallet.job_repo.get(image_id)
            if image is None:
                raise NotFoundError("Image not found")
            if image.user_id != user_id:
                raise AuthorizationError("You can only share your own images")
            if image.is_public or not self.wallet.job_repo.publish(image_id):
                raise ConflictError("Image is already shared")

            new_balance = self.wallet.charge(
                user_id,
                cost,
                TransactionType.SHARE_IMAGE.value,
                f"Shared image {image_id} to the public gallery",
            )
            self.wallet.user_repo.increment(user_id, spin_tickets=1)
            counters = self.wallet.user_repo.get_counters(user_id)

        logger.info(f"User {user_id} shared image {image_id}")
        return ShareImageResponse(
            message="Image shared! You received 1 spin ticket.",
            new_diamond_count=new_balance,
            spin_tickets=counters["spin_tickets"],
        )
