import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from auditionapi.config import Settings
from auditionapi.core.exceptions import ConflictError, NotFoundError, ValidationError
from auditionapi.models.ledger import TransactionType
from auditionapi.models.payment import PaymentStatus
from auditionapi.models.user import User
from auditionapi.repositories.payment_repository import PaymentRepository
from auditionapi.schemas.payment import (
    AdminTransactionActionResponse,
    AdminTransactionListResponse,
)
from auditionapi.schemas.user import (
    AdminUserListResponse,
    AdminUserUpdateResponse,
    AdminUserUpdates,
    UserProfile,
)
from auditionapi.schemas.wallet import LedgerIntegrityResponse
from auditionapi.services.identity_admin_client import IdentityAdminClient
from auditionapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
REVIEWABLE_STATUSES = (PaymentStatus.PENDING, PaymentStatus.AWAITING_APPROVAL)


class AdminService:
    def __init__(self, db: Session, settings: Settings, identity_admin: IdentityAdminClient):
        self.db = db
        self.settings = settings
        self.identity_admin = identity_admin
        self.wallet = WalletService(db)
        self.payment_repo = PaymentRepository(db)

    # Users

    def list_users(self, limit: int = 100, offset: int = 0) -> AdminUserListResponse:
        users = self.wallet.user_repo.list_users(limit=limit, offset=offset)
        total = self.wallet.user_repo.count()
        return AdminUserListResponse(
            users=users, total_count=total, has_next=offset + len(users) < total
        )

    def _set_diamonds(self, admin_id: str, user_id: str, current: int, target: int) -> None:
        # Compare-and-set so a concurrent debit is not silently overwritten
        stmt = (
            update(User)
            .where(User.id == user_id, User.diamonds == current)
            .values(diamonds=target)
            .execution_options(synchronize_session=False)
        )
        if self.db.execute(stmt).rowcount != 1:
            raise ConflictError("Balance changed during update, please retry")

        delta = target - current
        self.wallet.append_ledger_entry(
            user_id,
            delta,
            TransactionType.ADMIN_ADJUSTMENT.value,
            f"Admin {admin_id[:8]} set balance {current} -> {target}",
        )

    async def update_user(
        self, admin: UserProfile, user_id: Optional[str], updates: Optional[AdminUserUpdates]
    ) -> AdminUserUpdateResponse:
        if not user_id or updates is None:
            raise ValidationError("userId and updates are required")
        if updates.diamonds is not None and updates.diamonds < 0:
            raise ValidationError("Diamonds cannot be negative")
        if updates.password is not None and len(updates.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        if not self.wallet.user_repo.exists(user_id):
            raise NotFoundError("User not found")

        password_updated = False
        if updates.password:
            await self.identity_admin.update_password(user_id, updates.password)
            password_updated = True

        with self.wallet.transaction():
            if updates.diamonds is not None:
                current = self.wallet.get_balance(user_id)
                if updates.diamonds != current:
                    self._set_diamonds(admin.id, user_id, current, updates.diamonds)

            fields = {}
            if updates.xp is not None:
                fields["xp"] = updates.xp
            if updates.is_admin is not None:
                fields["is_admin"] = updates.is_admin
            if fields:
                self.wallet.user_repo.set_fields(user_id, **fields)

        logger.info(
            f"Admin {admin.id} updated {user_id}: "
            f"{updates.model_dump(exclude_none=True, exclude={'password'})}"
            f"{' (password changed)' if password_updated else ''}"
        )
        return AdminUserUpdateResponse(
            user=self.wallet.user_repo.get_by_id(user_id),
            password_updated=password_updated,
        )

    def ledger_integrity(self, user_id: str) -> LedgerIntegrityResponse:
        return self.wallet.verify_integrity(user_id)

    # Payment orders

    def list_reviewable_transactions(self) -> AdminTransactionListResponse:
        return AdminTransactionListResponse(
            transactions=self.payment_repo.list_by_status(REVIEWABLE_STATUSES)
        )

    def review_transaction(
        self, admin: UserProfile, transaction_id: Optional[int], action: Optional[str]
    ) -> AdminTransactionActionResponse:
        if not transaction_id or action not in ("approve", "reject"):
            raise ValidationError(
                'Requires transactionId and action ("approve" or "reject")'
            )

        with self.wallet.transaction():
            order = self.payment_repo.get_by_id(transaction_id)
            if order is None:
                raise NotFoundError("Transaction not found")

            target = (
                PaymentStatus.COMPLETED if action == "approve" else PaymentStatus.REJECTED
            )
            if not self.payment_repo.transition(transaction_id, REVIEWABLE_STATUSES, target):
                raise ConflictError(
                    f"Transaction is not awaiting approval (status: {order.status})"
                )

            if action == "approve":
                self.wallet.reward(
                    order.user_id,
                    order.diamonds_received,
                    TransactionType.PAYMENT_TOPUP.value,
                    f"Top-up order {order.order_code} approved",
                )
                self.wallet.user_repo.increment(
                    order.user_id, xp=self.settings.PAYMENT_APPROVAL_XP
                )

        logger.info(f"Admin {admin.id} {action}d transaction {transaction_id}")
        return AdminTransactionActionResponse(
            transaction=self.payment_repo.get_by_id(transaction_id),
            message=f"Transaction {action}d successfully",
        )
