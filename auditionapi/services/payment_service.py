import logging
import time
from typing import Optional

from sqlalchemy.orm import Session

from auditionapi.config import Settings
from auditionapi.core.exceptions import (
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from auditionapi.models.ledger import TransactionType
from auditionapi.models.payment import PaymentStatus
from auditionapi.repositories.payment_repository import (
    CreditPackageRepository,
    PaymentRepository,
)
from auditionapi.schemas.payment import (
    CreatePaymentLinkResponse,
    CreditPackageListResponse,
    PaymentWebhookRequest,
    PaymentWebhookResponse,
)
from auditionapi.schemas.user import UserProfile
from auditionapi.services.payos_client import PayOSClient
from auditionapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

SUCCESS_CODE = "00"
OPEN_STATUSES = (PaymentStatus.PENDING, PaymentStatus.AWAITING_APPROVAL)


class PaymentService:
    """Diamond top-ups through PayOS"""

    def __init__(self, db: Session, settings: Settings, payos: PayOSClient):
        self.settings = settings
        self.payos = payos
        self.wallet = WalletService(db)
        self.package_repo = CreditPackageRepository(db)
        self.payment_repo = PaymentRepository(db)

    def list_packages(self) -> CreditPackageListResponse:
        return CreditPackageListResponse(packages=self.package_repo.list_active())

    async def create_payment_link(
        self, user: UserProfile, package_id: Optional[str]
    ) -> CreatePaymentLinkResponse:
        if not self.payos.configured:
            raise ServiceUnavailableError("Payment gateway is not configured")
        if not package_id:
            raise ValidationError("Package ID is required")

        package = self.package_repo.get_active(package_id)
        if package is None:
            raise NotFoundError("Package not found")

        order_code = int(time.time() * 1000)
        with self.wallet.transaction():
            self.payment_repo.create(
                order_code=order_code,
                user_id=user.id,
                package_id=package.id,
                amount_vnd=package.price_vnd,
                diamonds_received=package.total_diamonds,
                status=PaymentStatus.PENDING.value,
            )

        site = self.settings.PUBLIC_SITE_URL.rstrip("/")
        payload = {
            "orderCode": order_code,
            "amount": package.price_vnd,
            "description": f"NAP AUAI {package.credits_amount}KC",
            "cancelUrl": f"{site}/buy-credits",
            "returnUrl": f"{site}/buy-credits",
            "buyerName": user.display_name,
            "buyerEmail": user.email,
        }
        data = await self.payos.create_payment_link(payload)

        logger.info(f"Payment link created for {user.id}: order {order_code}")
        return CreatePaymentLinkResponse(
            checkout_url=data["checkoutUrl"], order_code=order_code
        )

    def handle_webhook(self, webhook: PaymentWebhookRequest) -> PaymentWebhookResponse:
        if webhook.code != SUCCESS_CODE:
            # Verification pings and failed payments are acknowledged only
            logger.info(f"Acknowledged PayOS webhook with code {webhook.code!r}")
            return PaymentWebhookResponse(message="Webhook acknowledged")

        data = webhook.data or {}
        if not self.payos.verify_webhook_signature(data, webhook.signature or ""):
            logger.warning("Rejected PayOS webhook with invalid signature")
            raise ValidationError("Invalid webhook signature")

        try:
            order_code = int(data["orderCode"])
        except KeyError:
            raise ValidationError("Webhook data has no orderCode")
        except (TypeError, ValueError):
            raise ValidationError(
                "Invalid orderCode", details={"order_code": str(data["orderCode"])}
            )

        with self.wallet.transaction():
            order = self.payment_repo.get_by_order_code(order_code)
            if order is None:
                raise NotFoundError("Transaction not found")
            if order.status == PaymentStatus.COMPLETED.value:
                return PaymentWebhookResponse(message="Already processed")

            if not self.payment_repo.transition(order.id, OPEN_STATUSES, PaymentStatus.COMPLETED):
                # Rejected by an admin, or completed concurrently
                logger.warning(f"Order {order_code} not payable in status {order.status}")
                return PaymentWebhookResponse(
                    success=False, message=f"Order is {order.status}"
                )

            self.wallet.reward(
                order.user_id,
                order.diamonds_received,
                TransactionType.PAYMENT_TOPUP.value,
                f"PayOS order {order.order_code}",
            )

        logger.info(f"Order {order_code} paid: +{order.diamonds_received} to {order.user_id}")
        return PaymentWebhookResponse(message="Payment processed")
