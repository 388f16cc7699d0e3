from fastapi import APIRouter, Depends

from auditionapi.core.auth_middleware import get_current_user
from auditionapi.deps import get_payment_service
from auditionapi.schemas.payment import (
    CreatePaymentLinkRequest,
    CreatePaymentLinkResponse,
    CreditPackageListResponse,
    PaymentWebhookRequest,
    PaymentWebhookResponse,
)
from auditionapi.schemas.user import UserProfile
from auditionapi.services.payment_service import PaymentService

router = APIRouter(tags=["payments"])


@router.get("/credit-packages", response_model=CreditPackageListResponse)
async def credit_packages(
    payment_service: PaymentService = Depends(get_payment_service),
) -> CreditPackageListResponse:
    return payment_service.list_packages()


@router.post("/create-payment-link", response_model=CreatePaymentLinkResponse)
async def create_payment_link(
    request: CreatePaymentLinkRequest,
    current_user: UserProfile = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> CreatePaymentLinkResponse:
    return await payment_service.create_payment_link(current_user, request.package_id)


@router.post("/payment-webhook", response_model=PaymentWebhookResponse)
async def payment_webhook(
    webhook: PaymentWebhookRequest,
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentWebhookResponse:
    """PayOS callback; authenticated by the HMAC signature over ``data``"""
    return payment_service.handle_webhook(webhook)
