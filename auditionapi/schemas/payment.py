from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from auditionapi.schemas.base import CamelModel


class CreditPackageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    credits_amount: int
    bonus_credits: int = 0
    price_vnd: int
    display_order: int = 0


class CreditPackageListResponse(BaseModel):
    packages: List[CreditPackageOut]


class CreatePaymentLinkRequest(CamelModel):
    package_id: Optional[str] = None


class CreatePaymentLinkResponse(CamelModel):
    checkout_url: str
    order_code: int


class PaymentWebhookRequest(BaseModel):
    """PayOS webhook envelope; ``signature`` signs the raw ``data`` object"""

    model_config = ConfigDict(extra="allow")

    code: str = ""
    desc: Optional[str] = None
    success: Optional[bool] = None
    data: Optional[dict] = None
    signature: Optional[str] = None


class PaymentWebhookResponse(BaseModel):
    success: bool = True
    message: str


class PaymentTransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_code: int
    user_id: str
    package_id: Optional[str] = None
    amount_vnd: int
    diamonds_received: int
    status: str
    created_at: Optional[datetime] = None


class AdminTransactionListResponse(BaseModel):
    transactions: List[PaymentTransactionOut]


class AdminTransactionActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transaction_id: Optional[int] = Field(None, alias="transactionId")
    action: Optional[str] = None


class AdminTransactionActionResponse(BaseModel):
    success: bool = True
    transaction: PaymentTransactionOut
    message: str
