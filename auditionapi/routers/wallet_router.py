from fastapi import APIRouter, Depends

from auditionapi.core.auth_middleware import get_current_user
from auditionapi.deps import get_wallet_service
from auditionapi.schemas.user import UserProfile
from auditionapi.schemas.wallet import TransactionHistoryResponse
from auditionapi.services.wallet_service import HISTORY_LIMIT, WalletService

router = APIRouter(tags=["wallet"])


@router.get("/transaction-history", response_model=TransactionHistoryResponse)
async def transaction_history(
    current_user: UserProfile = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> TransactionHistoryResponse:
    """Caller's latest ledger entries, newest first"""
    return TransactionHistoryResponse(
        transactions=wallet_service.get_history(current_user.id, limit=HISTORY_LIMIT)
    )
