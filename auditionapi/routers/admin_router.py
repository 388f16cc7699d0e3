"""
Admin endpoints. Every route requires a valid token on an ``is_admin`` account.
"""

from fastapi import APIRouter, Depends, Query

from auditionapi.core.auth_middleware import require_admin
from auditionapi.deps import get_admin_service
from auditionapi.schemas.payment import (
    AdminTransactionActionRequest,
    AdminTransactionActionResponse,
    AdminTransactionListResponse,
)
from auditionapi.schemas.user import (
    AdminUserListResponse,
    AdminUserUpdateRequest,
    AdminUserUpdateResponse,
    UserProfile,
)
from auditionapi.schemas.wallet import LedgerIntegrityResponse
from auditionapi.services.admin_service import AdminService

router = APIRouter(tags=["admin"])


@router.get("/admin-users", response_model=AdminUserListResponse)
async def list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: UserProfile = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> AdminUserListResponse:
    return admin_service.list_users(limit=limit, offset=offset)


@router.put("/admin-users", response_model=AdminUserUpdateResponse)
async def update_user(
    request: AdminUserUpdateRequest,
    admin: UserProfile = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> AdminUserUpdateResponse:
    """
    Update diamonds / xp / is_admin / password of a user.

    A diamond change writes an ADMIN_ADJUSTMENT ledger entry with the delta.
    """
    return await admin_service.update_user(admin, request.user_id, request.updates)


@router.get("/admin-transactions", response_model=AdminTransactionListResponse)
async def list_transactions(
    admin: UserProfile = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> AdminTransactionListResponse:
    return admin_service.list_reviewable_transactions()


@router.put("/admin-transactions", response_model=AdminTransactionActionResponse)
async def review_transaction(
    request: AdminTransactionActionRequest,
    admin: UserProfile = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> AdminTransactionActionResponse:
    return admin_service.review_transaction(admin, request.transaction_id, request.action)


@router.get("/admin-ledger-integrity/{user_id}", response_model=LedgerIntegrityResponse)
async def ledger_integrity(
    user_id: str,
    admin: UserProfile = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> LedgerIntegrityResponse:
    return admin_service.ledger_integrity(user_id)
