"""
Rewarded actions

- POST /daily-check-in: once per local calendar day, streak-scaled diamonds
- POST /claim-milestone-reward: 7/14/30 day streak bonuses
- POST /process-referral: one-time bonus for the invitee and the referrer
"""

import logging

from fastapi import APIRouter, Depends

from auditionapi.core.auth_middleware import get_current_user
from auditionapi.deps import get_check_in_service, get_referral_service
from auditionapi.schemas.rewards import (
    DailyCheckInResponse,
    MilestoneClaimRequest,
    MilestoneClaimResponse,
    ReferralRequest,
    ReferralResponse,
)
from auditionapi.schemas.user import UserProfile
from auditionapi.services.check_in_service import CheckInService
from auditionapi.services.referral_service import ReferralService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rewards"])


@router.post("/daily-check-in", response_model=DailyCheckInResponse)
async def daily_check_in(
    current_user: UserProfile = Depends(get_current_user),
    check_in_service: CheckInService = Depends(get_check_in_service),
) -> DailyCheckInResponse:
    """
    Claim today's check-in reward.

    HTTP Status:
        200: reward credited
        401: missing or invalid token
        429: already checked in today (balance and streak unchanged)
    """
    return check_in_service.daily_check_in(current_user.id)


@router.post("/claim-milestone-reward", response_model=MilestoneClaimResponse)
async def claim_milestone_reward(
    request: MilestoneClaimRequest,
    current_user: UserProfile = Depends(get_current_user),
    check_in_service: CheckInService = Depends(get_check_in_service),
) -> MilestoneClaimResponse:
    return check_in_service.claim_milestone(current_user.id, request.milestone_days)


@router.post("/process-referral", response_model=ReferralResponse)
async def process_referral(
    request: ReferralRequest,
    current_user: UserProfile = Depends(get_current_user),
    referral_service: ReferralService = Depends(get_referral_service),
) -> ReferralResponse:
    return referral_service.process_referral(current_user.id, request.referral_code)
