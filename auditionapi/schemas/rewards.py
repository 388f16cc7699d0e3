from typing import Optional

from pydantic import Field

from auditionapi.schemas.base import CamelModel


class DailyCheckInResponse(CamelModel):
    reward: int
    streak: int
    new_diamond_count: int
    xp_reward: int
    new_xp: int
    message: str


class MilestoneClaimRequest(CamelModel):
    milestone_days: Optional[int] = None


class MilestoneClaimResponse(CamelModel):
    milestone_days: int
    diamond_reward: int
    xp_reward: int
    new_diamond_count: int
    new_xp: int
    message: str


class ReferralRequest(CamelModel):
    referral_code: Optional[str] = Field(None, max_length=64)


class ReferralResponse(CamelModel):
    bonus: int
    new_diamond_count: int
    message: str
