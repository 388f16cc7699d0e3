from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """User profile as seen by the API"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    display_name: str = ""
    photo_url: Optional[str] = None
    diamonds: int = 0
    xp: int = 0
    spin_tickets: int = 0
    consecutive_check_in_days: int = 0
    last_check_in_at: Optional[datetime] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None

    @property
    def referral_code(self) -> str:
        return self.id[:8].upper()


class AdminUserUpdates(BaseModel):
    diamonds: Optional[int] = None
    xp: Optional[int] = Field(None, ge=0)
    is_admin: Optional[bool] = None
    password: Optional[str] = None


class AdminUserUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    updates: Optional[AdminUserUpdates] = None


class AdminUserListResponse(BaseModel):
    users: List[UserProfile]
    total_count: int
    has_next: bool


class AdminUserUpdateResponse(BaseModel):
    success: bool = True
    user: UserProfile
    password_updated: bool = False
