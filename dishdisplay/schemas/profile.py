"""
Diner profile schemas.

GET   /diners/profile             → ProfileOut
PATCH /diners/profile             → UpdateProfileRequest → UpdateProfileResponse
GET   /diners/streak              → StreakStatus
GET   /diners/profile-completion  → ProfileCompletionOut
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from dishdisplay.schemas.common import check_email


class ProfileOut(BaseModel):
    id: int
    email: str
    display_name: Optional[str]
    profile_photo_url: Optional[str]
    bio: Optional[str]
    dietary_preferences: Optional[str]
    location: Optional[str]
    total_points: int
    total_visits: int
    total_reviews: int
    current_streak: int
    longest_streak: int
    last_visit_date: Optional[str]


class UpdateProfileRequest(BaseModel):
    diner_email: str = Field(max_length=320)
    display_name: Optional[str] = Field(default=None, max_length=128)
    profile_photo_url: Optional[str] = Field(default=None, max_length=1024)
    bio: Optional[str] = Field(default=None, max_length=1000)
    dietary_preferences: Optional[str] = Field(default=None, max_length=256)
    location: Optional[str] = Field(default=None, max_length=256)

    @field_validator("diner_email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        return check_email(v)


class ProfileCompletionOut(BaseModel):
    completion_percentage: int = Field(examples=[75])
    missing_fields: list[str]
    is_complete: bool
    bonus_awarded: bool
    bonus_points: int = Field(description="Bonus still claimable (25 or 0).")


class UpdateProfileResponse(BaseModel):
    profile: ProfileOut
    completion: ProfileCompletionOut
    bonus_points_awarded: int


class StreakStatus(BaseModel):
    current_streak: int
    longest_streak: int
    last_visit_date: Optional[str]
    bonus_active: bool = Field(description="True once the streak earns +15 per visit.")
