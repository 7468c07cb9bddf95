"""
Visit schemas.

POST /diners/visits → LogVisitRequest → LogVisitResponse
GET  /diners/visits → list[VisitOut]
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from dishdisplay.schemas.common import PointsBreakdown, check_email


class LogVisitRequest(BaseModel):
    diner_email: str = Field(max_length=320, examples=["ana@example.com"])
    restaurant_id: str = Field(min_length=1, max_length=64)
    display_name: Optional[str] = Field(default=None, max_length=128)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("diner_email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        return check_email(v)


class StreakOut(BaseModel):
    new_streak: int
    bonus_points: int = Field(description="15 from the third consecutive day on.")
    is_new_streak: bool


class VisitOut(BaseModel):
    id: int
    restaurant_id: str
    visit_date: str
    notes: Optional[str]
    points_earned: int
    streak_bonus: int


class LogVisitResponse(BaseModel):
    visit: VisitOut
    points: PointsBreakdown
    streak: StreakOut
    points_earned: int = Field(description="Visit points plus streak bonus.")
    period_points_awarded: bool = Field(
        description="False when no competition period was active."
    )
