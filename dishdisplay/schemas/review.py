"""
Review schemas.

POST   /diners/reviews        → SubmitReviewRequest → SubmitReviewResponse
PATCH  /diners/reviews/{id}   → UpdateReviewRequest → ReviewOut

Rating range and text length are checked by the rules engine, not here,
so clients get a REVIEW_VALIDATION_ERROR naming the field.
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from dishdisplay.schemas.common import PointsBreakdown, check_email

MAX_PHOTOS = 10


class SubmitReviewRequest(BaseModel):
    diner_email: str = Field(max_length=320)
    restaurant_id: str = Field(min_length=1, max_length=64)
    menu_item_id: Optional[str] = Field(default=None, max_length=64)
    rating: int = Field(description="1 to 5 stars.", examples=[5])
    review_text: Optional[str] = None
    photo_urls: list[str] = Field(default_factory=list, max_length=MAX_PHOTOS)
    display_name: Optional[str] = Field(default=None, max_length=128)

    @field_validator("diner_email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        return check_email(v)


class UpdateReviewRequest(BaseModel):
    diner_email: str = Field(max_length=320)
    rating: Optional[int] = None
    review_text: Optional[str] = None

    @field_validator("diner_email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        return check_email(v)


class ReviewOut(BaseModel):
    id: int
    restaurant_id: str
    menu_item_id: Optional[str]
    rating: int
    review_text: Optional[str]
    photo_urls: list[str]
    points_earned: int
    created_at: str


class SubmitReviewResponse(BaseModel):
    review: ReviewOut
    points: PointsBreakdown
    period_points_awarded: bool
