"""
Leaderboard and competition period schemas.

GET  /leaderboard                      → LeaderboardResponse
GET  /periods                          → PeriodListResponse
POST /periods/manage                   → ManagePeriodsResponse
GET  /diners/winner-history            → WinnerHistoryResponse
POST /diners/winner-history/{id}/seen  → MarkWinSeenRequest
GET  /diners/current-points            → CurrentPointsOut
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from dishdisplay.schemas.common import check_email


class PeriodOut(BaseModel):
    id: int
    start_date: str
    end_date: str
    status: str = Field(description='"active" | "closed"')


class LeaderboardEntryOut(BaseModel):
    rank: int
    diner_name: str
    total_points: int
    is_current_user: bool
    is_winner: bool


class PrizeRestaurantOut(BaseModel):
    id: str
    name: Optional[str]
    review_count: int


class LeaderboardResponse(BaseModel):
    current_period: PeriodOut
    top_entries: list[LeaderboardEntryOut] = Field(
        description="Top 10. Empty for anonymous requests."
    )
    current_user_entry: Optional[LeaderboardEntryOut] = Field(
        default=None,
        description="The requester's own standing when outside the top 10.",
    )
    prize_restaurant: Optional[PrizeRestaurantOut] = None
    total_participants: int


class PeriodStatusOut(PeriodOut):
    week_status: str = Field(description='"CURRENT" | "PAST" | "FUTURE"')
    winner_diner_id: Optional[int]


class PeriodListResponse(BaseModel):
    today: str
    periods: list[PeriodStatusOut]


class PeriodActionOut(BaseModel):
    action: str = Field(description='"closed" | "opened"')
    period_id: int
    start_date: str
    end_date: str
    winner_email: Optional[str]


class ManagePeriodsResponse(BaseModel):
    actions: list[PeriodActionOut]


class WinOut(BaseModel):
    period_id: int
    start_date: str
    end_date: str
    total_points: Optional[int] = Field(description="The winner's points in that period.")
    seen: bool


class WinnerHistoryResponse(BaseModel):
    history: list[WinOut] = Field(description="Every period the diner won, newest first.")
    unseen: list[WinOut] = Field(description="Wins not yet acknowledged.")


class MarkWinSeenRequest(BaseModel):
    diner_email: str = Field(max_length=320)

    @field_validator("diner_email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        return check_email(v)


class CurrentPointsOut(BaseModel):
    period: PeriodOut
    total_points: int
