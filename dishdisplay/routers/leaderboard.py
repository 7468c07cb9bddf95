"""
Leaderboard router.

GET /leaderboard   - standings of the active weekly competition
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dishdisplay.db.base import get_db
from dishdisplay.schemas.leaderboard import (
    LeaderboardEntryOut,
    LeaderboardResponse,
    PeriodOut,
    PrizeRestaurantOut,
)
from dishdisplay.services.cache import TTLCache, get_leaderboard_cache
from dishdisplay.services.leaderboard import (
    LeaderboardEntry,
    LeaderboardResult,
    get_current_leaderboard,
)
from dishdisplay.services.profile import normalize_email

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


def _entry_to_out(e: Optional[LeaderboardEntry]) -> Optional[LeaderboardEntryOut]:
    if e is None:
        return None
    return LeaderboardEntryOut(
        rank=e.rank,
        diner_name=e.diner_name,
        total_points=e.total_points,
        is_current_user=e.is_current_user,
        is_winner=e.is_winner,
    )


def _result_to_response(r: LeaderboardResult) -> LeaderboardResponse:
    prize = r.prize_restaurant
    return LeaderboardResponse(
        current_period=PeriodOut(
            id=r.current_period.id,
            start_date=str(r.current_period.start_date),
            end_date=str(r.current_period.end_date),
            status=r.current_period.status,
        ),
        top_entries=[_entry_to_out(e) for e in r.top_entries],
        current_user_entry=_entry_to_out(r.current_user_entry),
        prize_restaurant=(
            PrizeRestaurantOut(id=prize.id, name=prize.name, review_count=prize.review_count)
            if prize else None
        ),
        total_participants=r.total_participants,
    )


@router.get(
    "",
    response_model=LeaderboardResponse,
    summary="Weekly leaderboard",
    responses={
        200: {"description": "Standings of the active period."},
        503: {"description": "No active period (NO_ACTIVE_PERIOD) or store down (STORE_UNAVAILABLE)."},
    },
)
def read_leaderboard(
    email: Optional[str] = Query(
        default=None,
        description="Requesting diner. Without it `top_entries` is empty.",
    ),
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_leaderboard_cache),
):
    """
    Top 10 diners of the active Monday-Sunday period, the requester's own
    rank when outside the top 10, and the prize restaurant (most reviewed
    restaurant this week).
    """
    requesting = normalize_email(email) if email else None
    result = get_current_leaderboard(db=db, requesting_email=requesting, cache=cache)
    return _result_to_response(result)
