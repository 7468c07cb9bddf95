"""
Visits router.

POST /diners/visits   - log a visit (10 points, +15 streak bonus from day 3)
GET  /diners/visits   - a diner's visit history, newest first
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from dishdisplay.core.clock import as_utc
from dishdisplay.core.errors import RateLimitExceededError
from dishdisplay.db.base import get_db
from dishdisplay.models.visit import DinerVisit
from dishdisplay.schemas.common import PointsBreakdown
from dishdisplay.schemas.visit import LogVisitRequest, LogVisitResponse, StreakOut, VisitOut
from dishdisplay.services.cache import TTLCache, get_leaderboard_cache
from dishdisplay.services.diner_actions import list_visits, log_visit

router = APIRouter(prefix="/diners/visits", tags=["visits"])


def _visit_to_out(v: DinerVisit) -> VisitOut:
    return VisitOut(
        id=v.id,
        restaurant_id=v.restaurant_id,
        visit_date=as_utc(v.visit_date).isoformat(),
        notes=v.notes,
        points_earned=v.points_earned,
        streak_bonus=v.streak_bonus,
    )


@router.post(
    "",
    response_model=LogVisitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a diner visit",
    responses={
        201: {"description": "Visit stored and points awarded."},
        429: {"description": "A visit to this restaurant was logged less than 24 hours ago."},
    },
)
def create_visit(
    payload: LogVisitRequest,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_leaderboard_cache),
):
    """
    Log a visit for the diner, creating their profile on first use.

    Raises **429** with `details.retry_after` (hours) when the diner visited
    this restaurant less than 24 hours ago.
    """
    outcome = log_visit(
        db=db,
        email=payload.diner_email,
        restaurant_id=payload.restaurant_id,
        display_name=payload.display_name,
        notes=payload.notes,
        cache=cache,
    )
    if not outcome.rate_limit.allowed:
        raise RateLimitExceededError(
            reason=outcome.rate_limit.reason,
            can_retry=bool(outcome.rate_limit.can_retry),
            retry_after=outcome.rate_limit.retry_after,
        )

    p, s = outcome.points, outcome.streak
    return LogVisitResponse(
        visit=_visit_to_out(outcome.visit),
        points=PointsBreakdown(
            base_points=p.base_points,
            bonus_points=p.bonus_points,
            total_points=p.total_points,
            bonuses=p.bonuses,
        ),
        streak=StreakOut(
            new_streak=s.new_streak,
            bonus_points=s.bonus_points,
            is_new_streak=s.is_new_streak,
        ),
        points_earned=outcome.total_points,
        period_points_awarded=outcome.period_points_awarded,
    )


@router.get(
    "",
    response_model=list[VisitOut],
    summary="Visit history of a diner",
    responses={404: {"description": "Unknown diner."}},
)
def get_visits(
    email: str = Query(description="Diner email."),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return [_visit_to_out(v) for v in list_visits(db=db, email=email, limit=limit)]
