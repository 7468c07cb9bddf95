"""
Competition periods router.

GET  /periods          - recent periods with CURRENT / PAST / FUTURE status
POST /periods/manage   - close finished weeks, open the current one
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dishdisplay.core.clock import local_today
from dishdisplay.db.base import get_db
from dishdisplay.schemas.leaderboard import (
    ManagePeriodsResponse,
    PeriodActionOut,
    PeriodListResponse,
    PeriodStatusOut,
)
from dishdisplay.services.cache import TTLCache, get_leaderboard_cache
from dishdisplay.services.leaderboard import invalidate_leaderboard_cache, period_info
from dishdisplay.services.periods import list_periods, manage_periods, week_status

router = APIRouter(prefix="/periods", tags=["periods"])


@router.get("", response_model=PeriodListResponse, summary="Recent competition periods")
def get_periods(
    limit: int = Query(default=5, ge=1, le=52),
    db: Session = Depends(get_db),
):
    today = local_today()
    periods = []
    for p in list_periods(db=db, limit=limit):
        info = period_info(p)
        periods.append(PeriodStatusOut(
            id=info.id,
            start_date=str(info.start_date),
            end_date=str(info.end_date),
            status=info.status,
            week_status=week_status(p, today),
            winner_diner_id=p.winner_diner_id,
        ))
    return PeriodListResponse(today=str(today), periods=periods)


@router.post(
    "/manage",
    response_model=ManagePeriodsResponse,
    summary="Roll the weekly competition forward",
)
def post_manage_periods(
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_leaderboard_cache),
):
    """
    Close every active period that ended before today (recording its
    winner) and open the current week if none is active. Idempotent; meant
    to be called by a scheduler.
    """
    actions = manage_periods(db=db)
    if actions:
        invalidate_leaderboard_cache(cache)
    return ManagePeriodsResponse(actions=[
        PeriodActionOut(
            action=a.action,
            period_id=a.period_id,
            start_date=str(a.start_date),
            end_date=str(a.end_date),
            winner_email=a.winner_email,
        )
        for a in actions
    ])
