"""
Diner-facing competition router.

GET  /diners/current-points                   - points earned in the active period
GET  /diners/winner-history                   - periods the diner won, plus unseen wins
POST /diners/winner-history/{period_id}/seen  - acknowledge a win notification
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dishdisplay.core.errors import WinNotFoundError
from dishdisplay.db.base import get_db
from dishdisplay.models.period import LeaderboardPeriod
from dishdisplay.schemas.leaderboard import (
    CurrentPointsOut,
    MarkWinSeenRequest,
    PeriodOut,
    WinnerHistoryResponse,
    WinOut,
)
from dishdisplay.services.leaderboard import get_diner_current_points
from dishdisplay.services.periods import mark_win_seen, winner_history

router = APIRouter(prefix="/diners", tags=["competition"])


def _win_to_out(p: LeaderboardPeriod) -> WinOut:
    return WinOut(
        period_id=p.id,
        start_date=str(p.start_date),
        end_date=str(p.end_date),
        total_points=p.winner_points,
        seen=p.winner_seen_at is not None,
    )


@router.get(
    "/current-points",
    response_model=CurrentPointsOut,
    summary="Points in the active period",
    responses={503: {"description": "No active period (NO_ACTIVE_PERIOD) or store down."}},
)
def read_current_points(email: str = Query(description="Diner email."), db: Session = Depends(get_db)):
    """Unknown diners get 0."""
    result = get_diner_current_points(db, email)
    info = result.period
    return CurrentPointsOut(
        period=PeriodOut(
            id=info.id,
            start_date=str(info.start_date),
            end_date=str(info.end_date),
            status=info.status,
        ),
        total_points=result.total_points,
    )


@router.get("/winner-history", response_model=WinnerHistoryResponse, summary="Weekly wins of a diner")
def read_winner_history(email: str = Query(description="Diner email."), db: Session = Depends(get_db)):
    wins = [_win_to_out(p) for p in winner_history(db, email)]
    return WinnerHistoryResponse(history=wins, unseen=[w for w in wins if not w.seen])


@router.post(
    "/winner-history/{period_id}/seen",
    response_model=WinOut,
    summary="Acknowledge a win notification",
    responses={
        404: {"description": "Unknown diner (DINER_NOT_FOUND) or not their win (WIN_NOT_FOUND)."},
    },
)
def post_win_seen(period_id: int, payload: MarkWinSeenRequest, db: Session = Depends(get_db)):
    if not mark_win_seen(db, payload.diner_email, period_id):
        raise WinNotFoundError(period_id=period_id)
    return _win_to_out(db.get(LeaderboardPeriod, period_id))
