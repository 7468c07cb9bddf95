"""
Competition period lifecycle.

A period is one Monday-Sunday week in settings.TIMEZONE. manage_periods()
is the scheduled job (cron, or POST /periods/manage):

  1. Close every active period whose end_date is before today and record
     its rank-1 diner as the winner.
  2. If no active period covers today, open the current week.

Safe to run any number of times; a second run the same day does nothing.

Closed periods keep the winner and their points. winner_history() and
unseen_wins() list a diner's wins; mark_win_seen() acknowledges one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from dishdisplay.core.clock import local_today, utc_now
from dishdisplay.models.diner_profile import DinerProfile
from dishdisplay.models.period import LeaderboardPeriod, PeriodStatus
from dishdisplay.services.leaderboard import (
    fetch_period_points,
    get_active_period,
    rank_diners,
)
from dishdisplay.services.profile import get_profile, require_profile

logger = logging.getLogger(__name__)


@dataclass
class PeriodAction:
    action: str            # "closed" | "opened"
    period_id: int
    start_date: date
    end_date: date
    winner_email: Optional[str] = None


def current_week_bounds(today: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing `today`."""
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def close_period(db: Session, period: LeaderboardPeriod) -> Optional[str]:
    """Mark a period closed and record its winner. Returns the winner email."""
    ranked = rank_diners(fetch_period_points(db, period.id))
    winner_email = ranked[0].diner_email if ranked else None
    if winner_email is not None:
        winner = db.query(DinerProfile).filter(DinerProfile.email == winner_email).first()
        period.winner_diner_id = winner.id if winner else None
        period.winner_points = ranked[0].total_points
    period.status = PeriodStatus.closed
    period.closed_at = utc_now()
    return winner_email


def manage_periods(db: Session, today: Optional[date] = None) -> list[PeriodAction]:
    target = today or local_today()
    actions: list[PeriodAction] = []

    expired = (
        db.query(LeaderboardPeriod)
        .filter(
            LeaderboardPeriod.status == PeriodStatus.active,
            LeaderboardPeriod.end_date < target,
        )
        .all()
    )
    for period in expired:
        winner_email = close_period(db, period)
        logger.info(
            "Closed period %s (%s to %s), winner=%s",
            period.id, period.start_date, period.end_date, winner_email,
        )
        actions.append(PeriodAction(
            action="closed",
            period_id=period.id,
            start_date=period.start_date,
            end_date=period.end_date,
            winner_email=winner_email,
        ))
    db.flush()

    if get_active_period(db) is None:
        start, end = current_week_bounds(target)
        period = LeaderboardPeriod(start_date=start, end_date=end, status=PeriodStatus.active)
        db.add(period)
        db.flush()
        logger.info("Opened period %s (%s to %s)", period.id, start, end)
        actions.append(PeriodAction(
            action="opened",
            period_id=period.id,
            start_date=start,
            end_date=end,
        ))

    db.commit()
    return actions


def week_status(period: LeaderboardPeriod, today: date) -> str:
    if period.start_date <= today <= period.end_date:
        return "CURRENT"
    if today > period.end_date:
        return "PAST"
    return "FUTURE"


def list_periods(db: Session, limit: int = 5) -> list[LeaderboardPeriod]:
    """Most recent periods first."""
    return (
        db.query(LeaderboardPeriod)
        .order_by(LeaderboardPeriod.start_date.desc(), LeaderboardPeriod.id.desc())
        .limit(limit)
        .all()
    )


# ---------------------------------------------------------------------------
# Winner history
# ---------------------------------------------------------------------------

def winner_history(db: Session, email: str) -> list[LeaderboardPeriod]:
    """Closed periods won by the diner, most recent first. Unknown diners have none."""
    diner = get_profile(db, email)
    if diner is None:
        return []
    return (
        db.query(LeaderboardPeriod)
        .filter(
            LeaderboardPeriod.winner_diner_id == diner.id,
            LeaderboardPeriod.status == PeriodStatus.closed,
        )
        .order_by(LeaderboardPeriod.end_date.desc(), LeaderboardPeriod.id.desc())
        .all()
    )


def unseen_wins(db: Session, email: str) -> list[LeaderboardPeriod]:
    return [p for p in winner_history(db, email) if p.winner_seen_at is None]


def mark_win_seen(
    db: Session,
    email: str,
    period_id: int,
    now: Optional[datetime] = None,
) -> bool:
    """
    Acknowledge the win notification for one period. Returns False when the
    diner did not win that period; a second call is a no-op returning True.
    """
    diner = require_profile(db, email)
    period = db.get(LeaderboardPeriod, period_id)
    if period is None or period.winner_diner_id != diner.id:
        return False
    if period.winner_seen_at is None:
        period.winner_seen_at = now or utc_now()
        db.commit()
        logger.info("Winner %s saw the notification for period %s", diner.email, period_id)
    return True
