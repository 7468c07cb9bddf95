"""
Weekly leaderboard.

Aggregation (pure)
------------------
compute_leaderboard(period, entries, requesting_email)  -> LeaderboardResult
find_prize_restaurant(entries)                         -> PrizeRestaurant | None

  1. Group ledger points by diner email and sum them.
  2. Sort by total descending. Ties: the diner who appears first in the
     chronological ledger ranks higher, then email ascending.
  3. rank = position + 1; rank 1 is the winner.
  4. Anonymous requests get no entries. Identified requests get the top 10
     plus, when they are outside it, their own entry.
  5. Prize restaurant: most review entries in the period; strict ">" so the
     first restaurant seen wins a tie.

Store access
------------
get_active_period(db)                              -> LeaderboardPeriod | None
fetch_period_points(db, period_id)                 -> list[LedgerPoint]
get_current_leaderboard(db, requesting_email, cache) -> LeaderboardResult
get_diner_current_points(db, email)                  -> DinerPeriodPoints

No active period and store failures raise distinct errors; neither is ever
reported as an empty leaderboard.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dishdisplay.core.errors import DataUnavailableError, NoActivePeriodError
from dishdisplay.models.diner_profile import DinerProfile
from dishdisplay.models.period import LeaderboardPeriod, PeriodStatus
from dishdisplay.models.points import DinerPoints, EarnedFrom
from dishdisplay.models.restaurant import Restaurant
from dishdisplay.services.cache import TTLCache

logger = logging.getLogger(__name__)

TOP_ENTRIES_LIMIT = 10
CACHE_PREFIX = "leaderboard:"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

@dataclass
class PeriodInfo:
    id: int
    start_date: date
    end_date: date
    status: str


@dataclass
class LedgerPoint:
    """One ledger row joined with the diner's identity."""
    diner_email: str
    points: int
    diner_display_name: Optional[str] = None
    earned_from: str = EarnedFrom.visit.value
    restaurant_id: Optional[str] = None


@dataclass
class LeaderboardEntry:
    rank: int
    diner_email: str
    diner_name: str
    total_points: int
    is_current_user: bool = False
    is_winner: bool = False


@dataclass
class PrizeRestaurant:
    id: str
    review_count: int
    name: Optional[str] = None


@dataclass
class LeaderboardResult:
    current_period: PeriodInfo
    top_entries: list[LeaderboardEntry] = field(default_factory=list)
    current_user_entry: Optional[LeaderboardEntry] = None
    prize_restaurant: Optional[PrizeRestaurant] = None
    total_participants: int = 0


@dataclass
class DinerPeriodPoints:
    period: PeriodInfo
    total_points: int


@dataclass
class _Standing:
    email: str
    name: str
    total: int
    first_seen: int


# ---------------------------------------------------------------------------
# Pure aggregation
# ---------------------------------------------------------------------------

def _display_name(email: str, display_name: Optional[str]) -> str:
    if display_name:
        return display_name
    return email.split("@", 1)[0]


def rank_diners(entries: Sequence[LedgerPoint]) -> list[LeaderboardEntry]:
    """Full ranking of every diner with points in `entries`."""
    standings: dict[str, _Standing] = {}
    for idx, entry in enumerate(entries):
        standing = standings.get(entry.diner_email)
        if standing is None:
            standing = _Standing(
                email=entry.diner_email,
                name=_display_name(entry.diner_email, entry.diner_display_name),
                total=0,
                first_seen=idx,
            )
            standings[entry.diner_email] = standing
        standing.total += entry.points

    ordered = sorted(
        standings.values(),
        key=lambda s: (-s.total, s.first_seen, s.email),
    )
    return [
        LeaderboardEntry(
            rank=i + 1,
            diner_email=s.email,
            diner_name=s.name,
            total_points=s.total,
            is_winner=(i == 0),
        )
        for i, s in enumerate(ordered)
    ]


def find_prize_restaurant(entries: Sequence[LedgerPoint]) -> Optional[PrizeRestaurant]:
    counts: dict[str, int] = {}
    for entry in entries:
        if entry.earned_from != EarnedFrom.review.value or not entry.restaurant_id:
            continue
        counts[entry.restaurant_id] = counts.get(entry.restaurant_id, 0) + 1

    prize: Optional[PrizeRestaurant] = None
    max_count = 0
    for restaurant_id, count in counts.items():   # insertion order = first seen
        if count > max_count:
            max_count = count
            prize = PrizeRestaurant(id=restaurant_id, review_count=count)
    return prize


def compute_leaderboard(
    period: PeriodInfo,
    entries: Sequence[LedgerPoint],
    requesting_email: Optional[str] = None,
    *,
    limit: int = TOP_ENTRIES_LIMIT,
) -> LeaderboardResult:
    ranked = rank_diners(entries)
    for entry in ranked:
        entry.is_current_user = requesting_email is not None and entry.diner_email == requesting_email

    result = LeaderboardResult(
        current_period=period,
        prize_restaurant=find_prize_restaurant(entries),
        total_participants=len(ranked),
    )

    # Standings are only shown to identified diners
    if not requesting_email:
        return result

    result.top_entries = ranked[:limit]
    if not any(e.is_current_user for e in result.top_entries):
        result.current_user_entry = next(
            (e for e in ranked[limit:] if e.is_current_user), None
        )
    return result


# ---------------------------------------------------------------------------
# Store access
# ---------------------------------------------------------------------------

def period_info(period: LeaderboardPeriod) -> PeriodInfo:
    status = period.status.value if hasattr(period.status, "value") else str(period.status)
    return PeriodInfo(
        id=period.id,
        start_date=period.start_date,
        end_date=period.end_date,
        status=status,
    )


def get_active_period(db: Session) -> Optional[LeaderboardPeriod]:
    return (
        db.query(LeaderboardPeriod)
        .filter(LeaderboardPeriod.status == PeriodStatus.active)
        .order_by(LeaderboardPeriod.start_date.desc())
        .first()
    )


def fetch_period_points(db: Session, period_id: int) -> list[LedgerPoint]:
    """All ledger rows of a period, oldest first."""
    rows = (
        db.query(
            DinerProfile.email,
            DinerProfile.display_name,
            DinerPoints.points,
            DinerPoints.earned_from,
            DinerPoints.restaurant_id,
        )
        .join(DinerProfile, DinerProfile.id == DinerPoints.diner_id)
        .filter(DinerPoints.leaderboard_period_id == period_id)
        .order_by(DinerPoints.created_at.asc(), DinerPoints.id.asc())
        .all()
    )
    return [
        LedgerPoint(
            diner_email=r.email,
            diner_display_name=r.display_name,
            points=r.points,
            earned_from=r.earned_from.value if hasattr(r.earned_from, "value") else str(r.earned_from),
            restaurant_id=r.restaurant_id,
        )
        for r in rows
    ]


def _attach_restaurant_name(db: Session, prize: Optional[PrizeRestaurant]) -> None:
    if prize is None:
        return
    restaurant = db.get(Restaurant, prize.id)
    if restaurant is not None:
        prize.name = restaurant.name


def _cache_key(period_id: int, requesting_email: Optional[str]) -> str:
    return f"{CACHE_PREFIX}{period_id}:{requesting_email or '-'}"


def invalidate_leaderboard_cache(cache: Optional[TTLCache]) -> None:
    if cache is not None:
        cache.invalidate_prefix(CACHE_PREFIX)


def get_current_leaderboard(
    db: Session,
    requesting_email: Optional[str] = None,
    cache: Optional[TTLCache] = None,
) -> LeaderboardResult:
    """
    Leaderboard of the active period for the requesting diner.
    Raises NoActivePeriodError / DataUnavailableError.
    """
    try:
        period = get_active_period(db)
    except SQLAlchemyError as exc:
        logger.error("Could not load the active period: %s", exc)
        raise DataUnavailableError() from exc
    if period is None:
        raise NoActivePeriodError()

    key = _cache_key(period.id, requesting_email)
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached

    try:
        entries = fetch_period_points(db, period.id)
        result = compute_leaderboard(period_info(period), entries, requesting_email)
        _attach_restaurant_name(db, result.prize_restaurant)
    except SQLAlchemyError as exc:
        logger.error("Could not load ledger for period %s: %s", period.id, exc)
        raise DataUnavailableError() from exc

    if cache is not None:
        cache.set(key, result)
    return result


def get_diner_current_points(db: Session, email: str) -> DinerPeriodPoints:
    """The diner's ledger total in the active period; 0 for unknown diners."""
    try:
        period = get_active_period(db)
        if period is None:
            raise NoActivePeriodError()
        total = (
            db.query(func.coalesce(func.sum(DinerPoints.points), 0))
            .join(DinerProfile, DinerProfile.id == DinerPoints.diner_id)
            .filter(
                DinerPoints.leaderboard_period_id == period.id,
                DinerProfile.email == email.strip().lower(),
            )
            .scalar()
        )
    except SQLAlchemyError as exc:
        logger.error("Could not load current points for %s: %s", email, exc)
        raise DataUnavailableError() from exc
    return DinerPeriodPoints(period=period_info(period), total_points=int(total or 0))
