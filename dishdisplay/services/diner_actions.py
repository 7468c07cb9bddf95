"""
Diner actions: log a visit, submit / edit / delete a review.

Order for every award (no step runs if an earlier one fails):
  validate content -> rate-limit check -> point calculation -> persist

Public API
----------
log_visit(db, email, restaurant_id, ...)        -> VisitOutcome
submit_review(db, email, restaurant_id, ...)    -> ReviewOutcome
update_review(db, review_id, email, ...)        -> (ContentValidation, DinerReview)
delete_review(db, review_id, email)             -> None
award_points(db, diner, ...)                    -> DinerPoints | None

Rate-limit and content failures come back inside the outcome objects; the
routers turn them into HTTP errors. The diner's profile row is locked for
the duration of an action so two submissions from one diner cannot both
pass the same advisory check. Deleted reviews are hidden, not removed, so
the history the rate limiter reads survives a delete.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dishdisplay.core.clock import as_utc, local_day, local_day_bounds, utc_now
from dishdisplay.core.errors import ReviewNotFoundError, ReviewOwnershipError
from dishdisplay.models.diner_profile import DinerProfile
from dishdisplay.models.points import DinerPoints, EarnedFrom
from dishdisplay.models.review import DinerReview
from dishdisplay.models.visit import DinerVisit
from dishdisplay.services.cache import TTLCache
from dishdisplay.services.leaderboard import get_active_period, invalidate_leaderboard_cache
from dishdisplay.services.points import (
    PointsCalculation,
    calculate_review_points,
    calculate_visit_points,
)
from dishdisplay.services.profile import (
    get_or_create_profile,
    lock_profile,
    normalize_email,
    require_profile,
)
from dishdisplay.services.rate_limiter import (
    ContentValidation,
    RateLimitResult,
    check_review_rate_limit,
    check_visit_rate_limit,
    validate_review_content,
)
from dishdisplay.services.streak import StreakUpdate, longest_streak, update_streak

logger = logging.getLogger(__name__)

_DUPLICATE_VISIT_REASON = (
    "You can only log one visit per restaurant every 24 hours. Try again tomorrow."
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class VisitOutcome:
    rate_limit: RateLimitResult
    visit: Optional[DinerVisit] = None
    points: Optional[PointsCalculation] = None
    streak: Optional[StreakUpdate] = None
    period_points_awarded: bool = False

    @property
    def total_points(self) -> int:
        if self.points is None:
            return 0
        return self.points.total_points + (self.streak.bonus_points if self.streak else 0)


@dataclass
class ReviewOutcome:
    validation: ContentValidation
    rate_limit: Optional[RateLimitResult] = None
    review: Optional[DinerReview] = None
    points: Optional[PointsCalculation] = None
    period_points_awarded: bool = False


@dataclass
class DinerHistory:
    """What the rate limiter needs to know about one diner and restaurant."""
    last_visit_date: Optional[datetime] = None
    last_review_date: Optional[datetime] = None
    today_review_count: int = 0


# ---------------------------------------------------------------------------
# Store reads
# ---------------------------------------------------------------------------

def _last_visit_date(db: Session, diner_id: int, restaurant_id: str) -> Optional[datetime]:
    value = (
        db.query(func.max(DinerVisit.visit_date))
        .filter(DinerVisit.diner_id == diner_id, DinerVisit.restaurant_id == restaurant_id)
        .scalar()
    )
    return as_utc(value) if value is not None else None


def _last_review_date(db: Session, diner_id: int, restaurant_id: str) -> Optional[datetime]:
    value = (
        db.query(func.max(DinerReview.created_at))
        .filter(DinerReview.diner_id == diner_id, DinerReview.restaurant_id == restaurant_id)
        .scalar()
    )
    return as_utc(value) if value is not None else None


def _today_review_count(db: Session, diner_id: int, now: datetime) -> int:
    start, end = local_day_bounds(local_day(now))
    return (
        db.query(func.count(DinerReview.id))
        .filter(
            DinerReview.diner_id == diner_id,
            DinerReview.created_at >= start,
            DinerReview.created_at < end,
        )
        .scalar()
        or 0
    )


def review_history(db: Session, diner_id: int, restaurant_id: str, now: datetime) -> DinerHistory:
    return DinerHistory(
        last_visit_date=_last_visit_date(db, diner_id, restaurant_id),
        last_review_date=_last_review_date(db, diner_id, restaurant_id),
        today_review_count=_today_review_count(db, diner_id, now),
    )


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

def _ledger_entry_exists(db: Session, diner_id: int, source_id: str) -> bool:
    return (
        db.query(DinerPoints.id)
        .filter(DinerPoints.diner_id == diner_id, DinerPoints.source_id == source_id)
        .first()
        is not None
    )


def award_points(
    db: Session,
    diner: DinerProfile,
    points: int,
    earned_from: EarnedFrom,
    source_id: str,
    restaurant_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[DinerPoints]:
    """
    Add a ledger entry to the active period. Returns None when there is no
    active period or the (diner, source_id) pair was already awarded.
    Flushes only; the caller commits.
    """
    period = get_active_period(db)
    if period is None:
        logger.warning(
            "No active period; %s points for %s (%s) not added to the leaderboard",
            points, diner.email, source_id,
        )
        return None

    if _ledger_entry_exists(db, diner.id, source_id):
        return None

    entry = DinerPoints(
        diner_id=diner.id,
        leaderboard_period_id=period.id,
        points=points,
        earned_from=earned_from,
        restaurant_id=restaurant_id,
        source_id=source_id,
        created_at=now or utc_now(),
    )
    try:
        with db.begin_nested():
            db.add(entry)
    except IntegrityError:
        # Another delivery of the same award won the race
        return None
    return entry


# ---------------------------------------------------------------------------
# Visits
# ---------------------------------------------------------------------------

def log_visit(
    db: Session,
    email: str,
    restaurant_id: str,
    display_name: Optional[str] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
    cache: Optional[TTLCache] = None,
) -> VisitOutcome:
    now = now or utc_now()
    diner = lock_profile(db, get_or_create_profile(db, email, display_name))

    rate_limit = check_visit_rate_limit(_last_visit_date(db, diner.id, restaurant_id), now=now)
    if not rate_limit.allowed:
        logger.info("Visit denied for %s at %s: %s", diner.email, restaurant_id, rate_limit.reason)
        db.rollback()
        return VisitOutcome(rate_limit=rate_limit)

    today = local_day(now)
    points = calculate_visit_points()
    streak = update_streak(diner.last_visit_date, diner.current_streak or 0, today=today)
    total = points.total_points + streak.bonus_points

    visit = DinerVisit(
        diner_id=diner.id,
        restaurant_id=restaurant_id,
        visit_date=now,
        visit_day=today,
        notes=notes or "Visited via QR code menu",
        points_earned=total,
        streak_bonus=streak.bonus_points,
    )
    try:
        with db.begin_nested():
            db.add(visit)
    except IntegrityError:
        db.rollback()
        return VisitOutcome(rate_limit=RateLimitResult(
            allowed=False, reason=_DUPLICATE_VISIT_REASON, can_retry=True,
        ))

    diner.total_visits = (diner.total_visits or 0) + 1
    diner.total_points = (diner.total_points or 0) + total
    diner.current_streak = streak.new_streak
    diner.longest_streak = longest_streak(diner.longest_streak or 0, streak.new_streak)
    diner.last_visit_date = today
    if display_name and not diner.display_name:
        diner.display_name = display_name

    entry = award_points(
        db, diner, total, EarnedFrom.visit,
        source_id=f"visit:{visit.id}",
        restaurant_id=restaurant_id,
        now=now,
    )
    db.commit()
    db.refresh(visit)
    invalidate_leaderboard_cache(cache)

    logger.info(
        "Visit %s logged for %s at %s: +%d points (streak %d)",
        visit.id, diner.email, restaurant_id, total, streak.new_streak,
    )
    return VisitOutcome(
        rate_limit=rate_limit,
        visit=visit,
        points=points,
        streak=streak,
        period_points_awarded=entry is not None,
    )


def list_visits(db: Session, email: str, limit: int = 50) -> list[DinerVisit]:
    diner = require_profile(db, email)
    return (
        db.query(DinerVisit)
        .filter(DinerVisit.diner_id == diner.id)
        .order_by(DinerVisit.visit_date.desc(), DinerVisit.id.desc())
        .limit(limit)
        .all()
    )


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------

def submit_review(
    db: Session,
    email: str,
    restaurant_id: str,
    rating: int,
    review_text: Optional[str] = None,
    photo_urls: Optional[Sequence[str]] = None,
    menu_item_id: Optional[str] = None,
    display_name: Optional[str] = None,
    now: Optional[datetime] = None,
    cache: Optional[TTLCache] = None,
) -> ReviewOutcome:
    now = now or utc_now()
    photos = list(photo_urls or [])

    validation = validate_review_content(rating, review_text)
    if not validation.valid:
        return ReviewOutcome(validation=validation)

    diner = lock_profile(db, get_or_create_profile(db, email, display_name))
    history = review_history(db, diner.id, restaurant_id, now)
    rate_limit = check_review_rate_limit(
        history.last_review_date,
        history.today_review_count,
        history.last_visit_date,
        now=now,
    )
    if not rate_limit.allowed:
        logger.info("Review denied for %s at %s: %s", diner.email, restaurant_id, rate_limit.reason)
        db.rollback()
        return ReviewOutcome(validation=validation, rate_limit=rate_limit)

    points = calculate_review_points(review_text, photos)
    review = DinerReview(
        diner_id=diner.id,
        restaurant_id=restaurant_id,
        menu_item_id=menu_item_id,
        rating=rating,
        review_text=review_text,
        photo_urls=photos,
        points_earned=points.total_points,
        created_at=now,
    )
    db.add(review)
    db.flush()

    diner.total_reviews = (diner.total_reviews or 0) + 1
    diner.total_points = (diner.total_points or 0) + points.total_points

    entry = award_points(
        db, diner, points.total_points, EarnedFrom.review,
        source_id=f"review:{review.id}",
        restaurant_id=restaurant_id,
        now=now,
    )
    db.commit()
    db.refresh(review)
    invalidate_leaderboard_cache(cache)

    logger.info(
        "Review %s by %s at %s: +%d points %s",
        review.id, diner.email, restaurant_id, points.total_points, points.bonuses,
    )
    return ReviewOutcome(
        validation=validation,
        rate_limit=rate_limit,
        review=review,
        points=points,
        period_points_awarded=entry is not None,
    )


def _owned_review(db: Session, review_id: int, email: str) -> DinerReview:
    review = db.get(DinerReview, review_id)
    if review is None or review.deleted_at is not None:
        raise ReviewNotFoundError(review_id=review_id)
    diner = require_profile(db, email)
    if review.diner_id != diner.id:
        raise ReviewOwnershipError(review_id=review_id)
    return review


def update_review(
    db: Session,
    review_id: int,
    email: str,
    rating: Optional[int] = None,
    review_text: Optional[str] = None,
) -> tuple[ContentValidation, DinerReview]:
    """Edit rating and/or text. Points are never re-awarded."""
    review = _owned_review(db, review_id, email)
    new_rating = review.rating if rating is None else rating
    new_text = review.review_text if review_text is None else review_text

    validation = validate_review_content(new_rating, new_text)
    if not validation.valid:
        return validation, review

    review.rating = new_rating
    review.review_text = new_text
    db.commit()
    db.refresh(review)
    return validation, review


def delete_review(
    db: Session,
    review_id: int,
    email: str,
    now: Optional[datetime] = None,
) -> None:
    """
    Hide the review. The row stays so it keeps counting toward the
    per-restaurant cooldown and the daily cap; points are not taken back.
    """
    review = _owned_review(db, review_id, email)
    review.deleted_at = now or utc_now()
    db.commit()
    logger.info("Review %s deleted by %s", review_id, normalize_email(email))


def list_reviews(db: Session, email: str, limit: int = 50) -> list[DinerReview]:
    diner = require_profile(db, email)
    return (
        db.query(DinerReview)
        .filter(DinerReview.diner_id == diner.id, DinerReview.deleted_at.is_(None))
        .order_by(DinerReview.created_at.desc(), DinerReview.id.desc())
        .limit(limit)
        .all()
    )


def list_restaurant_reviews(db: Session, restaurant_id: str, limit: int = 50) -> list[DinerReview]:
    return (
        db.query(DinerReview)
        .filter(DinerReview.restaurant_id == restaurant_id, DinerReview.deleted_at.is_(None))
        .order_by(DinerReview.created_at.desc(), DinerReview.id.desc())
        .limit(limit)
        .all()
    )
