"""
Anti-spam rules for diner visits and reviews.

Visit gate
----------
  One visit per diner per restaurant every 24 hours.

Review gates (fixed order, first failure wins)
----------------------------------------------
  1. COOLDOWN       one review per diner per restaurant every 7 days
  2. DAILY CAP      at most 3 reviews per diner per local day
  3. RECENT VISIT   a visit to the restaurant within the last 30 days

Boundaries pass: exactly 24 hours, 7 days or 30 days is allowed.

Content validation (rating 1-5, text <= 1000 characters) runs before any of
the gates above.

Pure functions: no DB, no clock. Callers pass `now` (tz-aware) explicitly.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


VISIT_COOLDOWN_HOURS = 24
REVIEW_COOLDOWN_DAYS = 7
MAX_REVIEWS_PER_DAY = 3
REVIEW_VISIT_WINDOW_DAYS = 30

MIN_RATING = 1
MAX_RATING = 5
MAX_REVIEW_TEXT_LENGTH = 1000

_HOUR = timedelta(hours=1)
_DAY = timedelta(days=1)

_DAILY_CAP_REASON = (
    "You can only submit up to 3 reviews per day. "
    "This helps maintain review quality and prevents spam."
)
_VISIT_REQUIRED_REASON = (
    "You need to have visited this restaurant within the last 30 days "
    "to leave a review. Please log a visit first!"
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class RateLimitResult:
    allowed: bool
    reason: Optional[str] = None
    retry_after: Optional[int] = None   # hours
    can_retry: Optional[bool] = None    # False: waiting will not help


@dataclass
class ContentValidation:
    valid: bool
    field: Optional[str] = None
    reason: Optional[str] = None


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


# ---------------------------------------------------------------------------
# Visits
# ---------------------------------------------------------------------------

def check_visit_rate_limit(
    last_visit_date: Optional[datetime],
    *,
    now: datetime,
) -> RateLimitResult:
    """`last_visit_date` is the diner's latest visit to *this* restaurant."""
    if last_visit_date is None:
        return RateLimitResult(allowed=True)

    hours_elapsed = (now - last_visit_date) / _HOUR
    if hours_elapsed < VISIT_COOLDOWN_HOURS:
        hours_remaining = math.ceil(VISIT_COOLDOWN_HOURS - hours_elapsed)
        return RateLimitResult(
            allowed=False,
            reason=(
                "You can only log one visit per restaurant every 24 hours. "
                f"Try again in {_plural(hours_remaining, 'hour')}."
            ),
            retry_after=hours_remaining,
            can_retry=True,
        )

    return RateLimitResult(allowed=True)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------

def check_review_rate_limit(
    last_review_date: Optional[datetime],
    today_review_count: int,
    last_visit_date: Optional[datetime],
    *,
    now: datetime,
) -> RateLimitResult:
    """
    Evaluate the three review gates against the diner's history for one
    restaurant. `today_review_count` spans all restaurants.
    """
    # 1. Cooldown
    if last_review_date is not None:
        days_elapsed = (now - last_review_date) / _DAY
        if days_elapsed < REVIEW_COOLDOWN_DAYS:
            days_remaining = math.ceil(REVIEW_COOLDOWN_DAYS - days_elapsed)
            return RateLimitResult(
                allowed=False,
                reason=(
                    "You can only submit one review per restaurant every 7 days. "
                    f"Try again in {_plural(days_remaining, 'day')}."
                ),
                retry_after=days_remaining * 24,
                can_retry=True,
            )

    # 2. Daily cap; resets at the local day boundary
    if today_review_count >= MAX_REVIEWS_PER_DAY:
        return RateLimitResult(allowed=False, reason=_DAILY_CAP_REASON, can_retry=True)

    # 3. Recent visit
    if last_visit_date is None:
        return RateLimitResult(allowed=False, reason=_VISIT_REQUIRED_REASON, can_retry=False)

    days_since_visit = (now - last_visit_date) / _DAY
    if days_since_visit > REVIEW_VISIT_WINDOW_DAYS:
        return RateLimitResult(allowed=False, reason=_VISIT_REQUIRED_REASON, can_retry=False)

    return RateLimitResult(allowed=True)


def validate_review_content(rating: int, review_text: Optional[str]) -> ContentValidation:
    if rating < MIN_RATING or rating > MAX_RATING:
        return ContentValidation(
            valid=False,
            field="rating",
            reason="Rating must be between 1 and 5 stars",
        )
    if review_text and len(review_text) > MAX_REVIEW_TEXT_LENGTH:
        return ContentValidation(
            valid=False,
            field="review_text",
            reason="Review text cannot exceed 1000 characters",
        )
    return ContentValidation(valid=True)
