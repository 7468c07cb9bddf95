"""
Point awards for diner actions.

  visit                 10 flat (streak bonus is added by services/streak.py)
  review                25 base
                        +10 when the trimmed text is at least 20 characters
                        +5 per photo, photo bonus capped at 15
                        total capped at 50
  profile completion    25 once, when all four tracked fields are filled

Each bonus is computed separately and summed by the caller.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence


VISIT_POINTS = 10
REVIEW_BASE_POINTS = 25
DETAILED_REVIEW_MIN_CHARS = 20
DETAILED_REVIEW_BONUS = 10
PHOTO_POINTS_EACH = 5
PHOTO_BONUS_CAP = 15
REVIEW_POINTS_CAP = 50

PROFILE_COMPLETION_BONUS = 25
PROFILE_BIO_MIN_CHARS = 10


@dataclass
class PointsCalculation:
    base_points: int
    bonus_points: int
    total_points: int
    bonuses: list[str] = field(default_factory=list)


@dataclass
class ProfileCompletion:
    completion_percentage: int
    missing_fields: list[str]
    is_complete: bool
    bonus_awarded: bool
    bonus_points: int        # payable now; 0 once awarded


def calculate_visit_points() -> PointsCalculation:
    return PointsCalculation(
        base_points=VISIT_POINTS,
        bonus_points=0,
        total_points=VISIT_POINTS,
        bonuses=[],
    )


def calculate_review_points(
    review_text: Optional[str],
    photo_urls: Optional[Sequence[str]],
) -> PointsCalculation:
    bonus_points = 0
    bonuses: list[str] = []

    if review_text and len(review_text.strip()) >= DETAILED_REVIEW_MIN_CHARS:
        bonus_points += DETAILED_REVIEW_BONUS
        bonuses.append(f"+{DETAILED_REVIEW_BONUS} for detailed review")

    if photo_urls:
        count = len(photo_urls)
        photo_bonus = min(count * PHOTO_POINTS_EACH, PHOTO_BONUS_CAP)
        bonus_points += photo_bonus
        noun = "photo" if count == 1 else "photos"
        bonuses.append(f"+{photo_bonus} for {count} {noun}")

    return PointsCalculation(
        base_points=REVIEW_BASE_POINTS,
        bonus_points=bonus_points,
        total_points=min(REVIEW_BASE_POINTS + bonus_points, REVIEW_POINTS_CAP),
        bonuses=bonuses,
    )


def calculate_profile_completion(
    profile_photo_url: Optional[str],
    bio: Optional[str],
    dietary_preferences: Optional[str],
    location: Optional[str],
    bonus_awarded: bool = False,
) -> ProfileCompletion:
    """Score the four tracked profile fields and decide the one-time bonus."""
    checks = {
        "profile_photo_url": bool(profile_photo_url),
        "bio": bool(bio) and len(bio) >= PROFILE_BIO_MIN_CHARS,
        "dietary_preferences": bool(dietary_preferences),
        "location": bool(location),
    }
    missing = [name for name, ok in checks.items() if not ok]
    completed = len(checks) - len(missing)
    is_complete = not missing

    return ProfileCompletion(
        completion_percentage=round(completed / len(checks) * 100),
        missing_fields=missing,
        is_complete=is_complete,
        bonus_awarded=bonus_awarded,
        bonus_points=PROFILE_COMPLETION_BONUS if is_complete and not bonus_awarded else 0,
    )
