"""
Diner profile service: lazy creation, profile edits and the one-time
profile-completion bonus.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dishdisplay.core.errors import DinerNotFoundError
from dishdisplay.models.diner_profile import DinerProfile
from dishdisplay.services.points import ProfileCompletion, calculate_profile_completion

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "display_name",
    "profile_photo_url",
    "bio",
    "dietary_preferences",
    "location",
)


@dataclass
class ProfileUpdateResult:
    profile: DinerProfile
    completion: ProfileCompletion
    bonus_points_awarded: int


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_profile(db: Session, email: str) -> Optional[DinerProfile]:
    return (
        db.query(DinerProfile)
        .filter(DinerProfile.email == normalize_email(email))
        .first()
    )


def require_profile(db: Session, email: str) -> DinerProfile:
    profile = get_profile(db, email)
    if profile is None:
        raise DinerNotFoundError(email=normalize_email(email))
    return profile


def get_or_create_profile(
    db: Session,
    email: str,
    display_name: Optional[str] = None,
) -> DinerProfile:
    """Return the diner's profile, creating it on first interaction (flush only)."""
    profile = get_profile(db, email)
    if profile is not None:
        return profile

    profile = DinerProfile(
        email=normalize_email(email),
        display_name=display_name,
        total_points=0,
        total_visits=0,
        total_reviews=0,
        current_streak=0,
        longest_streak=0,
        profile_bonus_awarded=False,
    )
    try:
        with db.begin_nested():
            db.add(profile)
    except IntegrityError:
        # Created concurrently by another request
        profile = get_profile(db, email)
    else:
        logger.info("Created diner profile for %s", profile.email)
    return profile


def lock_profile(db: Session, profile: DinerProfile) -> DinerProfile:
    """
    Re-read the profile with a row lock so one diner's submissions are
    processed one at a time. SQLite ignores FOR UPDATE.
    """
    return (
        db.query(DinerProfile)
        .filter(DinerProfile.id == profile.id)
        .with_for_update()
        .populate_existing()
        .one()
    )


def profile_completion(profile: DinerProfile) -> ProfileCompletion:
    return calculate_profile_completion(
        profile_photo_url=profile.profile_photo_url,
        bio=profile.bio,
        dietary_preferences=profile.dietary_preferences,
        location=profile.location,
        bonus_awarded=profile.profile_bonus_awarded,
    )


def update_profile(db: Session, email: str, changes: dict) -> ProfileUpdateResult:
    """
    Apply profile edits. When the edit completes the profile for the first
    time, credit the one-time completion bonus to total_points.
    """
    profile = lock_profile(db, require_profile(db, email))
    for name, value in changes.items():
        if name in EDITABLE_FIELDS:
            setattr(profile, name, value)

    completion = profile_completion(profile)
    awarded = completion.bonus_points
    if awarded:
        profile.total_points = (profile.total_points or 0) + awarded
        profile.profile_bonus_awarded = True
        completion = profile_completion(profile)
        logger.info("Awarded %d profile-completion points to %s", awarded, profile.email)

    db.commit()
    db.refresh(profile)
    return ProfileUpdateResult(
        profile=profile,
        completion=completion,
        bonus_points_awarded=awarded,
    )
