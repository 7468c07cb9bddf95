"""
Diner profile router.

GET   /diners/profile             - profile and lifetime counters
PATCH /diners/profile             - edit profile; completing it pays +25 once
GET   /diners/streak              - current / longest visit streak
GET   /diners/profile-completion  - completion percentage and missing fields
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dishdisplay.db.base import get_db
from dishdisplay.models.diner_profile import DinerProfile
from dishdisplay.schemas.profile import (
    ProfileCompletionOut,
    ProfileOut,
    StreakStatus,
    UpdateProfileRequest,
    UpdateProfileResponse,
)
from dishdisplay.services.points import ProfileCompletion
from dishdisplay.services.profile import (
    get_profile,
    profile_completion,
    require_profile,
    update_profile,
)
from dishdisplay.services.streak import STREAK_BONUS_THRESHOLD

router = APIRouter(prefix="/diners", tags=["profile"])


def _profile_to_out(p: DinerProfile) -> ProfileOut:
    return ProfileOut(
        id=p.id,
        email=p.email,
        display_name=p.display_name,
        profile_photo_url=p.profile_photo_url,
        bio=p.bio,
        dietary_preferences=p.dietary_preferences,
        location=p.location,
        total_points=p.total_points,
        total_visits=p.total_visits,
        total_reviews=p.total_reviews,
        current_streak=p.current_streak,
        longest_streak=p.longest_streak,
        last_visit_date=str(p.last_visit_date) if p.last_visit_date else None,
    )


def _completion_to_out(c: ProfileCompletion) -> ProfileCompletionOut:
    return ProfileCompletionOut(
        completion_percentage=c.completion_percentage,
        missing_fields=c.missing_fields,
        is_complete=c.is_complete,
        bonus_awarded=c.bonus_awarded,
        bonus_points=c.bonus_points,
    )


@router.get(
    "/profile",
    response_model=ProfileOut,
    summary="Diner profile",
    responses={404: {"description": "Unknown diner."}},
)
def read_profile(email: str = Query(description="Diner email."), db: Session = Depends(get_db)):
    return _profile_to_out(require_profile(db, email))


@router.patch(
    "/profile",
    response_model=UpdateProfileResponse,
    summary="Edit a diner profile",
    responses={404: {"description": "Unknown diner."}},
)
def edit_profile(payload: UpdateProfileRequest, db: Session = Depends(get_db)):
    """
    Update any subset of the profile fields. Only fields present in the
    request body are changed.

    When photo, bio (10+ characters), dietary preferences and location are
    all filled for the first time, a one-time **+25** bonus is credited.
    """
    changes = payload.model_dump(exclude_unset=True, exclude={"diner_email"})
    result = update_profile(db=db, email=payload.diner_email, changes=changes)
    return UpdateProfileResponse(
        profile=_profile_to_out(result.profile),
        completion=_completion_to_out(result.completion),
        bonus_points_awarded=result.bonus_points_awarded,
    )


@router.get("/streak", response_model=StreakStatus, summary="Visit streak")
def read_streak(email: str = Query(description="Diner email."), db: Session = Depends(get_db)):
    """Zeros for diners who have not interacted yet."""
    profile = get_profile(db, email)
    if profile is None:
        return StreakStatus(current_streak=0, longest_streak=0, last_visit_date=None, bonus_active=False)
    return StreakStatus(
        current_streak=profile.current_streak,
        longest_streak=profile.longest_streak,
        last_visit_date=str(profile.last_visit_date) if profile.last_visit_date else None,
        bonus_active=profile.current_streak >= STREAK_BONUS_THRESHOLD,
    )


@router.get(
    "/profile-completion",
    response_model=ProfileCompletionOut,
    summary="Profile completion status",
    responses={404: {"description": "Unknown diner."}},
)
def read_profile_completion(
    email: str = Query(description="Diner email."),
    db: Session = Depends(get_db),
):
    return _completion_to_out(profile_completion(require_profile(db, email)))
