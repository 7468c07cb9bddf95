"""
Reviews router.

POST   /diners/reviews                      - submit a review (25 to 50 points)
GET    /diners/reviews                      - a diner's reviews
PATCH  /diners/reviews/{review_id}          - edit rating/text (no new points)
DELETE /diners/reviews/{review_id}          - delete own review
GET    /restaurants/{restaurant_id}/reviews - a restaurant's reviews
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from dishdisplay.core.clock import as_utc
from dishdisplay.core.errors import RateLimitExceededError, ReviewContentError
from dishdisplay.db.base import get_db
from dishdisplay.models.review import DinerReview
from dishdisplay.schemas.common import PointsBreakdown
from dishdisplay.schemas.review import (
    ReviewOut,
    SubmitReviewRequest,
    SubmitReviewResponse,
    UpdateReviewRequest,
)
from dishdisplay.services.cache import TTLCache, get_leaderboard_cache
from dishdisplay.services.diner_actions import (
    delete_review,
    list_restaurant_reviews,
    list_reviews,
    submit_review,
    update_review,
)
from dishdisplay.services.rate_limiter import ContentValidation

router = APIRouter(tags=["reviews"])


def _review_to_out(r: DinerReview) -> ReviewOut:
    return ReviewOut(
        id=r.id,
        restaurant_id=r.restaurant_id,
        menu_item_id=r.menu_item_id,
        rating=r.rating,
        review_text=r.review_text,
        photo_urls=list(r.photo_urls or []),
        points_earned=r.points_earned,
        created_at=as_utc(r.created_at).isoformat() if r.created_at else "",
    )


def _raise_if_invalid(validation: ContentValidation) -> None:
    if not validation.valid:
        raise ReviewContentError(field=validation.field, reason=validation.reason)


@router.post(
    "/diners/reviews",
    response_model=SubmitReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review",
    responses={
        201: {"description": "Review stored and points awarded."},
        422: {"description": "Rating or text rejected (REVIEW_VALIDATION_ERROR)."},
        429: {"description": "Cooldown, daily cap, or no recent visit (RATE_LIMITED)."},
    },
)
def create_review(
    payload: SubmitReviewRequest,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_leaderboard_cache),
):
    """
    Submit a review. Checks run in order and the first failure wins:

    1. rating 1-5 and text of at most 1000 characters
    2. one review per restaurant every 7 days
    3. at most 3 reviews per day
    4. a visit to the restaurant within the last 30 days
       (`details.can_retry` is false: log a visit first)
    """
    outcome = submit_review(
        db=db,
        email=payload.diner_email,
        restaurant_id=payload.restaurant_id,
        rating=payload.rating,
        review_text=payload.review_text,
        photo_urls=payload.photo_urls,
        menu_item_id=payload.menu_item_id,
        display_name=payload.display_name,
        cache=cache,
    )
    _raise_if_invalid(outcome.validation)
    if not outcome.rate_limit.allowed:
        raise RateLimitExceededError(
            reason=outcome.rate_limit.reason,
            can_retry=bool(outcome.rate_limit.can_retry),
            retry_after=outcome.rate_limit.retry_after,
        )

    p = outcome.points
    return SubmitReviewResponse(
        review=_review_to_out(outcome.review),
        points=PointsBreakdown(
            base_points=p.base_points,
            bonus_points=p.bonus_points,
            total_points=p.total_points,
            bonuses=p.bonuses,
        ),
        period_points_awarded=outcome.period_points_awarded,
    )


@router.get(
    "/diners/reviews",
    response_model=list[ReviewOut],
    summary="Reviews written by a diner",
)
def get_diner_reviews(
    email: str = Query(description="Diner email."),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return [_review_to_out(r) for r in list_reviews(db=db, email=email, limit=limit)]


@router.patch(
    "/diners/reviews/{review_id}",
    response_model=ReviewOut,
    summary="Edit a review",
    responses={
        403: {"description": "Review belongs to another diner."},
        404: {"description": "Review not found."},
    },
)
def patch_review(review_id: int, payload: UpdateReviewRequest, db: Session = Depends(get_db)):
    """Change rating and/or text. Points earned at submission are kept as-is."""
    validation, review = update_review(
        db=db,
        review_id=review_id,
        email=payload.diner_email,
        rating=payload.rating,
        review_text=payload.review_text,
    )
    _raise_if_invalid(validation)
    return _review_to_out(review)


@router.delete(
    "/diners/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
)
def remove_review(
    review_id: int,
    email: str = Query(description="Email of the review's author."),
    db: Session = Depends(get_db),
):
    delete_review(db=db, review_id=review_id, email=email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/restaurants/{restaurant_id}/reviews",
    response_model=list[ReviewOut],
    summary="Reviews of a restaurant, newest first",
)
def get_restaurant_reviews(
    restaurant_id: str,
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return [
        _review_to_out(r)
        for r in list_restaurant_reviews(db=db, restaurant_id=restaurant_id, limit=limit)
    ]
