"""
Users Router

Public review history of a user.

Endpoints:
- GET /users/{user_id}/reviews - Reviews written by a user, newest first
- GET /users/{user_id}/review-stats - Review count and mean rating given

Profiles and accounts are owned by the identity service.
"""

from fastapi import APIRouter, Request

from movie_reviews.config import get_settings
from movie_reviews.dependencies import DbSession, Pagination, get_user_or_404
from movie_reviews.schemas import (
    PaginationMeta,
    ReviewListResponse,
    ReviewResponse,
    UserReviewStats,
)
from movie_reviews.services import review_store
from movie_reviews.services.rate_limiter import limiter
from movie_reviews.services.reviews import user_review_stats

settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        404: {"description": "User not found"},
    },
)


@router.get(
    "/{user_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews by a user",
    description="Get a paginated list of reviews written by a specific user.",
)
@limiter.limit(settings.rate_limit_default)
def list_user_reviews(
    request: Request,
    user_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    get_user_or_404(db, user_id)

    items, total = review_store.list_by_user(
        db,
        user_id,
        skip=pagination.skip,
        limit=pagination.limit,
    )

    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in items],
        pagination=PaginationMeta.build(pagination.page, pagination.limit, total),
    )


@router.get(
    "/{user_id}/review-stats",
    response_model=UserReviewStats,
    summary="Get a user's review statistics",
)
@limiter.limit(settings.rate_limit_default)
def get_user_review_stats(
    request: Request,
    user_id: int,
    db: DbSession,
) -> UserReviewStats:
    """
    Number of reviews the user wrote and the mean rating they gave,
    rounded half-up to one decimal (0 when they have no reviews).
    """
    get_user_or_404(db, user_id)

    stats = user_review_stats(db, user_id)
    return UserReviewStats(
        user_id=user_id,
        total_reviews=stats.total_ratings,
        average_rating=stats.average_rating,
    )
