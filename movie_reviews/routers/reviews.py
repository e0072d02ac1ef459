"""
Reviews Router

Endpoints for movie reviews and helpful votes.

Endpoints:
- GET /movies/{movie_id}/reviews - List reviews for a movie
- POST /movies/{movie_id}/reviews - Submit a review (authenticated)
- GET /reviews/{review_id} - Get a specific review
- PUT /reviews/{review_id} - Edit a review (author only)
- DELETE /reviews/{review_id} - Delete a review (author only)
- POST /reviews/{review_id}/helpful - Vote a review helpful or not helpful

Business Rules:
- One review per user per movie (409 on a second submit)
- Editing or deleting someone else's review looks exactly like editing a
  review that does not exist (404)
- Every submit, edit and delete refreshes the movie's averageRating and
  totalRatings
"""

import logging

from fastapi import APIRouter, Request, status

from movie_reviews.config import get_settings
from movie_reviews.dependencies import (
    ActiveUser,
    DbSession,
    Pagination,
    ReviewSort,
    get_movie_or_404,
)
from movie_reviews.schemas import (
    HelpfulVoteRequest,
    HelpfulVoteResponse,
    MessageResponse,
    PaginationMeta,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from movie_reviews.services import review_store, reviews
from movie_reviews.services.rate_limiter import limiter

logger = logging.getLogger(__name__)

settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    tags=["Reviews"],
    responses={
        404: {"description": "Review or movie not found"},
    },
)


# =============================================================================
# Movie Review Endpoints
# =============================================================================


@router.get(
    "/movies/{movie_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews for a movie",
    description="Get a paginated list of reviews for a movie, newest first by default.",
)
@limiter.limit(settings.rate_limit_default)
def list_movie_reviews(
    request: Request,
    movie_id: int,
    db: DbSession,
    pagination: Pagination,
    sort: ReviewSort,
) -> ReviewListResponse:
    """
    List the reviews of a movie.

    Query parameters:
        page, limit: pagination
        sortBy: createdAt | updatedAt | rating
        sortOrder: asc | desc
    """
    get_movie_or_404(db, movie_id)

    items, total = review_store.list_by_movie(
        db,
        movie_id,
        skip=pagination.skip,
        limit=pagination.limit,
        sort_by=sort.sort_by,
        descending=sort.descending,
    )

    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in items],
        pagination=PaginationMeta.build(pagination.page, pagination.limit, total),
    )


@router.post(
    "/movies/{movie_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review",
    description="Review a movie. Requires authentication. One review per movie per user.",
)
@limiter.limit(settings.rate_limit_write)
def create_review(
    request: Request,
    movie_id: int,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Submit a review for a movie.

    Raises:
        MovieNotFoundError: 404 if the movie does not exist
        DuplicateReviewError: 409 if the user already reviewed this movie
    """
    review = reviews.submit_review(
        db,
        user_id=current_user.id,
        movie_id=movie_id,
        rating=review_data.rating,
        review_text=review_data.review_text,
        is_spoiler=review_data.is_spoiler,
    )

    return ReviewResponse.model_validate(reviews.get_review(db, review.id))


# =============================================================================
# Individual Review Endpoints
# =============================================================================


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_review(
    request: Request,
    review_id: int,
    db: DbSession,
) -> ReviewResponse:
    return ReviewResponse.model_validate(reviews.get_review(db, review_id))


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Edit a review",
    description="Edit your own review. Only the provided fields change.",
)
@limiter.limit(settings.rate_limit_write)
def update_review(
    request: Request,
    review_id: int,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Edit an existing review.

    Raises:
        ReviewNotFoundOrForbiddenError: 404 if the review does not exist
            or belongs to another user
    """
    changes = review_data.model_dump(exclude_unset=True)
    reviews.edit_review(
        db,
        review_id=review_id,
        user_id=current_user.id,
        rating=changes.get("rating"),
        review_text=changes.get("review_text"),
        is_spoiler=changes.get("is_spoiler"),
    )

    return ReviewResponse.model_validate(reviews.get_review(db, review_id))


@router.delete(
    "/reviews/{review_id}",
    response_model=MessageResponse,
    summary="Delete a review",
    description="Delete your own review.",
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> MessageResponse:
    reviews.remove_review(db, review_id=review_id, user_id=current_user.id)
    return MessageResponse(message="Review deleted successfully")


@router.post(
    "/reviews/{review_id}/helpful",
    response_model=HelpfulVoteResponse,
    summary="Vote on a review",
    description="Mark a review helpful or not helpful. Voting again replaces your vote.",
)
@limiter.limit(settings.rate_limit_write)
def vote_helpful(
    request: Request,
    review_id: int,
    vote: HelpfulVoteRequest,
    db: DbSession,
    current_user: ActiveUser,
) -> HelpfulVoteResponse:
    tally = reviews.vote_helpful(
        db,
        review_id=review_id,
        user_id=current_user.id,
        is_helpful=vote.is_helpful,
    )

    return HelpfulVoteResponse(
        helpful_count=tally.helpful_count,
        not_helpful_count=tally.not_helpful_count,
    )
