"""
Review Lifecycle Service

Business rules for creating, editing and deleting reviews and for helpful
votes. Every review mutation goes through this module, and this module is
the only request-path caller of the rating aggregator.

Flow for submit / edit / remove:
1. Validate input
2. Check preconditions (movie exists, no duplicate, caller owns review)
3. Write and commit the review change
4. Recompute the movie's rating aggregate (services.ratings)

Step 4 runs after the commit and its failure is logged, never raised: the
review is the source of truth, the aggregate is a cache that the next
successful recompute repairs.

Helpful votes skip step 4; they do not affect the rating aggregate.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from movie_reviews.exceptions import (
    AggregationFailure,
    ConflictError,
    DuplicateReviewError,
    MovieNotFoundError,
    NotFoundError,
    ReviewNotFoundError,
    ReviewNotFoundOrForbiddenError,
    ReviewValidationError,
)
from movie_reviews.models.review import Review, ReviewVote
from movie_reviews.models.user import User
from movie_reviews.services import movie_store, review_store
from movie_reviews.services.helpful import HelpfulTally, apply_vote, tally_votes
from movie_reviews.services.ratings import (
    RatingAggregate,
    compute_aggregate,
    recompute_movie_rating,
)

logger = logging.getLogger(__name__)

RATING_MIN = 1
RATING_MAX = 5
REVIEW_TEXT_MAX_LENGTH = 2000

# Retries when two requests from the same user race to insert a vote
VOTE_ATTEMPTS = 3


# =============================================================================
# Validation
# =============================================================================


def clean_review_input(
    *,
    rating: int | None = None,
    review_text: str | None = None,
    is_spoiler: bool | None = None,
    partial: bool = False,
) -> dict:
    """
    Validate review fields and return the cleaned values.

    With ``partial=True`` (edits) fields left as None are skipped;
    otherwise rating and review_text are required.

    Returns:
        Dict of model field name -> cleaned value

    Raises:
        ReviewValidationError: listing every invalid field
    """
    errors: list[dict[str, str]] = []
    cleaned: dict = {}

    if rating is not None or not partial:
        if (
            isinstance(rating, bool)
            or not isinstance(rating, int)
            or not RATING_MIN <= rating <= RATING_MAX
        ):
            errors.append({"field": "rating", "message": "Rating must be between 1 and 5"})
        else:
            cleaned["rating"] = rating

    if review_text is not None or not partial:
        text = review_text.strip() if isinstance(review_text, str) else ""
        if not text:
            errors.append({"field": "reviewText", "message": "Review text is required"})
        elif len(text) > REVIEW_TEXT_MAX_LENGTH:
            errors.append({
                "field": "reviewText",
                "message": f"Review cannot exceed {REVIEW_TEXT_MAX_LENGTH} characters",
            })
        else:
            cleaned["review_text"] = text

    if is_spoiler is not None:
        if not isinstance(is_spoiler, bool):
            errors.append({"field": "isSpoiler", "message": "isSpoiler must be a boolean"})
        else:
            cleaned["is_spoiler"] = is_spoiler
    elif not partial:
        cleaned["is_spoiler"] = False

    if errors:
        raise ReviewValidationError(errors)
    return cleaned


def _user_exists(db: Session, user_id: int) -> bool:
    return db.execute(
        select(User.id).where(User.id == user_id)
    ).scalar_one_or_none() is not None


def _refresh_movie_rating(db: Session, movie_id: int) -> None:
    try:
        recompute_movie_rating(db, movie_id)
    except AggregationFailure:
        logger.exception(f"Rating aggregate for movie {movie_id} is stale")


# =============================================================================
# Reads
# =============================================================================


def get_review(db: Session, review_id: int) -> Review:
    review = review_store.get_review(db, review_id)
    if review is None:
        raise ReviewNotFoundError(review_id)
    return review


def user_review_stats(db: Session, user_id: int) -> RatingAggregate:
    """Number of reviews a user wrote and the mean rating they gave."""
    count, total = review_store.user_review_summary(db, user_id)
    return compute_aggregate(count, total)


# =============================================================================
# Mutations
# =============================================================================


def submit_review(
    db: Session,
    *,
    user_id: int,
    movie_id: int,
    rating: int,
    review_text: str,
    is_spoiler: bool = False,
) -> Review:
    """
    Create a user's review of a movie and refresh the movie's rating.

    Raises:
        ReviewValidationError: rating or text out of range
        MovieNotFoundError: the movie does not exist
        NotFoundError: the author was deleted before the review was saved
        DuplicateReviewError: the user already reviewed this movie
    """
    fields = clean_review_input(
        rating=rating,
        review_text=review_text,
        is_spoiler=is_spoiler,
    )

    if not movie_store.movie_exists(db, movie_id):
        raise MovieNotFoundError(movie_id)

    if review_store.find_by_user_and_movie(db, user_id, movie_id) is not None:
        raise DuplicateReviewError(user_id, movie_id)

    review = Review(user_id=user_id, movie_id=movie_id, **fields)
    try:
        review_store.insert_review(db, review)
    except IntegrityError as exc:
        # Foreign key failure: the movie or the author was deleted after the checks above
        if not movie_store.movie_exists(db, movie_id):
            raise MovieNotFoundError(movie_id) from exc
        if not _user_exists(db, user_id):
            raise NotFoundError("User not found") from exc
        raise
    db.commit()

    logger.info(
        f"Review {review.id} submitted: user={user_id} movie={movie_id} rating={review.rating}"
    )
    _refresh_movie_rating(db, movie_id)
    return review


def edit_review(
    db: Session,
    *,
    review_id: int,
    user_id: int,
    rating: int | None = None,
    review_text: str | None = None,
    is_spoiler: bool | None = None,
) -> Review:
    """
    Update the author's own review and refresh the movie's rating.

    The ownership check and the update share one locked read, so the
    review cannot be deleted between them.

    Raises:
        ReviewValidationError: a provided field is out of range
        ReviewNotFoundOrForbiddenError: no such review, or not the author's
    """
    changes = clean_review_input(
        rating=rating,
        review_text=review_text,
        is_spoiler=is_spoiler,
        partial=True,
    )

    review = review_store.get_owned_review(db, review_id, user_id, lock=True)
    if review is None:
        db.rollback()
        raise ReviewNotFoundOrForbiddenError(review_id, "edit")

    movie_id = review.movie_id
    review_store.apply_review_changes(review, changes)
    db.commit()

    logger.info(f"Review {review_id} edited by user {user_id}: {sorted(changes)}")
    _refresh_movie_rating(db, movie_id)
    return review


def remove_review(db: Session, *, review_id: int, user_id: int) -> int:
    """
    Delete the author's own review and refresh the movie's rating.

    Returns:
        ID of the movie the review belonged to

    Raises:
        ReviewNotFoundOrForbiddenError: no such review, or not the author's
    """
    review = review_store.get_owned_review(db, review_id, user_id, lock=True)
    if review is None:
        db.rollback()
        raise ReviewNotFoundOrForbiddenError(review_id, "delete")

    movie_id = review.movie_id
    review_store.delete_review(db, review)
    db.commit()

    logger.info(f"Review {review_id} deleted by user {user_id}")
    _refresh_movie_rating(db, movie_id)
    return movie_id


def vote_helpful(
    db: Session,
    *,
    review_id: int,
    user_id: int,
    is_helpful: bool,
) -> HelpfulTally:
    """
    Record or change a user's helpful vote on a review.

    The review row is locked while the vote is applied, so votes on the
    same review are applied one at a time and none is lost.

    Raises:
        ReviewValidationError: is_helpful is not a boolean
        ReviewNotFoundError: the review does not exist
    """
    if not isinstance(is_helpful, bool):
        raise ReviewValidationError.for_field("isHelpful", "isHelpful must be a boolean value")

    for _ in range(VOTE_ATTEMPTS):
        review = review_store.get_review(db, review_id, lock=True)
        if review is None:
            db.rollback()
            raise ReviewNotFoundError(review_id)

        apply_vote(
            review.helpful,
            user_id,
            is_helpful,
            lambda: ReviewVote(user_id=user_id, is_helpful=is_helpful),
        )
        try:
            db.commit()
        except IntegrityError:
            # Another request by the same user inserted first; update it instead
            db.rollback()
            logger.info(f"Concurrent vote by user {user_id} on review {review_id}, retrying")
            continue

        return tally_votes(review.helpful)

    raise ConflictError("Could not record vote, please try again")


def purge_movie_reviews(db: Session, movie_id: int) -> int:
    """
    Delete all reviews of a movie as part of deleting the movie.

    Does not commit; the caller commits together with the movie delete.

    Returns:
        Number of reviews deleted
    """
    removed = review_store.delete_all_by_movie(db, movie_id)
    logger.info(f"Purged {removed} review(s) of movie {movie_id}")
    return removed
