"""
Ratings Service

Maintains the denormalized rating fields on the Movie model:
- average_rating: mean of all review ratings, rounded half-up to 1 decimal
- total_ratings: number of reviews

The aggregate is always recomputed from the full review set (COUNT/SUM),
never adjusted incrementally, so concurrent edits and deletes cannot make
it drift. The review lifecycle service calls recompute_movie_rating after
every committed create/update/delete.

Concurrency:
Recomputes for the same movie are serialized twice over: by an in-process
lock keyed on the movie id (sync routes share a thread pool) and by a row
lock on the movie (SELECT ... FOR UPDATE) for other processes. The review
totals are read after the lock is held, so the last recompute to finish
always sees every committed review.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from movie_reviews.config import get_settings
from movie_reviews.exceptions import AggregationFailure
from movie_reviews.models.movie import Movie
from movie_reviews.services import movie_store, review_store

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class RatingAggregate:
    average_rating: Decimal
    total_ratings: int


def round_rating(value: Decimal | float | int) -> Decimal:
    """
    Round a mean rating to one decimal place, halves away from zero.

    Example:
        >>> round_rating(Decimal("3.95"))
        Decimal('4.0')
        >>> round_rating(Decimal("3.94"))
        Decimal('3.9')
    """
    return Decimal(str(value)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def compute_aggregate(count: int, total: int) -> RatingAggregate:
    """
    Build the aggregate from a review count and rating sum.

    The division is done in Decimal so means like 3.95 round exactly.
    """
    if count == 0:
        return RatingAggregate(average_rating=Decimal("0.0"), total_ratings=0)
    mean = Decimal(total) / Decimal(count)
    return RatingAggregate(average_rating=round_rating(mean), total_ratings=count)


# =============================================================================
# Per-movie serialization
# =============================================================================

# movie id -> (lock, number of threads holding or waiting for it).
# Entries are dropped when the count reaches zero.
_movie_locks: dict[int, tuple[threading.Lock, int]] = {}
_movie_locks_guard = threading.Lock()


@contextmanager
def movie_rating_lock(movie_id: int) -> Iterator[None]:
    with _movie_locks_guard:
        lock, holders = _movie_locks.get(movie_id, (None, 0))
        if lock is None:
            lock = threading.Lock()
        _movie_locks[movie_id] = (lock, holders + 1)

    try:
        with lock:
            yield
    finally:
        with _movie_locks_guard:
            _, holders = _movie_locks[movie_id]
            if holders == 1:
                del _movie_locks[movie_id]
            else:
                _movie_locks[movie_id] = (lock, holders - 1)


def _recompute_once(db: Session, movie_id: int) -> RatingAggregate | None:
    if not movie_store.lock_movie(db, movie_id):
        db.rollback()
        logger.debug(f"Movie {movie_id} no longer exists; skipping rating recompute")
        return None

    count, total = review_store.rating_totals(db, movie_id)
    aggregate = compute_aggregate(count, total)

    if not movie_store.set_rating_aggregate(
        db, movie_id, aggregate.average_rating, aggregate.total_ratings
    ):
        db.rollback()
        return None

    db.commit()
    logger.debug(
        f"Movie {movie_id} rating recomputed: "
        f"{aggregate.average_rating} from {aggregate.total_ratings} review(s)"
    )
    return aggregate


def recompute_movie_rating(
    db: Session,
    movie_id: int,
    *,
    attempts: int | None = None,
) -> RatingAggregate | None:
    """
    Recalculate and persist a movie's rating aggregate.

    Must be called after the triggering review write has been committed.
    Calling it twice with no review change in between stores the same
    values both times.

    Args:
        db: Database session (no pending changes)
        movie_id: ID of the movie to update
        attempts: Override for settings.rating_recompute_attempts

    Returns:
        The stored aggregate, or None if the movie does not exist

    Raises:
        AggregationFailure: if every attempt failed with a database error

    Note:
        This function commits.
    """
    attempts = attempts or get_settings().rating_recompute_attempts
    last_error: SQLAlchemyError | None = None

    for attempt in range(1, attempts + 1):
        try:
            with movie_rating_lock(movie_id):
                return _recompute_once(db, movie_id)
        except SQLAlchemyError as exc:
            db.rollback()
            last_error = exc
            logger.warning(
                f"Rating recompute for movie {movie_id} failed "
                f"(attempt {attempt}/{attempts}): {exc}"
            )

    raise AggregationFailure(movie_id, attempts) from last_error


def recompute_all_movie_ratings(db: Session) -> tuple[int, int]:
    """
    Recalculate rating aggregations for all movies.

    Useful for data migrations or repairing aggregates that went stale
    after an aggregation failure.

    Returns:
        (number of movies updated, number of movies that failed)
    """
    movie_ids = db.execute(select(Movie.id).order_by(Movie.id)).scalars().all()

    updated = 0
    failed = 0
    for movie_id in movie_ids:
        try:
            if recompute_movie_rating(db, movie_id) is not None:
                updated += 1
        except AggregationFailure:
            logger.exception(f"Could not recompute rating for movie {movie_id}")
            failed += 1

    return updated, failed
