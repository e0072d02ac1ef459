"""
Review Store

Data access for Review rows. Functions here never commit; the lifecycle
service decides transaction boundaries.

The one-review-per-user-per-movie rule is enforced by the
uq_review_user_movie constraint, so a racing second insert fails in the
database even if both requests passed the application-level check.
"""

from typing import Literal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from movie_reviews.exceptions import DuplicateReviewError
from movie_reviews.models.review import Review, ReviewVote

ReviewSortField = Literal["created_at", "updated_at", "rating"]

_SORT_COLUMNS = {
    "created_at": Review.created_at,
    "updated_at": Review.updated_at,
    "rating": Review.rating,
}


def _with_relations(stmt):
    return stmt.options(
        selectinload(Review.user),
        selectinload(Review.movie),
        selectinload(Review.helpful),
    )


def insert_review(db: Session, review: Review) -> Review:
    """
    Add a review and flush it so constraint violations surface now.

    A failed flush rolls the session back before raising.

    Raises:
        DuplicateReviewError: if the user already reviewed the movie
    """
    db.add(review)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if _is_unique_violation(exc):
            raise DuplicateReviewError(review.user_id, review.movie_id) from exc
        raise
    return review


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "uq_review_user_movie" in message or "unique" in message


def get_review(db: Session, review_id: int, *, lock: bool = False) -> Review | None:
    stmt = select(Review).where(Review.id == review_id)
    if lock:
        stmt = stmt.with_for_update()
    else:
        stmt = _with_relations(stmt)
    return db.execute(stmt).scalar_one_or_none()


def get_owned_review(
    db: Session,
    review_id: int,
    user_id: int,
    *,
    lock: bool = False,
) -> Review | None:
    """
    Fetch a review only if ``user_id`` wrote it.

    Ownership is part of the WHERE clause, so "missing" and "not yours"
    both come back as None. With ``lock=True`` the row stays locked until
    the surrounding transaction ends.
    """
    stmt = select(Review).where(Review.id == review_id, Review.user_id == user_id)
    if lock:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def find_by_user_and_movie(db: Session, user_id: int, movie_id: int) -> Review | None:
    stmt = select(Review).where(Review.user_id == user_id, Review.movie_id == movie_id)
    return db.execute(stmt).scalar_one_or_none()


def list_by_movie(
    db: Session,
    movie_id: int,
    *,
    skip: int = 0,
    limit: int = 10,
    sort_by: ReviewSortField = "created_at",
    descending: bool = True,
) -> tuple[list[Review], int]:
    """
    Page through a movie's reviews.

    Returns:
        (reviews on this page, total number of reviews for the movie)
    """
    total = db.execute(
        select(func.count(Review.id)).where(Review.movie_id == movie_id)
    ).scalar_one()

    column = _SORT_COLUMNS[sort_by]
    order = column.desc() if descending else column.asc()
    stmt = (
        _with_relations(select(Review))
        .where(Review.movie_id == movie_id)
        .order_by(order, Review.id.desc() if descending else Review.id.asc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all()), total


def list_by_user(
    db: Session,
    user_id: int,
    *,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Review], int]:
    """Page through a user's reviews, newest first."""
    total = db.execute(
        select(func.count(Review.id)).where(Review.user_id == user_id)
    ).scalar_one()

    stmt = (
        _with_relations(select(Review))
        .where(Review.user_id == user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all()), total


def apply_review_changes(review: Review, changes: dict) -> Review:
    """Set the editable fields present in ``changes``."""
    for field in ("rating", "review_text", "is_spoiler"):
        if field in changes:
            setattr(review, field, changes[field])
    return review


def delete_review(db: Session, review: Review) -> None:
    """Delete a review; its votes go with it via the ORM cascade."""
    db.delete(review)
    db.flush()


def delete_all_by_movie(db: Session, movie_id: int) -> int:
    """
    Delete every review (and vote) referencing ``movie_id``.

    Returns:
        Number of reviews deleted
    """
    review_ids = select(Review.id).where(Review.movie_id == movie_id)
    db.execute(
        delete(ReviewVote)
        .where(ReviewVote.review_id.in_(review_ids))
        .execution_options(synchronize_session=False)
    )
    result = db.execute(
        delete(Review)
        .where(Review.movie_id == movie_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def rating_totals(db: Session, movie_id: int) -> tuple[int, int]:
    """
    Count and sum of ratings for a movie, read from the current state.

    Returns:
        (number of reviews, sum of their ratings)
    """
    count, total = db.execute(
        select(func.count(Review.id), func.coalesce(func.sum(Review.rating), 0))
        .where(Review.movie_id == movie_id)
    ).one()
    return int(count), int(total)


def rating_distribution(db: Session, movie_id: int) -> dict[int, int]:
    """Number of reviews per star value, with every value 1-5 present."""
    distribution = {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    stmt = (
        select(Review.rating, func.count(Review.id))
        .where(Review.movie_id == movie_id)
        .group_by(Review.rating)
    )
    for rating, count in db.execute(stmt).all():
        distribution[rating] = count
    return distribution


def user_review_summary(db: Session, user_id: int) -> tuple[int, int]:
    """
    Count and sum of the ratings a user has given.

    Returns:
        (number of reviews, sum of their ratings)
    """
    count, total = db.execute(
        select(func.count(Review.id), func.coalesce(func.sum(Review.rating), 0))
        .where(Review.user_id == user_id)
    ).one()
    return int(count), int(total)
