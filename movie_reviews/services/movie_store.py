"""
Movie Aggregate Store

Data access for Movie rows, with two separate write paths:

- Catalog path (create_movie / update_movie_catalog): used by catalog
  management and the catalog import. Only catalog columns are written;
  aggregate fields are refused.
- Aggregate path (set_rating_aggregate): used only by the rating
  aggregator. A single UPDATE of average_rating and total_ratings, so a
  concurrent catalog edit and a recompute never overwrite each other's
  columns.

Functions here never commit.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Literal

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from movie_reviews.exceptions import ReviewValidationError
from movie_reviews.models.movie import AGGREGATE_FIELDS, Movie
from movie_reviews.models.review import Review

logger = logging.getLogger(__name__)

MovieSortField = Literal["created_at", "title", "release_year", "average_rating"]

CATALOG_FIELDS = frozenset({
    "title",
    "genres",
    "release_year",
    "director",
    "cast",
    "synopsis",
    "poster_url",
    "trailer_url",
    "duration",
    "tmdb_id",
})

_SORT_COLUMNS = {
    "created_at": Movie.created_at,
    "title": Movie.title,
    "release_year": Movie.release_year,
    "average_rating": Movie.average_rating,
}


def _check_catalog_fields(data: dict) -> None:
    aggregate = sorted(AGGREGATE_FIELDS & data.keys())
    unknown = sorted(data.keys() - CATALOG_FIELDS - AGGREGATE_FIELDS)
    errors = [
        {"field": field, "message": "Rating aggregates are derived from reviews and cannot be set"}
        for field in aggregate
    ]
    errors += [{"field": field, "message": "Unknown movie field"} for field in unknown]
    if errors:
        raise ReviewValidationError(errors)


def get_movie(db: Session, movie_id: int, *, lock: bool = False) -> Movie | None:
    stmt = select(Movie).where(Movie.id == movie_id)
    if lock:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def movie_exists(db: Session, movie_id: int) -> bool:
    return db.execute(
        select(Movie.id).where(Movie.id == movie_id)
    ).scalar_one_or_none() is not None


def lock_movie(db: Session, movie_id: int) -> bool:
    """
    Take a row lock on the movie for the rest of the transaction.

    Returns:
        False if the movie does not exist
    """
    return db.execute(
        select(Movie.id).where(Movie.id == movie_id).with_for_update()
    ).scalar_one_or_none() is not None


def list_movies(
    db: Session,
    *,
    skip: int = 0,
    limit: int = 12,
    sort_by: MovieSortField = "created_at",
    descending: bool = True,
) -> tuple[list[Movie], int]:
    total = db.execute(select(func.count(Movie.id))).scalar_one()

    column = _SORT_COLUMNS[sort_by]
    order = column.desc() if descending else column.asc()
    stmt = select(Movie).order_by(order, Movie.id.asc()).offset(skip).limit(limit)
    return list(db.execute(stmt).scalars().all()), total


def featured_movies(db: Session, *, limit: int = 6) -> list[Movie]:
    """
    Best rated movies, filled tier by tier until ``limit`` is reached.

    Tiers, each excluding movies already picked:
    1. average >= 4.0, by rating then newest release
    2. 3.5 <= average < 4.0, same order
    3. any rated movie, by rating then number of ratings
    4. most recently added movies
    """
    by_rating_then_release = (
        Movie.average_rating.desc(), Movie.release_year.desc(), Movie.id.asc(),
    )
    tiers = [
        (Movie.average_rating >= Decimal("4.0"), by_rating_then_release),
        (
            (Movie.average_rating >= Decimal("3.5")) & (Movie.average_rating < Decimal("4.0")),
            by_rating_then_release,
        ),
        (
            Movie.average_rating > 0,
            (Movie.average_rating.desc(), Movie.total_ratings.desc(), Movie.id.asc()),
        ),
        (None, (Movie.created_at.desc(), Movie.id.desc())),
    ]

    picked: list[Movie] = []
    for condition, order in tiers:
        remaining = limit - len(picked)
        if remaining <= 0:
            break
        stmt = select(Movie).order_by(*order).limit(remaining)
        if condition is not None:
            stmt = stmt.where(condition)
        if picked:
            stmt = stmt.where(Movie.id.not_in([m.id for m in picked]))
        picked.extend(db.execute(stmt).scalars().all())
    return picked


def trending_movies(
    db: Session,
    *,
    since: datetime,
    limit: int = 6,
) -> list[tuple[Movie, int]]:
    """
    Movies with the most reviews written since ``since``.

    Ties are broken by average rating. With no recent reviews at all, falls
    back to the best rated movies (paired with their total ratings), then
    to the most recently added ones (paired with 0).

    Returns:
        (movie, recent review count) pairs, best first
    """
    recent_count = func.count(Review.id).label("recent_review_count")
    stmt = (
        select(Movie, recent_count)
        .join(Review, Review.movie_id == Movie.id)
        .where(Review.created_at >= since)
        .group_by(Movie.id)
        .order_by(recent_count.desc(), Movie.average_rating.desc(), Movie.id.asc())
        .limit(limit)
    )
    rows = db.execute(stmt).all()
    if rows:
        return [(movie, count) for movie, count in rows]

    logger.info("No movies with recent reviews, falling back to highest rated movies")
    rated = db.execute(
        select(Movie)
        .where(Movie.average_rating > 0)
        .order_by(Movie.average_rating.desc(), Movie.total_ratings.desc(), Movie.id.asc())
        .limit(limit)
    ).scalars().all()
    if rated:
        return [(movie, movie.total_ratings) for movie in rated]

    logger.info("No rated movies, falling back to recently added movies")
    recent = db.execute(
        select(Movie).order_by(Movie.created_at.desc(), Movie.id.desc()).limit(limit)
    ).scalars().all()
    return [(movie, 0) for movie in recent]


def create_movie(db: Session, data: dict) -> Movie:
    """
    Create a catalog entry. The aggregate always starts at 0 / 0.

    Raises:
        ReviewValidationError: if ``data`` carries aggregate or unknown fields
    """
    _check_catalog_fields(data)
    movie = Movie(**data, average_rating=Decimal("0"), total_ratings=0)
    db.add(movie)
    db.flush()
    logger.info(f"Movie created: id={movie.id} title={movie.title!r}")
    return movie


def update_movie_catalog(db: Session, movie: Movie, changes: dict) -> Movie:
    """
    Apply catalog edits to ``movie``.

    Only the columns present in ``changes`` are marked dirty, so the
    UPDATE never includes average_rating / total_ratings.

    Raises:
        ReviewValidationError: if ``changes`` carries aggregate or unknown fields
    """
    _check_catalog_fields(changes)
    for field, value in changes.items():
        setattr(movie, field, value)
    db.flush()
    return movie


def set_rating_aggregate(
    db: Session,
    movie_id: int,
    average_rating: Decimal,
    total_ratings: int,
) -> bool:
    """
    Write a movie's rating aggregate.

    Returns:
        True if the movie row was updated, False if it no longer exists
    """
    result = db.execute(
        update(Movie)
        .where(Movie.id == movie_id)
        .values(average_rating=average_rating, total_ratings=total_ratings)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) > 0


def delete_movie(db: Session, movie_id: int) -> bool:
    """
    Delete a movie row. Its reviews must be purged first by the caller.

    Returns:
        True if a row was deleted
    """
    result = db.execute(
        delete(Movie)
        .where(Movie.id == movie_id)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) > 0
