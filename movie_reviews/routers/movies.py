"""
Movies Router

Catalog endpoints for movies and their rating statistics.

Endpoints:
- GET /movies - List movies (paginated, sortable)
- GET /movies/featured - Top rated movies
- GET /movies/trending - Most reviewed movies of the last 30 days
- POST /movies - Create a catalog entry (superuser)
- GET /movies/{movie_id} - Get a movie
- PUT /movies/{movie_id} - Edit catalog fields (superuser)
- DELETE /movies/{movie_id} - Delete a movie and all of its reviews (superuser)
- GET /movies/{movie_id}/rating - Rating aggregate and star distribution

averageRating and totalRatings are maintained by the rating aggregator;
none of these endpoints write them.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Literal

from fastapi import APIRouter, Query, Request, status

from movie_reviews.config import get_settings
from movie_reviews.dependencies import DbSession, Pagination, SuperUser, get_movie_or_404
from movie_reviews.exceptions import MovieNotFoundError
from movie_reviews.schemas import (
    FeaturedMoviesResponse,
    MovieCreate,
    MovieListResponse,
    MovieRatingStats,
    MovieResponse,
    MovieUpdate,
    PaginationMeta,
    TrendingMovieResponse,
    TrendingMoviesResponse,
)
from movie_reviews.services import movie_store, review_store
from movie_reviews.services.rate_limiter import limiter
from movie_reviews.services.ratings import movie_rating_lock
from movie_reviews.services.reviews import purge_movie_reviews

logger = logging.getLogger(__name__)

settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/movies",
    tags=["Movies"],
    responses={
        404: {"description": "Movie not found"},
    },
)

# Number of movies on the featured and trending showcases
SHOWCASE_SIZE = 6
TRENDING_WINDOW_DAYS = 30

_MOVIE_SORT_FIELDS = {
    "createdAt": "created_at",
    "title": "title",
    "releaseYear": "release_year",
    "averageRating": "average_rating",
}


# =============================================================================
# Read Endpoints
# =============================================================================


@router.get(
    "",
    response_model=MovieListResponse,
    summary="List movies",
    description="Get a paginated list of movies.",
)
@limiter.limit(settings.rate_limit_default)
def list_movies(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    sort_by: Literal["createdAt", "title", "releaseYear", "averageRating"] = Query(
        default="createdAt",
        alias="sortBy",
    ),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
) -> MovieListResponse:
    movies, total = movie_store.list_movies(
        db,
        skip=pagination.skip,
        limit=pagination.limit,
        sort_by=_MOVIE_SORT_FIELDS[sort_by],
        descending=sort_order == "desc",
    )

    return MovieListResponse(
        movies=[MovieResponse.model_validate(m) for m in movies],
        pagination=PaginationMeta.build(pagination.page, pagination.limit, total),
    )


@router.get(
    "/featured",
    response_model=FeaturedMoviesResponse,
    summary="Featured movies",
    description="Top rated movies for the home page, topped up with recent additions.",
)
@limiter.limit(settings.rate_limit_default)
def get_featured_movies(
    request: Request,
    db: DbSession,
) -> FeaturedMoviesResponse:
    movies = movie_store.featured_movies(db, limit=SHOWCASE_SIZE)
    return FeaturedMoviesResponse(
        movies=[MovieResponse.model_validate(m) for m in movies],
    )


@router.get(
    "/trending",
    response_model=TrendingMoviesResponse,
    summary="Trending movies",
    description=f"Movies with the most reviews in the last {TRENDING_WINDOW_DAYS} days.",
)
@limiter.limit(settings.rate_limit_default)
def get_trending_movies(
    request: Request,
    db: DbSession,
) -> TrendingMoviesResponse:
    since = datetime.now(UTC) - timedelta(days=TRENDING_WINDOW_DAYS)
    ranked = movie_store.trending_movies(db, since=since, limit=SHOWCASE_SIZE)
    return TrendingMoviesResponse(
        movies=[
            TrendingMovieResponse.model_validate(movie).model_copy(
                update={"recent_review_count": count}
            )
            for movie, count in ranked
        ],
    )


@router.get(
    "/{movie_id}",
    response_model=MovieResponse,
    summary="Get a movie by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_movie(
    request: Request,
    movie_id: int,
    db: DbSession,
) -> MovieResponse:
    movie = get_movie_or_404(db, movie_id)
    return MovieResponse.model_validate(movie)


@router.get(
    "/{movie_id}/rating",
    response_model=MovieRatingStats,
    summary="Get movie rating statistics",
    description="Get the stored rating aggregate and the count of each star rating.",
)
@limiter.limit(settings.rate_limit_default)
def get_movie_rating_stats(
    request: Request,
    movie_id: int,
    db: DbSession,
) -> MovieRatingStats:
    """
    Get rating statistics for a movie.

    Returns:
        - Average rating (one decimal, 0 when unreviewed)
        - Total review count
        - Rating distribution (count of each rating 1-5)
    """
    movie = get_movie_or_404(db, movie_id)

    return MovieRatingStats(
        movie_id=movie.id,
        average_rating=movie.average_rating,
        total_ratings=movie.total_ratings,
        rating_distribution=review_store.rating_distribution(db, movie_id),
    )


# =============================================================================
# Catalog Management (superuser)
# =============================================================================


@router.post(
    "",
    response_model=MovieResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a movie",
    description="Add a movie to the catalog. Requires superuser privileges.",
)
@limiter.limit(settings.rate_limit_write)
def create_movie(
    request: Request,
    movie_data: MovieCreate,
    db: DbSession,
    current_user: SuperUser,
) -> MovieResponse:
    movie = movie_store.create_movie(db, movie_data.model_dump())
    db.commit()
    db.refresh(movie)

    logger.info(f"Movie {movie.id} added to catalog by user {current_user.id}")
    return MovieResponse.model_validate(movie)


@router.put(
    "/{movie_id}",
    response_model=MovieResponse,
    summary="Update a movie",
    description="Edit catalog fields. The rating aggregate cannot be set.",
)
@limiter.limit(settings.rate_limit_write)
def update_movie(
    request: Request,
    movie_id: int,
    movie_data: MovieUpdate,
    db: DbSession,
    current_user: SuperUser,
) -> MovieResponse:
    movie = get_movie_or_404(db, movie_id)

    changes = movie_data.model_dump(exclude_unset=True)
    movie_store.update_movie_catalog(db, movie, changes)
    db.commit()
    db.refresh(movie)

    return MovieResponse.model_validate(movie)


@router.delete(
    "/{movie_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a movie",
    description="Delete a movie together with all of its reviews and their votes.",
)
@limiter.limit(settings.rate_limit_write)
def delete_movie(
    request: Request,
    movie_id: int,
    db: DbSession,
    current_user: SuperUser,
) -> None:
    # Held so no recompute writes the aggregate of a half-deleted movie
    with movie_rating_lock(movie_id):
        if movie_store.get_movie(db, movie_id, lock=True) is None:
            db.rollback()
            raise MovieNotFoundError(movie_id)

        removed = purge_movie_reviews(db, movie_id)
        movie_store.delete_movie(db, movie_id)
        db.commit()

    logger.info(
        f"Movie {movie_id} deleted by user {current_user.id} with {removed} review(s)"
    )
