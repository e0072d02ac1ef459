"""
Pydantic Schemas Package

Pydantic models for request/response validation, kept separate from the
SQLAlchemy models so the API controls exactly what is exposed and which
fields a client may write (the rating aggregate is never writable).

Schema Naming Convention:
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
"""

from movie_reviews.schemas.common import CamelModel, MessageResponse, PaginationMeta
from movie_reviews.schemas.movie import (
    CastMember,
    FeaturedMoviesResponse,
    MovieCreate,
    MovieListResponse,
    MovieResponse,
    MovieUpdate,
    TrendingMovieResponse,
    TrendingMoviesResponse,
)
from movie_reviews.schemas.review import (
    HelpfulVoteRequest,
    HelpfulVoteResponse,
    MovieMinimal,
    MovieRatingStats,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from movie_reviews.schemas.user import UserPublicResponse, UserReviewStats

__all__ = [
    # Common
    "CamelModel",
    "MessageResponse",
    "PaginationMeta",
    # Movie schemas
    "CastMember",
    "MovieCreate",
    "MovieUpdate",
    "MovieResponse",
    "MovieListResponse",
    "FeaturedMoviesResponse",
    "TrendingMovieResponse",
    "TrendingMoviesResponse",
    # Review schemas
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewListResponse",
    "HelpfulVoteRequest",
    "HelpfulVoteResponse",
    "MovieMinimal",
    "MovieRatingStats",
    # User schemas
    "UserPublicResponse",
    "UserReviewStats",
]
