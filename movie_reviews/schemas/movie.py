"""
Movie Pydantic Schemas

Schemas:
- MovieCreate: Catalog entry creation (admin, catalog import)
- MovieUpdate: Catalog edits (all fields optional)
- MovieResponse: Full movie data, including the rating aggregate
- MovieListResponse: Paginated list of movies
- FeaturedMoviesResponse / TrendingMoviesResponse: Home page showcases

averageRating / totalRatings appear only in responses. Create and update
bodies forbid unknown fields, so a client trying to set the aggregate
gets a 422 instead of a silently ignored field.
"""

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import ConfigDict, Field, StringConstraints, field_validator

from movie_reviews.models.movie import GENRES
from movie_reviews.schemas.common import CamelModel, PaginationMeta

Genre = Literal[GENRES]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Director = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Synopsis = Annotated[str, StringConstraints(min_length=1, max_length=2000)]

EARLIEST_RELEASE_YEAR = 1888


def _check_release_year(value: int | None) -> int | None:
    if value is None:
        return value
    latest = date.today().year + 5
    if not EARLIEST_RELEASE_YEAR <= value <= latest:
        raise ValueError(f"Release year must be between {EARLIEST_RELEASE_YEAR} and {latest}")
    return value


class CastMember(CamelModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    character: str | None = None


class MovieCreate(CamelModel):
    """
    Schema for creating a catalog entry.

    Example request body:
    {
        "title": "Arrival",
        "genres": ["Drama", "Sci-Fi"],
        "releaseYear": 2016,
        "director": "Denis Villeneuve",
        "synopsis": "A linguist works with the military to communicate..."
    }
    """

    model_config = ConfigDict(extra="forbid")

    title: Title
    genres: list[Genre] = Field(..., min_length=1, description="At least one genre")
    release_year: int = Field(..., examples=[2016])
    director: Director
    cast: list[CastMember] = Field(default_factory=list)
    synopsis: Synopsis
    poster_url: str = Field(default="")
    trailer_url: str = Field(default="")
    duration: int | None = Field(default=None, ge=1, description="Runtime in minutes")
    tmdb_id: int | None = Field(default=None, description="External catalog ID")

    @field_validator("release_year")
    @classmethod
    def validate_release_year(cls, v: int) -> int:
        return _check_release_year(v)


class MovieUpdate(CamelModel):
    """Schema for catalog edits. Only provided fields are changed."""

    model_config = ConfigDict(extra="forbid")

    title: Title | None = None
    genres: list[Genre] | None = Field(default=None, min_length=1)
    release_year: int | None = None
    director: Director | None = None
    cast: list[CastMember] | None = None
    synopsis: Synopsis | None = None
    poster_url: str | None = None
    trailer_url: str | None = None
    duration: int | None = Field(default=None, ge=1)
    tmdb_id: int | None = None

    @field_validator("release_year")
    @classmethod
    def validate_release_year(cls, v: int | None) -> int | None:
        return _check_release_year(v)


class MovieResponse(CamelModel):
    id: int
    title: str
    genres: list[str]
    release_year: int
    director: str
    cast: list[CastMember]
    synopsis: str
    poster_url: str
    trailer_url: str
    duration: int | None
    formatted_duration: str | None = None
    tmdb_id: int | None
    average_rating: float = Field(..., ge=0, le=5)
    total_ratings: int = Field(..., ge=0)
    created_at: datetime
    updated_at: datetime


class MovieListResponse(CamelModel):
    movies: list[MovieResponse]
    pagination: PaginationMeta


class FeaturedMoviesResponse(CamelModel):
    movies: list[MovieResponse]


class TrendingMovieResponse(MovieResponse):
    """A movie with the number of reviews it received recently."""

    recent_review_count: int = Field(default=0, ge=0, description="Reviews in the trending window")


class TrendingMoviesResponse(CamelModel):
    movies: list[TrendingMovieResponse]
