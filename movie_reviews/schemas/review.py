"""
Review Pydantic Schemas

Schemas:
- ReviewCreate: Submit a new review
- ReviewUpdate: Edit an existing review (all fields optional)
- HelpfulVoteRequest / HelpfulVoteResponse: helpful voting
- ReviewResponse: Full review data for API responses
- ReviewListResponse: Paginated list of reviews
- MovieRatingStats: Aggregate rating plus star distribution

Business Rules:
- Rating must be an integer 1-5
- Review text is 1-2000 characters after trimming
- isHelpful must be a JSON boolean (no "true" strings or 0/1)
- One review per user per movie (enforced at database level)
"""

from datetime import datetime
from typing import Annotated

from pydantic import Field, StrictBool, StrictInt, StringConstraints

from movie_reviews.schemas.common import CamelModel, PaginationMeta
from movie_reviews.schemas.user import UserPublicResponse

ReviewText = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=2000),
]


# =============================================================================
# Embedded Schemas
# =============================================================================


class MovieMinimal(CamelModel):
    """Just enough movie info to label a review in a profile list."""

    id: int = Field(..., description="Movie ID")
    title: str = Field(..., description="Movie title")
    poster_url: str = Field(default="", description="Poster image URL")
    release_year: int = Field(..., description="Release year")


# =============================================================================
# Request Schemas
# =============================================================================


class ReviewCreate(CamelModel):
    """
    Schema for submitting a review.

    Example request body:
    {
        "rating": 5,
        "reviewText": "A masterpiece of tension and restraint.",
        "isSpoiler": false
    }
    """

    rating: StrictInt = Field(
        ...,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )
    review_text: ReviewText = Field(
        ...,
        description="Review text content",
        examples=["One of the best films of the decade."],
    )
    is_spoiler: StrictBool = Field(
        default=False,
        description="Whether the review reveals plot details",
    )


class ReviewUpdate(CamelModel):
    """
    Schema for editing a review.

    All fields are optional; only provided fields are changed.
    """

    rating: StrictInt | None = Field(default=None, ge=1, le=5)
    review_text: ReviewText | None = Field(default=None)
    is_spoiler: StrictBool | None = Field(default=None)


class HelpfulVoteRequest(CamelModel):
    is_helpful: StrictBool = Field(..., description="Whether the review was helpful")


# =============================================================================
# Response Schemas
# =============================================================================


class HelpfulVoteResponse(CamelModel):
    message: str = Field(default="Helpful vote updated successfully")
    helpful_count: int = Field(..., ge=0)
    not_helpful_count: int = Field(..., ge=0)


class ReviewResponse(CamelModel):
    """
    Schema for review responses.

    helpfulCount / notHelpfulCount are computed from the votes when the
    review is read; they are not stored.
    """

    id: int = Field(..., description="Unique review identifier")
    movie_id: int = Field(..., description="ID of the reviewed movie")
    user_id: int = Field(..., description="ID of the author")
    rating: int = Field(..., ge=1, le=5)
    review_text: str
    is_spoiler: bool
    helpful_count: int = Field(default=0, ge=0, description="Number of helpful votes")
    not_helpful_count: int = Field(default=0, ge=0, description="Number of not-helpful votes")
    created_at: datetime
    updated_at: datetime

    user: UserPublicResponse = Field(..., description="Author of the review")
    movie: MovieMinimal = Field(..., description="Movie being reviewed")


class ReviewListResponse(CamelModel):
    reviews: list[ReviewResponse] = Field(..., description="Reviews on this page")
    pagination: PaginationMeta


class MovieRatingStats(CamelModel):
    """
    Aggregated rating statistics for a movie.

    averageRating and totalRatings are the stored aggregate; the
    distribution is counted from the reviews on request.
    """

    movie_id: int = Field(..., description="Movie ID")
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Average rating (0-5, 0 means no reviews)"
    )
    total_ratings: int = Field(..., ge=0, description="Total number of reviews")
    rating_distribution: dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0},
        description="Count of each rating (1-5)"
    )
