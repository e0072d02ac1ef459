"""
User Pydantic Schemas

Only public profile data is exposed; accounts themselves are managed by
the identity service.
"""

from pydantic import Field

from movie_reviews.schemas.common import CamelModel


class UserPublicResponse(CamelModel):
    """Public user info embedded next to reviews."""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    profile_picture: str = Field(default="", description="Avatar URL")


class UserReviewStats(CamelModel):
    """
    Review statistics shown on a user's profile.

    Example:
        {"userId": 7, "totalReviews": 12, "averageRating": 3.8}
    """

    user_id: int = Field(..., description="User ID")
    total_reviews: int = Field(..., ge=0, description="Number of reviews written")
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Mean rating given by the user (0 if no reviews)",
    )
