"""
Review Models

Review: a user's rating and written review of a movie.
ReviewVote: one user's helpful / not helpful judgment of a review.

Business Rules:
- One review per user per movie (unique constraint)
- Rating must be 1-5
- Only the author can edit/delete a review
- One helpful vote per user per review (unique constraint); voting again
  overwrites the earlier vote
- helpful_count / not_helpful_count are computed from the votes on read
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movie_reviews.database import Base
from movie_reviews.services.helpful import tally_votes

if TYPE_CHECKING:
    from movie_reviews.models.movie import Movie
    from movie_reviews.models.user import User


class Review(Base):
    """
    Review model for movie reviews.

    Attributes:
        id: Primary key (autoincrement, never reused)
        movie_id: Foreign key to movies table
        user_id: Foreign key to users table
        rating: 1-5 star rating
        review_text: Review body, 1-2000 characters
        is_spoiler: Whether the text reveals plot details
        helpful: Votes on this review, in the order they were cast
        created_at: When the review was created
        updated_at: When the review was last updated
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Foreign keys (immutable after creation)
    movie_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Review content
    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Rating from 1-5 stars",
    )
    review_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Review text content",
    )
    is_spoiler: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    movie: Mapped["Movie"] = relationship("Movie", back_populates="reviews")
    user: Mapped["User"] = relationship("User", back_populates="reviews")
    helpful: Mapped[list["ReviewVote"]] = relationship(
        "ReviewVote",
        back_populates="review",
        cascade="all, delete-orphan",
        order_by="ReviewVote.id",
    )

    __table_args__ = (
        # One review per user per movie
        UniqueConstraint("user_id", "movie_id", name="uq_review_user_movie"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
        # Access patterns: a movie's review list, a user's profile list
        Index("ix_reviews_movie_created", "movie_id", "created_at"),
        Index("ix_reviews_user_created", "user_id", "created_at"),
    )

    @property
    def helpful_count(self) -> int:
        return tally_votes(self.helpful).helpful_count

    @property
    def not_helpful_count(self) -> int:
        return tally_votes(self.helpful).not_helpful_count

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, movie_id={self.movie_id}, user_id={self.user_id}, rating={self.rating})>"


class ReviewVote(Base):
    """
    A single helpful / not helpful vote.

    The (review_id, user_id) unique constraint is the storage-level guard
    for "one vote per user"; the lifecycle service updates an existing row
    in place instead of inserting a second one.
    """

    __tablename__ = "review_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    review_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_helpful: Mapped[bool] = mapped_column(Boolean, nullable=False)

    review: Mapped["Review"] = relationship("Review", back_populates="helpful")

    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_review_vote_user"),
    )

    def __repr__(self) -> str:
        return f"<ReviewVote(review_id={self.review_id}, user_id={self.user_id}, is_helpful={self.is_helpful})>"
