"""
Movie Model

The catalog entry that reviews attach to.

Besides catalog metadata, a movie carries two derived fields:
- average_rating: mean of all review ratings, one decimal place
- total_ratings: number of reviews contributing to the average

These are cached for read performance and written ONLY by the rating
aggregator through services.movie_store.set_rating_aggregate. The catalog
create/update paths never touch them.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movie_reviews.database import Base

if TYPE_CHECKING:
    from movie_reviews.models.review import Review


GENRES = (
    "Action", "Adventure", "Animation", "Biography", "Comedy", "Crime",
    "Documentary", "Drama", "Family", "Fantasy", "Film-Noir", "History",
    "Horror", "Music", "Mystery", "Romance", "Sci-Fi", "Sport", "Thriller",
    "War", "Western",
)

# Columns owned by the rating aggregator
AGGREGATE_FIELDS = frozenset({"average_rating", "total_ratings"})


class Movie(Base):
    """
    Movie model.

    Table: movies

    Relationships:
    - reviews: One-to-Many (deleted together with the movie)

    Indexes:
    - title: for sorting/lookup
    - tmdb_id: unique, sparse (only imported movies have one)
    - average_rating: for "top rated" ordering
    """

    __tablename__ = "movies"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Catalog Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(200),
        index=True,
        nullable=False,
        comment="Movie title"
    )
    genres: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
        comment="List of genre names"
    )
    release_year: Mapped[int] = mapped_column(
        Integer,
        index=True,
        nullable=False,
    )
    director: Mapped[str] = mapped_column(String(100), nullable=False)
    cast: Mapped[list[dict]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
        comment="List of {name, character} entries"
    )
    synopsis: Mapped[str] = mapped_column(Text, nullable=False)
    poster_url: Mapped[str] = mapped_column(Text, default="", nullable=False)
    trailer_url: Mapped[str] = mapped_column(Text, default="", nullable=False)
    duration: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Runtime in minutes"
    )
    tmdb_id: Mapped[int | None] = mapped_column(
        Integer,
        unique=True,
        nullable=True,
        comment="ID in the external catalog, when imported"
    )

    # -------------------------------------------------------------------------
    # Rating Aggregate (derived state)
    # -------------------------------------------------------------------------
    # Numeric(3, 1): 0.0 - 5.0 with one decimal place
    average_rating: Mapped[Decimal] = mapped_column(
        Numeric(3, 1),
        default=Decimal("0"),
        server_default="0",
        index=True,
        nullable=False,
        comment="Mean review rating rounded to one decimal, 0 if no reviews"
    )
    total_ratings: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
        comment="Number of reviews behind average_rating"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    # passive_deletes: review removal goes through the lifecycle service,
    # the ORM does not load reviews just to delete them
    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="movie",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            "average_rating >= 0 AND average_rating <= 5",
            name="ck_movie_average_rating_range",
        ),
        CheckConstraint("total_ratings >= 0", name="ck_movie_total_ratings"),
    )

    @property
    def formatted_duration(self) -> str | None:
        """Runtime as "2h 5m" or "45m"."""
        if not self.duration:
            return None
        hours, minutes = divmod(self.duration, 60)
        return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"

    def __repr__(self) -> str:
        return f"Movie(id={self.id}, title='{self.title}', average_rating={self.average_rating})"
