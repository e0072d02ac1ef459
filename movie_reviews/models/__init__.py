"""
SQLAlchemy Models Package

Model Relationships:
- Movie -> Review: One-to-Many (a movie has many reviews)
- User -> Review: One-to-Many (a user writes many reviews, one per movie)
- Review -> ReviewVote: One-to-Many (helpful votes, one per user)

Import all models here to:
1. Make them available as: from movie_reviews.models import Movie, Review
2. Ensure Alembic discovers them for migrations
"""

from movie_reviews.models.user import User
from movie_reviews.models.movie import AGGREGATE_FIELDS, GENRES, Movie
from movie_reviews.models.review import Review, ReviewVote

__all__ = [
    "User",
    "Movie",
    "Review",
    "ReviewVote",
    "GENRES",
    "AGGREGATE_FIELDS",
]
