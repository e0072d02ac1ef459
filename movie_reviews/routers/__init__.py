"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- movies.py: /api/v1/movies/* catalog and rating statistics
- reviews.py: /api/v1/movies/{id}/reviews and /api/v1/reviews/* endpoints
- users.py: /api/v1/users/{id}/reviews and review statistics

Each router is imported and registered in main.py.
"""

from movie_reviews.routers.movies import router as movies_router
from movie_reviews.routers.reviews import router as reviews_router
from movie_reviews.routers.users import router as users_router

__all__ = [
    "movies_router",
    "reviews_router",
    "users_router",
]
