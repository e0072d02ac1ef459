"""
Movie Reviews API Application Package

Movie catalog, user reviews, helpful votes and the per-movie rating
aggregate that is kept consistent with the reviews.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain errors and their HTTP status codes
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (review lifecycle, rating aggregation, stores)
"""

__version__ = "0.1.0"
