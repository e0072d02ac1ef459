"""
Database Configuration Module

Sets up SQLAlchemy 2.0 for the Movie Reviews API.

Session Management Pattern
==========================
We use the "session per request" pattern:
1. Request arrives -> create a new session
2. Use session for all database operations in that request
3. Commit on success, rollback on failure
4. Close session when request ends

Review mutations commit the review write first and then recompute the
movie's rating aggregate in a second short transaction on the same session
(see services/ratings.py).
"""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from movie_reviews.config import get_settings

settings = get_settings()


# =============================================================================
# Database Engine
# =============================================================================
# - pool_size / max_overflow: connection pool sizing for server databases
# - pool_pre_ping: test connection health before using
# - echo: log all SQL statements in debug mode
#
# SQLite does not take pool sizing arguments and refuses cross-thread use
# unless check_same_thread is disabled (FastAPI runs sync routes in a pool).

def _engine_options() -> dict:
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
    }


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """
    Turn on foreign key enforcement for every new SQLite connection.

    SQLite ships with it off, which would let a review reference a deleted
    movie and would make ondelete="CASCADE" a no-op.
    """

    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(),
)

if settings.is_sqlite:
    enable_sqlite_foreign_keys(engine)


# =============================================================================
# Session Factory
# =============================================================================
# - autoflush=False: don't auto-flush before queries (more predictable)
# - expire_on_commit=True (default): objects reload after commit, so a
#   movie read after a recompute always shows the freshly written aggregate

SessionLocal = sessionmaker(
    autoflush=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Alembic uses Base.metadata to discover models for migrations.
    """
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Code before yield creates the session, code after yield closes it.
    The finally block ensures cleanup happens even if an exception occurs.

    Yields:
        SQLAlchemy Session instance
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """
    Create all database tables.

    WARNING: In production, use Alembic migrations instead!
    """
    Base.metadata.create_all(bind=engine)
