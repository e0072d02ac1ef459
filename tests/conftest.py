"""
pytest Fixtures for Movie Reviews API Tests

This file contains shared fixtures used across all test files.

FIXTURE SCOPES:
- function (default): New instance per test function

Every test gets its own in-memory SQLite database. The review lifecycle
commits (and on constraint violations rolls back) the session itself, so
an outer rolled-back transaction cannot isolate tests here; a fresh
engine per test does.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting, sets a test secret key and keeps the
# application engine off PostgreSQL
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite://"

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from movie_reviews.database import Base, enable_sqlite_foreign_keys, get_db
from movie_reviews.main import app
from movie_reviews.models import Movie, Review, User
from movie_reviews.services.reviews import submit_review

# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def engine():
    """
    Create a SQLite in-memory database engine for one test.

    StaticPool keeps the single connection alive for the whole test.
    Without it, the in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """
    Create a file-backed SQLite engine for tests that use several threads.

    Every thread gets its own connection, so concurrent writers really
    contend for the database the way separate requests do.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'reviews.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    enable_sqlite_foreign_keys(engine)

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def file_session_factory(file_engine) -> sessionmaker:
    """Session factory for the file-backed engine: one session per thread."""
    return sessionmaker(autoflush=False, bind=file_engine)


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """Create a database session bound to the test engine."""
    TestSessionLocal = sessionmaker(
        autoflush=False,
        bind=engine,
    )
    session = TestSessionLocal()

    yield session

    session.close()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    We override the get_db dependency to use our test session.
    """

    def override_get_db():
        """Provide test database session instead of real one."""
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================


def _make_user(db: Session, username: str, **kwargs) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        is_active=True,
        **kwargs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """Create a sample user for testing."""
    return _make_user(db_session, "testuser")


@pytest.fixture
def second_user(db_session: Session) -> User:
    """Create a second user for testing ownership scenarios."""
    return _make_user(db_session, "seconduser")


@pytest.fixture
def third_user(db_session: Session) -> User:
    return _make_user(db_session, "thirduser")


@pytest.fixture
def inactive_user(db_session: Session) -> User:
    user = _make_user(db_session, "inactive")
    user.is_active = False
    db_session.commit()
    return user


@pytest.fixture
def superuser(db_session: Session) -> User:
    """Create a superuser for testing catalog management."""
    return _make_user(db_session, "admin", is_superuser=True)


def make_movie(db: Session, title: str = "Arrival", **kwargs) -> Movie:
    data = {
        "title": title,
        "genres": ["Drama", "Sci-Fi"],
        "release_year": 2016,
        "director": "Denis Villeneuve",
        "cast": [{"name": "Amy Adams", "character": "Louise Banks"}],
        "synopsis": "A linguist works with the military to communicate with alien lifeforms.",
        "duration": 116,
    }
    data.update(kwargs)
    movie = Movie(**data)
    db.add(movie)
    db.commit()
    db.refresh(movie)
    return movie


@pytest.fixture
def movie_factory(db_session: Session):
    """Build extra movies: movie_factory("Heat", release_year=1995)."""

    def factory(title: str, **kwargs) -> Movie:
        return make_movie(db_session, title, **kwargs)

    return factory


@pytest.fixture
def sample_movie(db_session: Session) -> Movie:
    """Create a sample movie with no reviews (aggregate 0 / 0)."""
    return make_movie(db_session)


@pytest.fixture
def second_movie(db_session: Session) -> Movie:
    return make_movie(
        db_session,
        title="The Third Man",
        genres=["Film-Noir", "Thriller"],
        release_year=1949,
        director="Carol Reed",
        cast=[],
        duration=104,
    )


@pytest.fixture
def sample_review(
    db_session: Session,
    sample_movie: Movie,
    sample_user: User,
) -> Review:
    """
    A 4-star review by sample_user, submitted through the review
    lifecycle so sample_movie's aggregate is already 4.0 / 1.
    """
    review = submit_review(
        db_session,
        user_id=sample_user.id,
        movie_id=sample_movie.id,
        rating=4,
        review_text="Quietly devastating once the structure clicks.",
    )
    db_session.refresh(review)
    return review
