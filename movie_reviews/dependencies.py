"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Common Dependency Patterns:
- Database sessions (per-request)
- Authentication (verify user from the bearer token)
- Pagination parameters
- Resource lookups that 404 (movie, user)
"""

from typing import TYPE_CHECKING, Annotated, Literal

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from movie_reviews.config import get_settings
from movie_reviews.database import get_db
from movie_reviews.exceptions import ForbiddenError, MovieNotFoundError, NotFoundError
from movie_reviews.services import movie_store

if TYPE_CHECKING:
    from movie_reviews.models.movie import Movie
    from movie_reviews.models.user import User

settings = get_settings()

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def list_movies(db: Session = Depends(get_db)):
#
# You can write:
#   def list_movies(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Common pagination parameters for list endpoints.

    - page: Which page to return (1-indexed)
    - limit: How many items per page
    - skip: Calculated offset for database query

    Usage in route:
        @router.get("/movies/{movie_id}/reviews")
        def list_movie_reviews(db: DbSession, pagination: Pagination):
            reviews, total = review_store.list_by_movie(
                db, movie_id, skip=pagination.skip, limit=pagination.limit
            )
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        limit: int = Query(
            default=10,
            ge=1,
            le=100,
            description="Number of items per page (max 100)",
            examples=[10, 25, 50],
        ),
    ) -> None:
        self.page = page
        self.limit = limit

    @property
    def skip(self) -> int:
        """
        Number of records to skip.

        Page 1 -> skip 0 items
        Page 2 -> skip limit items
        """
        return (self.page - 1) * self.limit


Pagination = Annotated[PaginationParams, Depends()]


_REVIEW_SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "rating": "rating",
}


class ReviewSortParams:
    """
    Sort order for a movie's review list.

        GET /api/v1/movies/7/reviews?sortBy=rating&sortOrder=asc
    """

    def __init__(
        self,
        sort_by: Literal["createdAt", "updatedAt", "rating"] = Query(
            default="createdAt",
            alias="sortBy",
            description="Field to sort by",
        ),
        sort_order: Literal["asc", "desc"] = Query(
            default="desc",
            alias="sortOrder",
            description="Sort direction",
        ),
    ) -> None:
        self.sort_by = _REVIEW_SORT_FIELDS[sort_by]
        self.descending = sort_order == "desc"


ReviewSort = Annotated[ReviewSortParams, Depends()]


# =============================================================================
# Resource Lookups
# =============================================================================


def get_movie_or_404(db: Session, movie_id: int) -> "Movie":
    """
    Get a movie by ID or raise MovieNotFoundError.

    The exception handler in main.py turns it into a 404 response.
    """
    movie = movie_store.get_movie(db, movie_id)
    if movie is None:
        raise MovieNotFoundError(movie_id)
    return movie


def get_user_or_404(db: Session, user_id: int) -> "User":
    from movie_reviews.models.user import User

    user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


# =============================================================================
# JWT Authentication (User Authentication)
# =============================================================================
# Tokens are issued by the identity service; the tokenUrl only feeds the
# Swagger UI "Authorize" dialog.

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=True,
)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    """
    Extract and validate the current user from JWT token.

    This dependency:
    1. Extracts the Bearer token from Authorization header
    2. Decodes and validates the JWT
    3. Looks up the user in the database
    4. Returns the user object

    Raises:
        HTTPException: 401 if token is invalid or user not found
    """
    from movie_reviews.models.user import User
    from movie_reviews.services.security import verify_token_type

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = verify_token_type(token, "access")
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise credentials_exception

    stmt = select(User).where(User.id == int(user_id))
    user = db.execute(stmt).scalar_one_or_none()

    if user is None:
        raise credentials_exception

    return user


def get_current_active_user(
    current_user=Depends(get_current_user),
):
    """
    Verify the current user is active.

    Raises:
        ForbiddenError: if the account is inactive
    """
    if not current_user.is_active:
        raise ForbiddenError("Account is inactive")
    return current_user


def get_current_superuser(
    current_user=Depends(get_current_active_user),
):
    """
    Verify the current user may manage the movie catalog.

    Raises:
        ForbiddenError: if the user is not a superuser
    """
    if not current_user.is_superuser:
        raise ForbiddenError("Superuser privileges required")
    return current_user


ActiveUser = Annotated["User", Depends(get_current_active_user)]
SuperUser = Annotated["User", Depends(get_current_superuser)]
