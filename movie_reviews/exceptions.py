"""
Domain Exceptions

Errors raised by the review lifecycle and catalog services. Routers let
these propagate; main.py converts them into JSON responses using the
status_code carried by each class.

Error kinds:
- ReviewValidationError: malformed input, with field-level detail (422)
- NotFoundError and subclasses: referenced movie or review missing (404)
- ReviewNotFoundOrForbiddenError: edit/delete of a review that is missing
  or owned by someone else; both cases share one response (404)
- ForbiddenError: caller lacks permission (403)
- ConflictError / DuplicateReviewError: uniqueness violation (409)
- AggregationFailure: internal only, never sent to clients
"""

from fastapi import status


class MovieReviewsError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An internal error occurred."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ReviewValidationError(MovieReviewsError):
    """Raised when input fails a business validation rule."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Validation failed"

    def __init__(
        self,
        errors: list[dict[str, str]],
        detail: str | None = None,
    ) -> None:
        self.errors = errors
        super().__init__(detail)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ReviewValidationError":
        return cls([{"field": field, "message": message}])


class NotFoundError(MovieReviewsError):
    """Raised when a requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class MovieNotFoundError(NotFoundError):
    def __init__(self, movie_id: int) -> None:
        self.movie_id = movie_id
        super().__init__("Movie not found")


class ReviewNotFoundError(NotFoundError):
    def __init__(self, review_id: int) -> None:
        self.review_id = review_id
        super().__init__("Review not found")


class ReviewNotFoundOrForbiddenError(NotFoundError):
    """
    Raised when a review is missing OR belongs to another user.

    The two cases are deliberately indistinguishable so that non-owners
    cannot discover which review ids exist.
    """

    def __init__(self, review_id: int, action: str = "modify") -> None:
        self.review_id = review_id
        super().__init__(
            f"Review not found or you are not authorized to {action} it"
        )


class ForbiddenError(MovieReviewsError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action"


class ConflictError(MovieReviewsError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class DuplicateReviewError(ConflictError):
    """Raised when a user already has a review for the movie."""

    def __init__(self, user_id: int, movie_id: int) -> None:
        self.user_id = user_id
        self.movie_id = movie_id
        super().__init__("You have already reviewed this movie")


class AggregationFailure(MovieReviewsError):
    """
    Raised when a movie's rating aggregate could not be written.

    Callers on the request path log and swallow it: the review write has
    already been committed and the aggregate heals on the next recompute.
    """

    def __init__(self, movie_id: int, attempts: int) -> None:
        self.movie_id = movie_id
        self.attempts = attempts
        super().__init__(
            f"Rating recompute for movie {movie_id} failed after {attempts} attempt(s)"
        )
