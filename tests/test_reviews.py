"""
Tests for the Reviews API

Tests the review endpoints:
- List reviews for a movie (pagination, sorting)
- Submit a review (authenticated)
- Get a single review
- Edit a review (author only)
- Delete a review (author only)
- Helpful votes

Business Rules:
- One review per user per movie (409 on the second submit)
- Non-authors get the same 404 as for a missing review
- The movie's averageRating / totalRatings follow every change
"""

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from movie_reviews.models import Movie, Review, User
from movie_reviews.services.security import create_access_token


# =============================================================================
# Helper Functions
# =============================================================================


def get_auth_header(user: User) -> dict:
    """Create authorization header for a user."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


def movie_rating(client: TestClient, movie_id: int) -> tuple[float, int]:
    data = client.get(f"/api/v1/movies/{movie_id}").json()
    return data["averageRating"], data["totalRatings"]


# =============================================================================
# List Reviews for Movie
# =============================================================================


class TestListMovieReviews:
    """Tests for GET /api/v1/movies/{movie_id}/reviews"""

    def test_list_reviews_empty(self, client: TestClient, sample_movie: Movie):
        response = client.get(f"/api/v1/movies/{sample_movie.id}/reviews")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["reviews"] == []
        assert data["pagination"] == {
            "currentPage": 1,
            "totalPages": 0,
            "totalItems": 0,
            "hasNext": False,
            "hasPrev": False,
        }

    def test_list_reviews_with_data(self, client: TestClient, sample_review: Review):
        response = client.get(f"/api/v1/movies/{sample_review.movie_id}/reviews")

        assert response.status_code == status.HTTP_200_OK
        review = response.json()["reviews"][0]
        assert review["rating"] == 4
        assert review["reviewText"] == "Quietly devastating once the structure clicks."
        assert review["isSpoiler"] is False
        assert review["helpfulCount"] == 0
        assert review["notHelpfulCount"] == 0
        assert review["user"]["username"] == "testuser"
        assert review["movie"]["title"] == "Arrival"

    def test_list_reviews_movie_not_found(self, client: TestClient):
        response = client.get("/api/v1/movies/99999/reviews")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Movie not found"

    def test_list_reviews_pagination_and_sort(
        self,
        client: TestClient,
        db_session: Session,
        sample_movie: Movie,
    ):
        for i in range(7):
            user = User(username=f"reviewer{i}", email=f"reviewer{i}@example.com")
            db_session.add(user)
            db_session.flush()
            db_session.add(Review(
                movie_id=sample_movie.id,
                user_id=user.id,
                rating=(i % 5) + 1,
                review_text=f"Review {i}",
            ))
        db_session.commit()

        response = client.get(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            params={"page": 2, "limit": 3, "sortBy": "rating", "sortOrder": "asc"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["pagination"] == {
            "currentPage": 2,
            "totalPages": 3,
            "totalItems": 7,
            "hasNext": True,
            "hasPrev": True,
        }
        # ratings sorted ascending: 1,1,2 | 2,3,4 | 5
        assert [r["rating"] for r in data["reviews"]] == [2, 3, 4]

    def test_list_reviews_invalid_sort(self, client: TestClient, sample_movie: Movie):
        response = client.get(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            params={"sortBy": "helpfulCount"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# =============================================================================
# Submit Review
# =============================================================================


class TestCreateReview:
    """Tests for POST /api/v1/movies/{movie_id}/reviews"""

    def test_create_review_success(
        self,
        client: TestClient,
        sample_movie: Movie,
        sample_user: User,
    ):
        response = client.post(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            json={"rating": 5, "reviewText": "  A masterpiece.  ", "isSpoiler": True},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["rating"] == 5
        assert data["reviewText"] == "A masterpiece."
        assert data["isSpoiler"] is True
        assert data["userId"] == sample_user.id
        assert data["movieId"] == sample_movie.id
        assert movie_rating(client, sample_movie.id) == (5.0, 1)

    def test_create_review_unauthenticated(self, client: TestClient, sample_movie: Movie):
        response = client.post(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            json={"rating": 5, "reviewText": "Great"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_review_invalid_token(self, client: TestClient, sample_movie: Movie):
        response = client.post(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            json={"rating": 5, "reviewText": "Great"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_review_inactive_user(
        self, client: TestClient, sample_movie: Movie, inactive_user: User
    ):
        response = client.post(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            json={"rating": 5, "reviewText": "Great"},
            headers=get_auth_header(inactive_user),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_review_movie_not_found(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/v1/movies/99999/reviews",
            json={"rating": 3, "reviewText": "Hmm"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_create_review_duplicate(
        self,
        client: TestClient,
        sample_review: Review,
        sample_user: User,
    ):
        response = client.post(
            f"/api/v1/movies/{sample_review.movie_id}/reviews",
            json={"rating": 1, "reviewText": "Changed my mind"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "You have already reviewed this movie"
        assert movie_rating(client, sample_review.movie_id) == (4.0, 1)

    def test_create_review_rating_out_of_range(
        self, client: TestClient, sample_movie: Movie, sample_user: User
    ):
        for rating in (0, 6):
            response = client.post(
                f"/api/v1/movies/{sample_movie.id}/reviews",
                json={"rating": rating, "reviewText": "Text"},
                headers=get_auth_header(sample_user),
            )
            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_review_rating_must_be_integer(
        self, client: TestClient, sample_movie: Movie, sample_user: User
    ):
        for rating in (4.5, "4", True):
            response = client.post(
                f"/api/v1/movies/{sample_movie.id}/reviews",
                json={"rating": rating, "reviewText": "Text"},
                headers=get_auth_header(sample_user),
            )
            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_review_text_limits(
        self, client: TestClient, sample_movie: Movie, sample_user: User
    ):
        for text in ("", "   ", "x" * 2001):
            response = client.post(
                f"/api/v1/movies/{sample_movie.id}/reviews",
                json={"rating": 3, "reviewText": text},
                headers=get_auth_header(sample_user),
            )
            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# =============================================================================
# Individual Review Endpoints
# =============================================================================


class TestGetReview:
    """Tests for GET /api/v1/reviews/{review_id}"""

    def test_get_review(self, client: TestClient, sample_review: Review):
        response = client.get(f"/api/v1/reviews/{sample_review.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == sample_review.id
        assert "createdAt" in data
        assert "updatedAt" in data

    def test_get_review_not_found(self, client: TestClient):
        response = client.get("/api/v1/reviews/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Review not found"


class TestUpdateReview:
    """Tests for PUT /api/v1/reviews/{review_id}"""

    def test_update_own_review(
        self,
        client: TestClient,
        sample_review: Review,
        sample_user: User,
    ):
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 2},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["rating"] == 2
        assert data["reviewText"] == "Quietly devastating once the structure clicks."
        assert movie_rating(client, sample_review.movie_id) == (2.0, 1)

    def test_update_other_users_review(
        self,
        client: TestClient,
        sample_review: Review,
        second_user: User,
    ):
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 1},
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == (
            "Review not found or you are not authorized to edit it"
        )

    def test_update_missing_review_matches_forbidden(
        self, client: TestClient, sample_review: Review, sample_user: User, second_user: User
    ):
        missing = client.put(
            "/api/v1/reviews/99999",
            json={"rating": 1},
            headers=get_auth_header(sample_user),
        )
        not_owner = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 1},
            headers=get_auth_header(second_user),
        )

        assert missing.status_code == not_owner.status_code
        assert missing.json() == not_owner.json()

    def test_update_invalid_rating(
        self, client: TestClient, sample_review: Review, sample_user: User
    ):
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 10},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestDeleteReview:
    """Tests for DELETE /api/v1/reviews/{review_id}"""

    def test_delete_own_review(
        self,
        client: TestClient,
        sample_review: Review,
        sample_user: User,
    ):
        review_id = sample_review.id
        movie_id = sample_review.movie_id

        response = client.delete(
            f"/api/v1/reviews/{review_id}",
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Review deleted successfully"}
        assert client.get(f"/api/v1/reviews/{review_id}").status_code == 404
        assert movie_rating(client, movie_id) == (0.0, 0)

    def test_delete_other_users_review(
        self,
        client: TestClient,
        sample_review: Review,
        superuser: User,
    ):
        # Not even superusers may delete someone else's review
        response = client.delete(
            f"/api/v1/reviews/{sample_review.id}",
            headers=get_auth_header(superuser),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == (
            "Review not found or you are not authorized to delete it"
        )


# =============================================================================
# Helpful Votes
# =============================================================================


class TestHelpfulVote:
    """Tests for POST /api/v1/reviews/{review_id}/helpful"""

    def test_vote_and_change_vote(
        self,
        client: TestClient,
        sample_review: Review,
        second_user: User,
        third_user: User,
    ):
        url = f"/api/v1/reviews/{sample_review.id}/helpful"

        response = client.post(url, json={"isHelpful": True}, headers=get_auth_header(second_user))
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "message": "Helpful vote updated successfully",
            "helpfulCount": 1,
            "notHelpfulCount": 0,
        }

        response = client.post(url, json={"isHelpful": False}, headers=get_auth_header(second_user))
        assert response.json()["helpfulCount"] == 0
        assert response.json()["notHelpfulCount"] == 1

        response = client.post(url, json={"isHelpful": True}, headers=get_auth_header(third_user))
        assert response.json()["helpfulCount"] == 1
        assert response.json()["notHelpfulCount"] == 1

        review = client.get(f"/api/v1/reviews/{sample_review.id}").json()
        assert review["helpfulCount"] == 1
        assert review["notHelpfulCount"] == 1

    def test_vote_requires_strict_boolean(
        self, client: TestClient, sample_review: Review, second_user: User
    ):
        for value in ("true", 1, None):
            response = client.post(
                f"/api/v1/reviews/{sample_review.id}/helpful",
                json={"isHelpful": value},
                headers=get_auth_header(second_user),
            )
            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_vote_missing_review(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/v1/reviews/99999/helpful",
            json={"isHelpful": True},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_vote_unauthenticated(self, client: TestClient, sample_review: Review):
        response = client.post(
            f"/api/v1/reviews/{sample_review.id}/helpful",
            json={"isHelpful": True},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
