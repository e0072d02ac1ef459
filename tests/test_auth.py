"""
Tests for Bearer Token Authentication

- Write endpoints require a valid access token
- Expired, tampered and wrong-type tokens are rejected
- The "sub" claim must name an existing, active user
- Read endpoints are public
"""

from datetime import timedelta

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from jose import jwt

from movie_reviews.config import get_settings
from movie_reviews.models import Movie, User
from movie_reviews.services.security import (
    ALGORITHM,
    create_access_token,
    decode_token,
    verify_token_type,
)

REVIEW = {"rating": 4, "reviewText": "Worth it."}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestTokens:
    """Tests for the token helpers."""

    def test_token_round_trip(self):
        token = create_access_token({"sub": "42"})

        payload = decode_token(token)

        assert payload["sub"] == "42"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_expired_token(self):
        token = create_access_token({"sub": "42"}, expires_delta=timedelta(seconds=-1))

        assert decode_token(token) is None

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "42", "type": "access"}, "x" * 40, algorithm=ALGORITHM)

        assert decode_token(token) is None

    def test_wrong_type(self):
        token = jwt.encode(
            {"sub": "42", "type": "refresh"},
            get_settings().secret_key,
            algorithm=ALGORITHM,
        )

        assert verify_token_type(token, "access") is None


class TestBearerAuthentication:
    """Tests for authentication on protected endpoints."""

    def test_get_endpoints_public(self, client: TestClient, sample_movie: Movie):
        assert client.get("/api/v1/movies").status_code == status.HTTP_200_OK
        response = client.get(f"/api/v1/movies/{sample_movie.id}/reviews")
        assert response.status_code == status.HTTP_200_OK

    def test_missing_token(self, client: TestClient, sample_movie: Movie):
        response = client.post(f"/api/v1/movies/{sample_movie.id}/reviews", json=REVIEW)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.parametrize(
        "claims",
        [
            {"sub": "99999"},
            {"sub": "not-a-number"},
            {},
        ],
    )
    def test_unusable_subject(self, client: TestClient, sample_movie: Movie, claims: dict):
        response = client.post(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            json=REVIEW,
            headers=bearer(create_access_token(claims)),
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Could not validate credentials"

    def test_expired_token_rejected(
        self, client: TestClient, sample_movie: Movie, sample_user: User
    ):
        token = create_access_token(
            {"sub": str(sample_user.id)},
            expires_delta=timedelta(minutes=-5),
        )

        response = client.post(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            json=REVIEW,
            headers=bearer(token),
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_inactive_user_rejected(
        self, client: TestClient, sample_movie: Movie, inactive_user: User
    ):
        response = client.post(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            json=REVIEW,
            headers=bearer(create_access_token({"sub": str(inactive_user.id)})),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Account is inactive"

    def test_valid_token(self, client: TestClient, sample_movie: Movie, sample_user: User):
        response = client.post(
            f"/api/v1/movies/{sample_movie.id}/reviews",
            json=REVIEW,
            headers=bearer(create_access_token({"sub": str(sample_user.id)})),
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["userId"] == sample_user.id

    def test_superuser_required(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/v1/movies",
            json={
                "title": "Mine",
                "genres": ["Drama"],
                "releaseYear": 2000,
                "director": "Me",
                "synopsis": "Home movie.",
            },
            headers=bearer(create_access_token({"sub": str(sample_user.id)})),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"detail": "Superuser privileges required"}
