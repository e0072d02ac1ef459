"""
Test Suite for the Movie Reviews API

Test Organization:
- conftest.py: Shared fixtures (per-test database, client, users, movies)
- test_review_lifecycle.py: Submit / edit / remove / vote at the service layer
- test_ratings.py: Rating aggregate rounding, recompute and failure policy
- test_helpful.py: Helpful-vote tally
- test_reviews.py, test_movies.py, test_users.py: HTTP endpoints
- test_auth.py: Bearer token authentication
- test_config.py: Settings validation and service endpoints

Running Tests:
    # Run all tests
    pytest

    # Run a single scenario
    pytest tests/test_review_lifecycle.py::TestLifecycleScenarios
"""
