"""
Services Package

This package contains business logic services that are:
- Separate from HTTP handling (routers)
- Reusable from the maintenance scripts
- Easier to test in isolation

Current services:
- reviews.py: Review lifecycle (submit, edit, remove, helpful votes)
- ratings.py: Movie rating aggregation with retry and per-movie locking
- helpful.py: Pure helpful-vote tally functions
- review_store.py: Review data access
- movie_store.py: Movie data access, catalog and aggregate write paths
- rate_limiter.py: Rate limiting with slowapi
- security.py: JWT utilities
"""
