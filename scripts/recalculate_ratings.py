#!/usr/bin/env python3
"""
Rating Recalculation Script

Recomputes averageRating / totalRatings of movies from their reviews.

The API refreshes a movie's aggregate after every review change; if a
refresh failed (logged as "Rating aggregate for movie N is stale"), run
this to repair it.

Usage:
    # From project root with venv activated:
    python scripts/recalculate_ratings.py

    # With Docker:
    docker-compose exec api python scripts/recalculate_ratings.py

    # Options:
    python scripts/recalculate_ratings.py --movie-id 42   # One movie only
"""

import argparse
import logging
import sys

from movie_reviews.database import SessionLocal
from movie_reviews.exceptions import AggregationFailure
from movie_reviews.services.ratings import (
    recompute_all_movie_ratings,
    recompute_movie_rating,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def recalculate(movie_id: int | None = None) -> int:
    """
    Recompute one movie's aggregate, or every movie's.

    Returns:
        Process exit code (0 when every recompute succeeded)
    """
    db = SessionLocal()
    try:
        if movie_id is not None:
            try:
                aggregate = recompute_movie_rating(db, movie_id)
            except AggregationFailure as e:
                logger.error(str(e))
                return 1
            if aggregate is None:
                logger.warning(f"Movie {movie_id} not found")
                return 1
            logger.info(
                f"Movie {movie_id}: average_rating={aggregate.average_rating} "
                f"total_ratings={aggregate.total_ratings}"
            )
            return 0

        logger.info("Recomputing rating aggregates for all movies...")
        updated, failed = recompute_all_movie_ratings(db)

        logger.info("=" * 50)
        logger.info("Recalculation complete!")
        logger.info(f"Movies updated: {updated}")
        logger.info(f"Failures: {failed}")
        return 1 if failed else 0
    finally:
        db.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Recompute movie rating aggregates from reviews"
    )
    parser.add_argument(
        "--movie-id",
        type=int,
        default=None,
        help="Only recompute this movie",
    )

    args = parser.parse_args()
    sys.exit(recalculate(movie_id=args.movie_id))


if __name__ == "__main__":
    main()
