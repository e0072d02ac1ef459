#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample data for development.

USAGE:
    # Make sure you're in the project root with venv activated
    python scripts/seed_data.py

    # Or with Docker
    docker-compose exec api python scripts/seed_data.py

This script:
1. Connects to the database using app settings
2. Clears existing data (optional)
3. Creates an admin and a few reviewers
4. Creates sample movies through the catalog path
5. Submits reviews through the review lifecycle, so every movie's
   averageRating / totalRatings is computed exactly as the API does it
"""

from sqlalchemy import delete
from sqlalchemy.orm import Session

from movie_reviews.database import SessionLocal, create_tables
from movie_reviews.models import Movie, Review, ReviewVote, User
from movie_reviews.services import movie_store
from movie_reviews.services.reviews import submit_review, vote_helpful


def clear_data(db: Session) -> None:
    """Clear all existing data from the database."""
    print("Clearing existing data...")
    db.execute(delete(ReviewVote))
    db.execute(delete(Review))
    db.execute(delete(Movie))
    db.execute(delete(User))
    db.commit()
    print("Data cleared.")


def create_users(db: Session) -> dict[str, User]:
    """Create an admin and sample reviewers."""
    print("Creating users...")
    users_data = [
        {"username": "admin", "email": "admin@moviereview.com", "is_superuser": True},
        {"username": "cinephile", "email": "cinephile@example.com"},
        {"username": "popcorn_pete", "email": "pete@example.com"},
        {"username": "noir_fan", "email": "noir@example.com"},
    ]

    users = {}
    for data in users_data:
        user = User(**data)
        db.add(user)
        users[user.username] = user

    db.commit()
    print(f"Created {len(users)} users.")
    return users


def create_movies(db: Session) -> dict[str, Movie]:
    """Create sample movies. The rating aggregate starts at 0 / 0."""
    print("Creating movies...")
    movies_data = [
        {
            "title": "The Shawshank Redemption",
            "genres": ["Drama"],
            "release_year": 1994,
            "director": "Frank Darabont",
            "cast": [
                {"name": "Tim Robbins", "character": "Andy Dufresne"},
                {"name": "Morgan Freeman", "character": "Ellis Boyd 'Red' Redding"},
            ],
            "synopsis": "Two imprisoned men bond over a number of years, finding "
                        "solace and eventual redemption through acts of common decency.",
            "duration": 142,
        },
        {
            "title": "Spirited Away",
            "genres": ["Animation", "Adventure", "Family"],
            "release_year": 2001,
            "director": "Hayao Miyazaki",
            "cast": [{"name": "Rumi Hiiragi", "character": "Chihiro"}],
            "synopsis": "A young girl wanders into a world ruled by gods, witches "
                        "and spirits, where humans are changed into beasts.",
            "duration": 125,
        },
        {
            "title": "The Third Man",
            "genres": ["Film-Noir", "Mystery", "Thriller"],
            "release_year": 1949,
            "director": "Carol Reed",
            "cast": [{"name": "Orson Welles", "character": "Harry Lime"}],
            "synopsis": "Pulp novelist Holly Martins travels to post-war Vienna "
                        "only to find that his friend Harry Lime has died.",
            "duration": 104,
        },
        {
            "title": "Arrival",
            "genres": ["Drama", "Sci-Fi"],
            "release_year": 2016,
            "director": "Denis Villeneuve",
            "cast": [{"name": "Amy Adams", "character": "Louise Banks"}],
            "synopsis": "A linguist works with the military to communicate with "
                        "alien lifeforms after twelve spacecraft appear around the world.",
            "duration": 116,
        },
    ]

    movies = {}
    for data in movies_data:
        movie = movie_store.create_movie(db, data)
        movies[movie.title] = movie

    db.commit()
    print(f"Created {len(movies)} movies.")
    return movies


def create_reviews(db: Session, users: dict[str, User], movies: dict[str, Movie]) -> list[Review]:
    """Submit sample reviews and a few helpful votes."""
    print("Creating reviews...")
    reviews_data = [
        ("cinephile", "The Shawshank Redemption", 5, "Patient, humane and earned every minute."),
        ("popcorn_pete", "The Shawshank Redemption", 4, "A bit long but the ending lands."),
        ("noir_fan", "The Shawshank Redemption", 4, "Freeman's narration carries it."),
        ("cinephile", "Spirited Away", 5, "Endlessly inventive."),
        ("popcorn_pete", "Spirited Away", 3, "Beautiful, but strange for my taste."),
        ("noir_fan", "The Third Man", 5, "The sewer chase still has no equal."),
        ("cinephile", "Arrival", 4, "Quietly devastating once the structure clicks."),
    ]

    user_ids = {name: user.id for name, user in users.items()}
    movie_ids = {title: movie.id for title, movie in movies.items()}

    reviews = []
    for username, title, rating, text in reviews_data:
        reviews.append(submit_review(
            db,
            user_id=user_ids[username],
            movie_id=movie_ids[title],
            rating=rating,
            review_text=text,
            is_spoiler=False,
        ))

    first_id = reviews[0].id
    vote_helpful(db, review_id=first_id, user_id=user_ids["popcorn_pete"], is_helpful=True)
    vote_helpful(db, review_id=first_id, user_id=user_ids["noir_fan"], is_helpful=True)

    print(f"Created {len(reviews)} reviews.")
    return reviews


def seed_database(clear_existing: bool = True) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing data before seeding.
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()

    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        users = create_users(db)
        movies = create_movies(db)
        reviews = create_reviews(db, users, movies)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nSummary:")
        print(f"  - Users: {len(users)}")
        print(f"  - Movies: {len(movies)}")
        print(f"  - Reviews: {len(reviews)}")
        print("\nAPI documentation at http://localhost:5000/docs")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
