"""initial_schema

Revision ID: 3f9c1a7e2b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7e2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=False, comment='Unique username shown next to reviews'),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('profile_picture', sa.String(length=500), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, comment='Whether the account is active'),
        sa.Column('is_superuser', sa.Boolean(), nullable=False, comment='Whether user can manage the movie catalog'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('movies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False, comment='Movie title'),
        sa.Column('genres', sa.JSON(), nullable=False, comment='List of genre names'),
        sa.Column('release_year', sa.Integer(), nullable=False),
        sa.Column('director', sa.String(length=100), nullable=False),
        sa.Column('cast', sa.JSON(), nullable=False, comment='List of {name, character} entries'),
        sa.Column('synopsis', sa.Text(), nullable=False),
        sa.Column('poster_url', sa.Text(), nullable=False),
        sa.Column('trailer_url', sa.Text(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True, comment='Runtime in minutes'),
        sa.Column('tmdb_id', sa.Integer(), nullable=True, comment='ID in the external catalog, when imported'),
        sa.Column('average_rating', sa.Numeric(precision=3, scale=1), server_default='0', nullable=False, comment='Mean review rating rounded to one decimal, 0 if no reviews'),
        sa.Column('total_ratings', sa.Integer(), server_default='0', nullable=False, comment='Number of reviews behind average_rating'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint('average_rating >= 0 AND average_rating <= 5', name='ck_movie_average_rating_range'),
        sa.CheckConstraint('total_ratings >= 0', name='ck_movie_total_ratings'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tmdb_id')
    )
    op.create_index(op.f('ix_movies_title'), 'movies', ['title'], unique=False)
    op.create_index(op.f('ix_movies_release_year'), 'movies', ['release_year'], unique=False)
    op.create_index(op.f('ix_movies_average_rating'), 'movies', ['average_rating'], unique=False)

    op.create_table('reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('movie_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False, comment='Rating from 1-5 stars'),
        sa.Column('review_text', sa.Text(), nullable=False, comment='Review text content'),
        sa.Column('is_spoiler', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.ForeignKeyConstraint(['movie_id'], ['movies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'movie_id', name='uq_review_user_movie')
    )
    op.create_index('ix_reviews_movie_created', 'reviews', ['movie_id', 'created_at'], unique=False)
    op.create_index('ix_reviews_user_created', 'reviews', ['user_id', 'created_at'], unique=False)

    op.create_table('review_votes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('review_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('is_helpful', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['review_id'], ['reviews.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('review_id', 'user_id', name='uq_review_vote_user')
    )
    op.create_index(op.f('ix_review_votes_review_id'), 'review_votes', ['review_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_review_votes_review_id'), table_name='review_votes')
    op.drop_table('review_votes')
    op.drop_index('ix_reviews_user_created', table_name='reviews')
    op.drop_index('ix_reviews_movie_created', table_name='reviews')
    op.drop_table('reviews')
    op.drop_index(op.f('ix_movies_average_rating'), table_name='movies')
    op.drop_index(op.f('ix_movies_release_year'), table_name='movies')
    op.drop_index(op.f('ix_movies_title'), table_name='movies')
    op.drop_table('movies')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')
