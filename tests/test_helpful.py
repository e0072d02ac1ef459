"""
Tests for the helpful-vote tally.

Pure functions, no database: votes are plain dataclass instances.
"""

from dataclasses import dataclass

from movie_reviews.services.helpful import (
    HelpfulTally,
    apply_vote,
    find_vote,
    tally_votes,
)


@dataclass
class FakeVote:
    user_id: int
    is_helpful: bool = True


def new_vote(user_id: int):
    return lambda: FakeVote(user_id=user_id)


class TestApplyVote:
    def test_first_vote_is_appended(self):
        votes: list[FakeVote] = []

        appended = apply_vote(votes, 1, True, new_vote(1))

        assert appended is True
        assert votes == [FakeVote(user_id=1, is_helpful=True)]

    def test_second_vote_by_same_user_overwrites(self):
        votes = [FakeVote(user_id=1, is_helpful=True)]

        appended = apply_vote(votes, 1, False, new_vote(1))

        assert appended is False
        assert len(votes) == 1
        assert votes[0].is_helpful is False

    def test_overwrite_keeps_position(self):
        votes = [
            FakeVote(user_id=1, is_helpful=True),
            FakeVote(user_id=2, is_helpful=True),
            FakeVote(user_id=3, is_helpful=False),
        ]

        apply_vote(votes, 2, False, new_vote(2))

        assert [v.user_id for v in votes] == [1, 2, 3]
        assert votes[1].is_helpful is False

    def test_factory_not_called_for_existing_voter(self):
        votes = [FakeVote(user_id=5)]

        def factory():
            raise AssertionError("should not build a new vote")

        apply_vote(votes, 5, True, factory)

    def test_same_value_twice_is_idempotent(self):
        votes: list[FakeVote] = []

        apply_vote(votes, 1, True, new_vote(1))
        apply_vote(votes, 1, True, new_vote(1))

        assert tally_votes(votes) == HelpfulTally(helpful_count=1, not_helpful_count=0)


class TestTally:
    def test_empty(self):
        tally = tally_votes([])

        assert tally.helpful_count == 0
        assert tally.not_helpful_count == 0
        assert tally.total_votes == 0

    def test_counts_each_side(self):
        votes = [
            FakeVote(1, True),
            FakeVote(2, False),
            FakeVote(3, True),
        ]

        tally = tally_votes(votes)

        assert tally.helpful_count == 2
        assert tally.not_helpful_count == 1

    def test_totals_match_distinct_voters(self):
        votes: list[FakeVote] = []
        for user_id, is_helpful in [(1, True), (2, True), (1, False), (3, False), (2, True)]:
            apply_vote(votes, user_id, is_helpful, new_vote(user_id))

        tally = tally_votes(votes)

        assert tally.total_votes == len({v.user_id for v in votes}) == 3
        assert tally == HelpfulTally(helpful_count=1, not_helpful_count=2)


class TestFindVote:
    def test_found(self):
        votes = [FakeVote(1), FakeVote(2, False)]
        assert find_vote(votes, 2) is votes[1]

    def test_missing(self):
        assert find_vote([FakeVote(1)], 9) is None
