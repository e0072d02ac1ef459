"""
Helpful-Vote Tally

Pure logic over a review's helpful votes. Works on any sequence of
objects exposing ``user_id`` and ``is_helpful`` (ReviewVote rows in
practice), so it can be tested without a database.

Rules:
- At most one vote per user; voting again overwrites the earlier value
  in place (the vote keeps its position in the list)
- helpful_count counts votes with is_helpful=True,
  not_helpful_count those with is_helpful=False
"""

from collections.abc import Callable, Iterable, MutableSequence
from dataclasses import dataclass
from typing import Protocol, TypeVar


class Vote(Protocol):
    user_id: int
    is_helpful: bool


V = TypeVar("V", bound=Vote)


@dataclass(frozen=True)
class HelpfulTally:
    helpful_count: int = 0
    not_helpful_count: int = 0

    @property
    def total_votes(self) -> int:
        return self.helpful_count + self.not_helpful_count


def find_vote(votes: Iterable[V], user_id: int) -> V | None:
    """Return the vote cast by ``user_id``, or None."""
    for vote in votes:
        if vote.user_id == user_id:
            return vote
    return None


def apply_vote(
    votes: MutableSequence[V],
    user_id: int,
    is_helpful: bool,
    make_vote: Callable[[], V],
) -> bool:
    """
    Record ``user_id``'s vote in ``votes``.

    Args:
        votes: The review's votes, mutated in place
        user_id: Voting user
        is_helpful: The user's judgment
        make_vote: Builds a new vote entry for ``user_id``; only called
            when the user has not voted yet

    Returns:
        True if a new entry was appended, False if an existing one was
        overwritten
    """
    existing = find_vote(votes, user_id)
    if existing is not None:
        existing.is_helpful = is_helpful
        return False

    vote = make_vote()
    vote.is_helpful = is_helpful
    votes.append(vote)
    return True


def tally_votes(votes: Iterable[Vote]) -> HelpfulTally:
    helpful = 0
    not_helpful = 0
    for vote in votes:
        if vote.is_helpful:
            helpful += 1
        else:
            not_helpful += 1
    return HelpfulTally(helpful_count=helpful, not_helpful_count=not_helpful)
