"""
Vote reconciliation shared by upvotes and downvotes.

A voter holds at most one vote state per post: up, down or none.
``reconcile_vote`` applies one vote action to a pair of vote lists
and is called with the sides swapped for the opposite polarity, so
both mutations follow exactly the same rules:

* voting again with the same polarity retracts the vote (toggle-off);
* voting with the other polarity first removes the standing opposite
  vote (displacement) and then records the new one.
"""

from enum import Enum
from typing import List, Tuple

from ..schemas.post import PostRead, Vote


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"


def has_voted(votes: List[Vote], username: str) -> bool:
    return any(vote.username == username for vote in votes)


def reconcile_vote(
    this_side: List[Vote],
    other_side: List[Vote],
    username: str,
    created_at: str,
) -> Tuple[List[Vote], List[Vote]]:
    """Apply a vote by ``username`` to ``this_side``.

    Returns the new ``(this_side, other_side)`` lists; the inputs are
    not modified.  ``created_at`` is only used when a vote is added.
    """
    if has_voted(this_side, username):
        return [vote for vote in this_side if vote.username != username], list(other_side)

    other = [vote for vote in other_side if vote.username != username]
    return [*this_side, Vote(username=username, created_at=created_at)], other


def apply_vote(post: PostRead, direction: VoteDirection, username: str, created_at: str) -> PostRead:
    """Return a copy of ``post`` with the vote applied and ``vote_count`` recomputed."""
    if direction is VoteDirection.UP:
        upvotes, downvotes = reconcile_vote(post.upvotes, post.downvotes, username, created_at)
    else:
        downvotes, upvotes = reconcile_vote(post.downvotes, post.upvotes, username, created_at)
    return post.model_copy(
        update={
            "upvotes": upvotes,
            "downvotes": downvotes,
            "vote_count": len(upvotes) - len(downvotes),
        }
    )
