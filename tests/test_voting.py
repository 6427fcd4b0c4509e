"""Tests for the shared vote reconciliation rules."""

import random

from forum_api.app.schemas.post import PostRead, Tag, Vote
from forum_api.app.services.voting import VoteDirection, apply_vote, has_voted, reconcile_vote


def _post(**overrides) -> PostRead:
    fields = dict(
        id="0" * 32,
        user_id="1" * 32,
        username="owner",
        title="t",
        body="b",
        tags=[Tag(name="python")],
        created_at="2024-01-01T00:00:00.000Z",
    )
    fields.update(overrides)
    return PostRead(**fields)


def _names(votes):
    return [vote.username for vote in votes]


def test_reconcile_adds_vote_with_timestamp():
    this, other = reconcile_vote([], [], "alice", "2024-05-01T10:00:00.000Z")
    assert this == [Vote(username="alice", created_at="2024-05-01T10:00:00.000Z")]
    assert other == []


def test_reconcile_same_side_twice_retracts():
    this, other = reconcile_vote([], [], "alice", "t1")
    this, other = reconcile_vote(this, other, "alice", "t2")
    assert this == []
    assert other == []


def test_reconcile_displaces_opposite_vote():
    standing = [Vote(username="alice", created_at="t0"), Vote(username="bob", created_at="t0")]
    this, other = reconcile_vote([], standing, "alice", "t1")
    assert _names(this) == ["alice"]
    assert _names(other) == ["bob"]


def test_reconcile_does_not_mutate_inputs():
    this_in = [Vote(username="bob", created_at="t0")]
    other_in = [Vote(username="alice", created_at="t0")]
    reconcile_vote(this_in, other_in, "alice", "t1")
    assert _names(this_in) == ["bob"]
    assert _names(other_in) == ["alice"]


def test_has_voted():
    votes = [Vote(username="alice", created_at="t0")]
    assert has_voted(votes, "alice")
    assert not has_voted(votes, "bob")


def test_scenario_two_voters():
    post = _post()

    post = apply_vote(post, VoteDirection.UP, "A", "t1")
    assert _names(post.upvotes) == ["A"]
    assert post.vote_count == 1

    post = apply_vote(post, VoteDirection.UP, "A", "t2")
    assert post.upvotes == []
    assert post.vote_count == 0

    post = apply_vote(post, VoteDirection.DOWN, "A", "t3")
    assert _names(post.downvotes) == ["A"]
    assert post.vote_count == -1

    post = apply_vote(post, VoteDirection.UP, "B", "t4")
    assert _names(post.upvotes) == ["B"]
    assert _names(post.downvotes) == ["A"]
    assert post.vote_count == 0


def test_upvote_then_downvote_leaves_single_downvote():
    post = apply_vote(_post(), VoteDirection.UP, "A", "t1")
    post = apply_vote(post, VoteDirection.DOWN, "A", "t2")
    assert post.upvotes == []
    assert _names(post.downvotes) == ["A"]
    assert post.vote_count == -1


def test_invariants_hold_for_random_sequences():
    rng = random.Random(1234)
    voters = ["u%d" % i for i in range(6)]
    post = _post()
    for step in range(500):
        direction = rng.choice([VoteDirection.UP, VoteDirection.DOWN])
        post = apply_vote(post, direction, rng.choice(voters), "t%d" % step)

        up, down = _names(post.upvotes), _names(post.downvotes)
        assert post.vote_count == len(up) - len(down)
        assert len(set(up)) == len(up)
        assert len(set(down)) == len(down)
        assert not set(up) & set(down)
