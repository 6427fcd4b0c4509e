"""Shared fixtures: a throwaway database per test plus user and post factories."""

from typing import Iterable

import pytest

from forum_api.app.core.config import settings
from forum_api.app.core.db import get_connection, get_cursor, init_db, new_object_id
from forum_api.app.core.security import create_access_token
from forum_api.app.repositories.post_repository import PostRepository
from forum_api.app.schemas.post import Tag


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the app at an empty, migrated SQLite file."""
    db_path = tmp_path / "forum.db"
    monkeypatch.setattr(settings, "database_url", str(db_path))
    init_db()
    return db_path


@pytest.fixture
def make_user():
    """Register a user and return ``{"id", "username", "token"}``."""

    def _make_user(username: str) -> dict:
        user_id = new_object_id()
        with get_cursor() as cur:
            cur.execute(
                "INSERT INTO users (id, username, created_at) VALUES (?, ?, ?)",
                (user_id, username, "2024-01-01T00:00:00.000Z"),
            )
        token = create_access_token({"sub": user_id, "username": username})
        return {"id": user_id, "username": username, "token": token}

    return _make_user


@pytest.fixture
def make_post():
    """Insert a post directly through the repository."""

    def _make_post(
        user: dict,
        title: str = "A question",
        body: str = "Some details",
        tags: Iterable[str] = ("python",),
        featured: bool = False,
    ):
        conn = get_connection()
        try:
            post = PostRepository(conn).insert(
                user_id=user["id"],
                username=user["username"],
                title=title,
                body=body,
                tags=[Tag(name=name) for name in tags],
                created_at="2024-01-01T00:00:00.000Z",
                featured=featured,
            )
            conn.commit()
        finally:
            conn.close()
        return post

    return _make_post


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")
