"""
Document store for posts.

``PostRepository`` wraps a single SQLite connection and exposes the
operations the post services need: filtered and paginated finds,
counts, lookups by id, inserts, in-place vote updates and deletes.
List queries are described by a ``PostQuery`` so that a page and its
total count are always computed from the same filter.

The repository never commits; callers own the transaction so that a
read-modify-write (voting) can run under a single lock.  Any
``sqlite3.Error``, and any parameter SQLite cannot store, is logged and
re-raised as ``StorageFailureError``.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from forum_api.app.core.db import is_valid_object_id, new_object_id
from forum_api.app.core.errors import StorageFailureError
from forum_api.app.schemas.post import PostRead, Tag, Vote

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, user_id, username, title, body, tags, featured, "
    "upvotes, downvotes, vote_count, created_at"
)


@dataclass
class PostQuery:
    """Filter for list queries.  Unset fields do not constrain the result."""

    featured: Optional[bool] = None
    tag: Optional[str] = None
    search: Optional[str] = None
    user_id: Optional[str] = None

    def where(self) -> Tuple[str, List[Any]]:
        """Return the ``WHERE`` clause (possibly empty) and its parameters."""
        clauses: List[str] = []
        params: List[Any] = []
        if self.tag is not None:
            clauses.append(
                "EXISTS (SELECT 1 FROM json_each(posts.tags) "
                "WHERE json_extract(json_each.value, '$.name') = ?)"
            )
            params.append(self.tag)
        if self.search is not None:
            clauses.append("icontains(title, ?)")
            params.append(self.search)
        if self.user_id is not None:
            clauses.append("user_id = ?")
            params.append(self.user_id)
        if self.featured is not None:
            clauses.append("featured = ?")
            params.append(1 if self.featured else 0)
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params


def _dump_votes(votes: List[Vote]) -> str:
    return json.dumps([vote.model_dump() for vote in votes])


def _row_to_post(row: sqlite3.Row) -> PostRead:
    return PostRead(
        id=row["id"],
        user_id=row["user_id"],
        username=row["username"],
        title=row["title"],
        body=row["body"],
        tags=[Tag(**tag) for tag in json.loads(row["tags"])],
        featured=bool(row["featured"]),
        upvotes=[Vote(**vote) for vote in json.loads(row["upvotes"])],
        downvotes=[Vote(**vote) for vote in json.loads(row["downvotes"])],
        vote_count=row["vote_count"],
        created_at=row["created_at"],
    )


class PostRepository:
    """Post persistence on top of an open SQLite connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    @staticmethod
    def is_valid_id(value: object) -> bool:
        return is_valid_object_id(value)

    def _execute(self, sql: str, params: Tuple[Any, ...] = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, params)
        except (sqlite3.Error, OverflowError) as e:
            logger.error("Post storage query failed: %s", e)
            raise StorageFailureError() from e

    def begin_write(self) -> None:
        """Start a transaction holding the database write lock.

        Reads made after this call cannot be invalidated by another
        writer until the caller commits or rolls back.
        """
        self._execute("BEGIN IMMEDIATE")

    def find(self, query: PostQuery, skip: int = 0, limit: Optional[int] = None) -> List[PostRead]:
        """Return posts matching ``query`` in insertion order."""
        where, params = query.where()
        sql = f"SELECT {_COLUMNS} FROM posts{where} ORDER BY rowid"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, skip])
        rows = self._execute(sql, tuple(params)).fetchall()
        return [_row_to_post(row) for row in rows]

    def count(self, query: PostQuery) -> int:
        where, params = query.where()
        row = self._execute(f"SELECT COUNT(*) AS count FROM posts{where}", tuple(params)).fetchone()
        return row["count"]

    def get(self, post_id: str) -> Optional[PostRead]:
        """Return the post with ``post_id``, or ``None``.

        Malformed identifiers never match anything and do not reach
        the database.
        """
        if not self.is_valid_id(post_id):
            return None
        row = self._execute(f"SELECT {_COLUMNS} FROM posts WHERE id = ?", (post_id,)).fetchone()
        return _row_to_post(row) if row else None

    def insert(
        self,
        *,
        user_id: str,
        username: str,
        title: str,
        body: str,
        tags: List[Tag],
        created_at: str,
        featured: bool = False,
    ) -> PostRead:
        """Insert a new post without votes and return it with its id."""
        post = PostRead(
            id=new_object_id(),
            user_id=user_id,
            username=username,
            title=title,
            body=body,
            tags=tags,
            featured=featured,
            created_at=created_at,
        )
        self._execute(
            f"INSERT INTO posts ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                post.id,
                post.user_id,
                post.username,
                post.title,
                post.body,
                json.dumps([tag.model_dump() for tag in post.tags]),
                int(post.featured),
                _dump_votes(post.upvotes),
                _dump_votes(post.downvotes),
                post.vote_count,
                post.created_at,
            ),
        )
        return post

    def save_votes(self, post_id: str, upvotes: List[Vote], downvotes: List[Vote]) -> int:
        """Replace both vote lists of a post.

        ``vote_count`` is recomputed from the lists in the same
        statement.  Returns the new count.
        """
        vote_count = len(upvotes) - len(downvotes)
        self._execute(
            "UPDATE posts SET upvotes = ?, downvotes = ?, vote_count = ? WHERE id = ?",
            (_dump_votes(upvotes), _dump_votes(downvotes), vote_count, post_id),
        )
        return vote_count

    def delete(self, post_id: str) -> bool:
        cursor = self._execute("DELETE FROM posts WHERE id = ?", (post_id,))
        return cursor.rowcount > 0
