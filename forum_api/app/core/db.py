"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and generating/validating document identifiers.  It
uses SQLite as a lightweight embedded document store: nested values
(tags, votes) are kept as JSON text and queried with the JSON1
functions that ship with SQLite.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import re
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings
from .errors import StorageFailureError

logger = logging.getLogger(__name__)


_OBJECT_ID_RE = re.compile(r"[0-9a-f]{32}")


def new_object_id() -> str:
    """Return a fresh identifier for a stored document."""
    return uuid.uuid4().hex


def is_valid_object_id(value: object) -> bool:
    """Check whether ``value`` is syntactically a document identifier."""
    return isinstance(value, str) and _OBJECT_ID_RE.fullmatch(value) is not None


def _icontains(haystack: Optional[str], needle: Optional[str]) -> int:
    """SQL function ``icontains(haystack, needle)``.

    Case-insensitive, literal substring test.  SQLite's own ``LIKE``
    only folds ASCII and treats ``%``/``_`` as wildcards, so searches
    go through this function instead.
    """
    if haystack is None or needle is None:
        return 0
    return int(needle.casefold() in haystack.casefold())


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the ``forum_api`` package.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # forum_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection returns rows as ``sqlite3.Row`` objects, enforces
    foreign keys and has the ``icontains`` function registered.
    Failing to open or set up the connection raises
    ``StorageFailureError``; a half-opened connection is closed first.
    """
    db_path = get_database_path()
    conn = None
    try:
        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.create_function("icontains", 2, _icontains, deterministic=True)
    except sqlite3.Error as e:
        if conn is not None:
            conn.close()
        logger.error("Cannot open database %s: %s", db_path, e)
        raise StorageFailureError() from e
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users and posts
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            created_at TEXT NOT NULL
        );

        -- tags, upvotes and downvotes hold JSON arrays:
        --   tags:      [{"name": "..."}]
        --   *votes:    [{"username": "...", "created_at": "..."}]
        -- vote_count caches len(upvotes) - len(downvotes).
        CREATE TABLE IF NOT EXISTS posts (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            username TEXT NOT NULL,
            title TEXT NOT NULL,
            body TEXT NOT NULL,
            tags TEXT NOT NULL DEFAULT '[]',
            featured INTEGER NOT NULL DEFAULT 0,
            upvotes TEXT NOT NULL DEFAULT '[]',
            downvotes TEXT NOT NULL DEFAULT '[]',
            vote_count INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL
        );
        """,
    ),
    # Migration 2: indices for the list filters
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_posts_featured ON posts(featured);
        CREATE INDEX IF NOT EXISTS idx_posts_user_id ON posts(user_id);
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any newer entries of
    ``MIGRATIONS``.  New migrations are appended with an incremented
    version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
