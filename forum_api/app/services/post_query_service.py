"""
Read-only post queries.

Lists are always paginated with a fixed page size of
``POSTS_PER_PAGE`` and return the page together with the total number
of matching posts and pages.  The total is counted with the very same
``PostQuery`` that selected the page.
"""

import logging
import math
from typing import Optional, Union

from ..core.errors import InvalidIdentifierError, NotFoundError
from ..repositories.post_repository import PostQuery, PostRepository
from ..schemas.post import PostPage, PostRead

POSTS_PER_PAGE = 4

# Highest page whose OFFSET still fits a signed 64-bit SQLite integer.
MAX_PAGE = (2**63 - 1) // POSTS_PER_PAGE

logger = logging.getLogger(__name__)


def normalize_page(page: Optional[Union[int, float]]) -> int:
    """Coerce a requested page number into a page index starting at 1.

    Negative numbers are taken by magnitude, missing, zero and
    non-finite pages become 1, fractions are truncated (never below 1)
    and pages beyond ``MAX_PAGE`` are capped.
    """
    if page is None or not math.isfinite(page):
        return 1
    page = abs(page) or 1
    return min(MAX_PAGE, max(1, int(page)))


def _paginate(repo: PostRepository, query: PostQuery, page: int) -> PostPage:
    posts = repo.find(query, skip=POSTS_PER_PAGE * (page - 1), limit=POSTS_PER_PAGE)
    total_posts = repo.count(query)
    return PostPage(
        posts=posts,
        total_pages=math.ceil(total_posts / POSTS_PER_PAGE),
        total_posts=total_posts,
    )


class PostQueryService:
    """Service for listing and fetching posts."""

    @classmethod
    async def get_posts(
        cls,
        page: Optional[Union[int, float]] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        featured: bool = False,
    ) -> PostPage:
        """Return one page of posts with the given ``featured`` flag.

        A ``tag`` filter takes precedence over ``search``; either of
        them resets the page to 1.  Without them the requested page is
        honoured.  Storage errors propagate as ``StorageFailureError``.
        """
        page = normalize_page(page)
        if tag:
            page = 1
            query = PostQuery(featured=featured, tag=tag)
        elif search:
            page = 1
            query = PostQuery(featured=featured, search=search)
        else:
            query = PostQuery(featured=featured)

        from forum_api.app.core.db import get_connection
        conn = get_connection()
        try:
            return _paginate(PostRepository(conn), query, page)
        finally:
            conn.close()

    @classmethod
    async def get_post(cls, post_id: str) -> PostRead:
        """Return a single post.

        Unknown and malformed identifiers are reported the same way,
        as ``NotFoundError``.
        """
        from forum_api.app.core.db import get_connection
        conn = get_connection()
        try:
            post = PostRepository(conn).get(post_id)
        finally:
            conn.close()
        if post is None:
            raise NotFoundError()
        return post

    @classmethod
    async def get_user_posts(cls, user_id: str, page: Optional[Union[int, float]] = None) -> PostPage:
        """Return one page of the posts owned by ``user_id``.

        A malformed ``user_id`` is rejected before the store is
        touched.  A user without posts gets an empty page.
        """
        if not PostRepository.is_valid_id(user_id):
            logger.debug("Rejected malformed user id %r", user_id)
            raise InvalidIdentifierError()
        page = normalize_page(page)

        from forum_api.app.core.db import get_connection
        conn = get_connection()
        try:
            return _paginate(PostRepository(conn), PostQuery(user_id=user_id), page)
        finally:
            conn.close()
