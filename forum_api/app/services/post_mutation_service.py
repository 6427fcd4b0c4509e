"""
Business logic for creating, deleting and voting on posts.

Every mutation receives the caller's bearer token explicitly and
resolves it through ``check_auth`` before doing anything else.
Validation and ownership checks happen before any write, so a failed
call never leaves a partial change behind.
"""

import logging
from typing import List, Optional

from ..core.clock import now_iso
from ..core.errors import NotFoundError, UnauthorizedError, ValidationFailedError
from ..core.security import check_auth
from ..repositories.post_repository import PostRepository
from ..schemas.post import PostRead, Tag
from .voting import VoteDirection, apply_vote


class PostMutationService:
    """Service for post writes."""

    @classmethod
    async def create_post(
        cls,
        title: str,
        body: str,
        tags: Optional[List[Tag]],
        auth_token: Optional[str],
    ) -> PostRead:
        """Create a post owned by the caller and return it.

        Checks run in order and stop at the first failure:
        authentication, non-blank title, non-blank body, at least one
        tag.  Title, body and tags are stored as given.
        """
        logger = logging.getLogger(__name__)
        user = check_auth(auth_token)

        if title.strip() == "":
            raise ValidationFailedError("Post title must not be empty")
        if body.strip() == "":
            raise ValidationFailedError("Post body must not be empty")
        if not tags:
            raise ValidationFailedError("Post Tags must not be empty")

        from forum_api.app.core.db import get_connection
        conn = get_connection()
        try:
            post = PostRepository(conn).insert(
                user_id=user["id"],
                username=user["username"],
                title=title,
                body=body,
                tags=tags,
                created_at=now_iso(),
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("User %s created post %s", user["username"], post.id)
        return post

    @classmethod
    async def delete_post(cls, post_id: str, auth_token: Optional[str]) -> str:
        """Delete a post owned by the caller.

        Raises ``NotFoundError`` for unknown or malformed ids and
        ``UnauthorizedError`` when the caller's username differs from
        the post's owner.  Returns a confirmation message.
        """
        logger = logging.getLogger(__name__)
        user = check_auth(auth_token)

        from forum_api.app.core.db import get_connection
        conn = get_connection()
        try:
            repo = PostRepository(conn)
            post = repo.get(post_id)
            if post is None:
                raise NotFoundError()
            if user["username"] != post.username:
                logger.warning(
                    "User %s tried to delete post %s owned by %s",
                    user["username"], post_id, post.username,
                )
                raise UnauthorizedError("Action not allowed")
            repo.delete(post_id)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("User %s deleted post %s", user["username"], post_id)
        return "Post deleted successfully"

    @classmethod
    async def upvote_post(cls, post_id: str, auth_token: Optional[str]) -> PostRead:
        return await cls._vote(post_id, auth_token, VoteDirection.UP)

    @classmethod
    async def downvote_post(cls, post_id: str, auth_token: Optional[str]) -> PostRead:
        return await cls._vote(post_id, auth_token, VoteDirection.DOWN)

    @classmethod
    async def _vote(cls, post_id: str, auth_token: Optional[str], direction: VoteDirection) -> PostRead:
        """Toggle the caller's vote on a post and return the updated post.

        The post is read and written back inside one write-locked
        transaction, so concurrent votes on the same post are applied
        one after another.
        """
        logger = logging.getLogger(__name__)
        username = check_auth(auth_token)["username"]

        from forum_api.app.core.db import get_connection
        conn = get_connection()
        try:
            repo = PostRepository(conn)
            repo.begin_write()
            post = repo.get(post_id)
            if post is None:
                raise NotFoundError()
            updated = apply_vote(post, direction, username, now_iso())
            repo.save_votes(post_id, updated.upvotes, updated.downvotes)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info(
            "User %s voted %s on post %s (vote_count=%d)",
            username, direction.value, post_id, updated.vote_count,
        )
        return updated
