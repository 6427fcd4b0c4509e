"""
API endpoints for forum posts.

These routes expose the post queries (listing, fetching a single
post, fetching a user's posts) and mutations (create, delete, upvote,
downvote).  Handlers only translate HTTP into service calls: the
bearer token is passed through untouched and every ``ForumError`` is
converted into an ``HTTPException`` whose ``detail`` carries the
error ``code`` and ``message``.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from forum_api.app.core.errors import (
    ForumError,
    InvalidIdentifierError,
    NotFoundError,
    StorageFailureError,
    UnauthenticatedError,
    UnauthorizedError,
    ValidationFailedError,
)
from forum_api.app.core.security import get_bearer_token
from forum_api.app.schemas.post import PostCreate, PostPage, PostRead
from forum_api.app.services.post_mutation_service import PostMutationService
from forum_api.app.services.post_query_service import PostQueryService


router = APIRouter()

_STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidIdentifierError: status.HTTP_404_NOT_FOUND,
    UnauthenticatedError: status.HTTP_401_UNAUTHORIZED,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    ValidationFailedError: status.HTTP_400_BAD_REQUEST,
    StorageFailureError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _http_error(error: ForumError) -> HTTPException:
    status_code = _STATUS_BY_ERROR.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message},
        headers=headers,
    )


@router.get("/posts", response_model=PostPage, summary="List posts")
async def get_posts(
    featured: bool = Query(..., description="Only posts with this featured flag"),
    page: Optional[float] = Query(None, description="Page number, starting at 1"),
    tag: Optional[str] = Query(None, description="Exact tag name; overrides search"),
    search: Optional[str] = Query(None, description="Case-insensitive title substring"),
) -> PostPage:
    """List posts, four per page.

    - **featured** is required and always applied.
    - **tag** or **search** narrow the list and reset the page to 1.
    """
    try:
        return await PostQueryService.get_posts(page=page, tag=tag, search=search, featured=featured)
    except ForumError as e:
        raise _http_error(e) from e


@router.get("/posts/{post_id}", response_model=PostRead, summary="Get a single post")
async def get_post(post_id: str) -> PostRead:
    try:
        return await PostQueryService.get_post(post_id)
    except ForumError as e:
        raise _http_error(e) from e


@router.get("/users/{user_id}/posts", response_model=PostPage, summary="List a user's posts")
async def get_user_posts(
    user_id: str,
    page: Optional[float] = Query(None, description="Page number, starting at 1"),
) -> PostPage:
    try:
        return await PostQueryService.get_user_posts(user_id, page)
    except ForumError as e:
        raise _http_error(e) from e


@router.post(
    "/posts",
    response_model=PostRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
)
async def create_post(
    data: PostCreate,
    token: Optional[str] = Depends(get_bearer_token),
) -> PostRead:
    """Create a post owned by the authenticated caller."""
    try:
        return await PostMutationService.create_post(data.title, data.body, data.tags, token)
    except ForumError as e:
        raise _http_error(e) from e


@router.delete("/posts/{post_id}", response_model=Dict[str, str], summary="Delete a post")
async def delete_post(
    post_id: str,
    token: Optional[str] = Depends(get_bearer_token),
) -> Dict[str, str]:
    """Delete a post.  Only its owner may do so."""
    try:
        message = await PostMutationService.delete_post(post_id, token)
    except ForumError as e:
        raise _http_error(e) from e
    return {"message": message}


@router.post("/posts/{post_id}/upvote", response_model=PostRead, summary="Toggle an upvote")
async def upvote_post(
    post_id: str,
    token: Optional[str] = Depends(get_bearer_token),
) -> PostRead:
    try:
        return await PostMutationService.upvote_post(post_id, token)
    except ForumError as e:
        raise _http_error(e) from e


@router.post("/posts/{post_id}/downvote", response_model=PostRead, summary="Toggle a downvote")
async def downvote_post(
    post_id: str,
    token: Optional[str] = Depends(get_bearer_token),
) -> PostRead:
    try:
        return await PostMutationService.downvote_post(post_id, token)
    except ForumError as e:
        raise _http_error(e) from e
