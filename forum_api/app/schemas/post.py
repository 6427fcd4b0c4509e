"""
Pydantic schemas for forum posts.

``PostCreate`` is the request body for creating a post, ``PostRead``
is the full stored post returned by every post operation, and
``PostPage`` is the paginated view returned by list queries.  Vote
records only ever appear nested inside a post.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Tag(BaseModel):
    name: str = Field(..., examples=["python"])


class Vote(BaseModel):
    """A single up- or downvote cast by ``username``."""

    username: str
    created_at: str


class PostCreate(BaseModel):
    """Schema for creating a post.

    Fields are deliberately loose here: emptiness of ``title``,
    ``body`` and ``tags`` is checked by ``PostMutationService`` after
    the caller has been authenticated.
    """

    title: str = Field(..., examples=["How do I reverse a list?"])
    body: str = Field(..., examples=["I tried list.reverse() but it returns None."])
    tags: Optional[List[Tag]] = Field(None, examples=[[{"name": "python"}]])


class PostRead(BaseModel):
    """Schema for reading a post from the API."""

    id: str
    user_id: str
    username: str
    title: str
    body: str
    tags: List[Tag]
    featured: bool = False
    upvotes: List[Vote] = Field(default_factory=list)
    downvotes: List[Vote] = Field(default_factory=list)
    vote_count: int = 0
    created_at: str

    model_config = {
        "from_attributes": True,
    }


class PostPage(BaseModel):
    """One page of posts together with the totals for the same filter."""

    posts: List[PostRead]
    total_pages: int
    total_posts: int
