"""
Top-level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
The posts router defines its own ``/posts`` and ``/users/{id}/posts``
paths, so it is included without a prefix.
"""

from fastapi import APIRouter

from .endpoints import posts

router = APIRouter()

router.include_router(posts.router, tags=["posts"])
