"""
Top-level router for version 1 of the API.

Aggregates the domain routers under a unified prefix.  When a new
domain is added, include its router here.
"""

from fastapi import APIRouter

from .endpoints import auth, bookmarks, events, users

router = APIRouter()

router.include_router(events.router, prefix="/events", tags=["events"])
# Bookmark routes define both ``/events/{id}/bookmark`` and ``/bookmarks``
# internally, so no prefix is given here.
router.include_router(bookmarks.router, tags=["bookmarks"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
