"""
Bookmark endpoints for API v1.

All routes act on the authenticated user's own bookmarks.
"""

from typing import List

from fastapi import APIRouter, Depends

from informate_api.app.core.security import get_current_user
from informate_api.app.schemas.common import Envelope, MessageResponse
from informate_api.app.schemas.event import EventSummary
from informate_api.app.schemas.user import UserRead
from informate_api.app.services.bookmark_service import BookmarkService, get_bookmark_service

from .events import event_id_param


router = APIRouter()


@router.post("/events/{event_id}/bookmark", response_model=MessageResponse)
async def add_bookmark(
    event_id: int = Depends(event_id_param),
    current_user: UserRead = Depends(get_current_user),
    bookmarks: BookmarkService = Depends(get_bookmark_service),
) -> MessageResponse:
    """Bookmark an event.  Bookmarking twice is harmless."""
    created = await bookmarks.add(current_user.user_id, event_id)
    message = "Event disimpan ke bookmark" if created else "Event sudah ada di bookmark"
    return MessageResponse(message=message)


@router.delete("/events/{event_id}/bookmark", response_model=MessageResponse)
async def remove_bookmark(
    event_id: int = Depends(event_id_param),
    current_user: UserRead = Depends(get_current_user),
    bookmarks: BookmarkService = Depends(get_bookmark_service),
) -> MessageResponse:
    await bookmarks.remove(current_user.user_id, event_id)
    return MessageResponse(message="Bookmark dihapus")


@router.get("/bookmarks", response_model=Envelope[List[EventSummary]])
async def list_bookmarks(
    current_user: UserRead = Depends(get_current_user),
    bookmarks: BookmarkService = Depends(get_bookmark_service),
) -> Envelope[List[EventSummary]]:
    """The caller's bookmarked events, earliest first."""
    return Envelope(data=await bookmarks.list_for_user(current_user.user_id))
