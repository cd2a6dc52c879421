"""
Business logic for bookmarks.

A bookmark is a ``(user_id, event_id)`` row; its existence means the
user saved the event.  The pair is the table's primary key, so a user
can bookmark an event at most once.
"""

import logging
from typing import List

from fastapi import Request

from ..core.db import Database
from ..core.errors import NotFoundError
from ..schemas.event import EventSummary
from .event_service import SUMMARY_COLUMNS, EventService

logger = logging.getLogger(__name__)


class BookmarkService:

    def __init__(self, db: Database, events: EventService) -> None:
        self.db = db
        self.events = events

    async def add(self, user_id: int, event_id: int) -> bool:
        """Bookmark an event for a user.

        Returns ``False`` if the bookmark already existed.  Raises
        ``NotFoundError`` for unknown events.
        """
        with self.db.cursor() as cursor:
            exists = cursor.execute(
                "SELECT 1 FROM events WHERE event_id = ?", (event_id,)
            ).fetchone()
            if not exists:
                raise NotFoundError("Event tidak ditemukan")
            cursor.execute(
                "INSERT OR IGNORE INTO bookmarks (user_id, event_id) VALUES (?, ?)",
                (user_id, event_id),
            )
            created = cursor.rowcount == 1
        if created:
            logger.info("User %s bookmarked event %s", user_id, event_id)
        return created

    async def remove(self, user_id: int, event_id: int) -> bool:
        """Remove a bookmark; returns ``False`` if there was none."""
        with self.db.cursor() as cursor:
            cursor.execute(
                "DELETE FROM bookmarks WHERE user_id = ? AND event_id = ?",
                (user_id, event_id),
            )
            removed = cursor.rowcount == 1
        if removed:
            logger.info("User %s removed bookmark on event %s", user_id, event_id)
        return removed

    async def list_for_user(self, user_id: int) -> List[EventSummary]:
        """Events bookmarked by ``user_id``, earliest first."""
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                f"""
                SELECT {SUMMARY_COLUMNS}
                FROM events e
                JOIN bookmarks bm ON bm.event_id = e.event_id
                WHERE bm.user_id = ?
                ORDER BY e.tanggal_mulai ASC, e.event_id ASC
                """,
                (user_id, user_id),
            ).fetchall()
        return [self.events.to_summary(row) for row in rows]


def get_bookmark_service(request: Request) -> BookmarkService:
    return request.app.state.bookmark_service
