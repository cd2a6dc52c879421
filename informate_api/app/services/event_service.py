"""
Business logic for events.

``EventService`` holds the event query engine (filtered list with the
per-user bookmark flag), the detail lookup, the category listing and the
create/update/delete operations including banner ingestion.

``create_app`` builds one ``EventService`` per application from its
``Database``, image sink and edit policy, and keeps it on ``app.state``;
endpoints reach it through ``get_event_service``.
"""

import logging
from typing import Any, List, Mapping, Optional

from fastapi import Request

from ..core.db import Database
from ..core.errors import NotFoundError
from ..schemas.event import EventDetail, EventFields, EventFilters, EventSummary
from .image_service import ImageSink, ImageUpload
from .policy import EventPolicy

logger = logging.getLogger(__name__)

# Bound in place of the caller's id when the request is anonymous.
# AUTOINCREMENT ids start at 1, so no bookmark ever matches it.
ANONYMOUS_USER_ID = 0

SUMMARY_COLUMNS = """
    e.event_id,
    e.nama_acara,
    e.deskripsi,
    e.tanggal_mulai,
    e.lokasi,
    e.banner_image,
    e.kategori,
    e.harga_tiket,
    EXISTS (
        SELECT 1 FROM bookmarks b
        WHERE b.event_id = e.event_id AND b.user_id = ?
    ) AS is_bookmarked
"""


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class EventService:
    """Service for browsing and managing events stored in SQLite."""

    def __init__(self, db: Database, image_sink: ImageSink, policy: EventPolicy) -> None:
        self.db = db
        self.image_sink = image_sink
        self.policy = policy

    def to_summary(self, row: Mapping[str, Any]) -> EventSummary:
        return EventSummary(
            event_id=row["event_id"],
            nama_acara=row["nama_acara"],
            deskripsi=row["deskripsi"],
            tanggal_mulai=row["tanggal_mulai"],
            lokasi=row["lokasi"],
            kategori=row["kategori"],
            harga_tiket=row["harga_tiket"],
            image_url=self.image_sink.url_for(row["banner_image"]),
            is_bookmarked=bool(row["is_bookmarked"]),
        )

    async def list_events(
        self,
        filters: Optional[EventFilters] = None,
        user_id: Optional[int] = None,
    ) -> List[EventSummary]:
        """Return events matching ``filters``, earliest first.

        - ``search``: substring of ``nama_acara`` (case-insensitive for ASCII).
        - ``category``: exact match on ``kategori``.
        - ``month`` + ``year``: calendar month of ``tanggal_mulai``.
        - ``start_date`` + ``end_date``: inclusive range on the start date.

        ``month`` without ``year`` (and the other way round), or only one of
        ``start_date``/``end_date``, is ignored rather than rejected.
        ``is_bookmarked`` reflects ``user_id``'s bookmarks and is always
        false for anonymous callers.
        """
        filters = filters or EventFilters()
        query = f"SELECT {SUMMARY_COLUMNS} FROM events e WHERE 1=1"
        params: list = [user_id if user_id is not None else ANONYMOUS_USER_ID]

        if filters.search:
            query += " AND e.nama_acara LIKE ? ESCAPE '\\'"
            params.append(_like_pattern(filters.search))
        if filters.category:
            query += " AND e.kategori = ?"
            params.append(filters.category)
        if filters.month is not None and filters.year is not None:
            query += (
                " AND CAST(strftime('%m', e.tanggal_mulai) AS INTEGER) = ?"
                " AND CAST(strftime('%Y', e.tanggal_mulai) AS INTEGER) = ?"
            )
            params.extend([filters.month, filters.year])
        elif filters.month is not None or filters.year is not None:
            logger.debug("Ignoring unpaired month/year filter: %s/%s", filters.month, filters.year)
        if filters.start_date is not None and filters.end_date is not None:
            query += " AND date(e.tanggal_mulai) BETWEEN ? AND ?"
            params.extend([filters.start_date.isoformat(), filters.end_date.isoformat()])
        elif filters.start_date is not None or filters.end_date is not None:
            logger.debug(
                "Ignoring unpaired date range filter: %s..%s", filters.start_date, filters.end_date
            )

        query += " ORDER BY e.tanggal_mulai ASC, e.event_id ASC"

        with self.db.cursor() as cursor:
            rows = cursor.execute(query, tuple(params)).fetchall()
        return [self.to_summary(row) for row in rows]

    async def list_categories(self) -> List[str]:
        """Distinct non-empty categories in ascending order."""
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                "SELECT DISTINCT kategori FROM events "
                "WHERE kategori IS NOT NULL AND kategori != '' ORDER BY kategori ASC"
            ).fetchall()
        return [row["kategori"] for row in rows]

    async def get_event(self, event_id: int) -> EventDetail:
        """Retrieve a single event with its creator's name.

        Raises ``NotFoundError`` if the event does not exist.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                """
                SELECT e.*, u.nama AS nama_creator
                FROM events e
                LEFT JOIN users u ON e.creator_id = u.user_id
                WHERE e.event_id = ?
                """,
                (event_id,),
            ).fetchone()
        if not row:
            raise NotFoundError("Event tidak ditemukan")
        return EventDetail(
            event_id=row["event_id"],
            nama_acara=row["nama_acara"],
            deskripsi=row["deskripsi"],
            tanggal_mulai=row["tanggal_mulai"],
            lokasi=row["lokasi"],
            kategori=row["kategori"],
            harga_tiket=row["harga_tiket"],
            kuota_maksimal=row["kuota_maksimal"],
            contact_person=row["contact_person"],
            image_url=self.image_sink.url_for(row["banner_image"]),
            creator_id=row["creator_id"],
            nama_creator=row["nama_creator"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    async def create_event(
        self,
        fields: EventFields,
        creator_id: int,
        image: Optional[ImageUpload] = None,
    ) -> int:
        """Insert a new event and return its id.

        Fields and image are validated before anything is written;
        ``ValidationError``, ``UnsupportedMediaError`` or
        ``PayloadTooLargeError`` leave the table untouched.
        """
        values = fields.resolve()
        banner = self.image_sink.store(image) if image is not None else None
        with self.db.cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO events
                    (nama_acara, deskripsi, tanggal_mulai, lokasi, kategori,
                     kuota_maksimal, harga_tiket, contact_person, banner_image, creator_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    values["nama_acara"],
                    values["deskripsi"],
                    values["tanggal_mulai"],
                    values["lokasi"],
                    values["kategori"],
                    values["kuota_maksimal"],
                    values["harga_tiket"],
                    values["contact_person"],
                    banner,
                    creator_id,
                ),
            )
            event_id = cursor.lastrowid
        logger.info("User %s created event %s '%s'", creator_id, event_id, values["nama_acara"])
        return event_id

    async def update_event(
        self,
        event_id: int,
        fields: EventFields,
        image: Optional[ImageUpload] = None,
        actor: Optional[Any] = None,
    ) -> None:
        """Overwrite every mutable field of an event.

        Fields that were not sent fall back to the same defaults as on
        creation; there is no partial merge.  ``creator_id`` never
        changes, and the stored banner is kept unless ``image`` is given.
        Raises ``NotFoundError`` for unknown ids.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT event_id, creator_id FROM events WHERE event_id = ?", (event_id,)
            ).fetchone()
            if not row:
                raise NotFoundError("Event tidak ditemukan")
            self.policy.check(actor, "update", row)

            values = fields.resolve()
            assignments = [f"{column} = ?" for column in values]
            params = list(values.values())
            if image is not None:
                assignments.append("banner_image = ?")
                params.append(self.image_sink.store(image))
            params.append(event_id)
            cursor.execute(
                f"UPDATE events SET {', '.join(assignments)}, updated_at = CURRENT_TIMESTAMP "
                "WHERE event_id = ?",
                tuple(params),
            )
        logger.info(
            "User %s updated event %s (sent: %s, new image: %s)",
            getattr(actor, "user_id", None),
            event_id,
            ", ".join(sorted(fields.provided())) or "-",
            image is not None,
        )

    async def delete_event(self, event_id: int, actor: Optional[Any] = None) -> None:
        """Delete an event and its bookmarks.

        Irreversible.  Raises ``NotFoundError`` if the event does not exist.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT event_id, creator_id FROM events WHERE event_id = ?", (event_id,)
            ).fetchone()
            if not row:
                raise NotFoundError("Event tidak ditemukan")
            self.policy.check(actor, "delete", row)
            cursor.execute("DELETE FROM bookmarks WHERE event_id = ?", (event_id,))
            cursor.execute("DELETE FROM events WHERE event_id = ?", (event_id,))
        logger.info("User %s deleted event %s", getattr(actor, "user_id", None), event_id)


def get_event_service(request: Request) -> EventService:
    """Dependency returning the application's ``EventService``."""
    return request.app.state.event_service
