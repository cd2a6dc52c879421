"""
Event endpoints for API v1.

Reads are public.  ``GET /events`` uses soft authentication: a valid
bearer token only personalises ``is_bookmarked``, an invalid one is
ignored.  Create, update and delete require a valid token and accept
``multipart/form-data`` with an optional ``banner_image`` file.

An ``{event_id}`` that is not an integer cannot name an event, so it
answers 404 like any other unknown id.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status

from informate_api.app.core.errors import NotFoundError, PayloadTooLargeError
from informate_api.app.core.security import get_current_user, get_optional_user_id
from informate_api.app.schemas.common import Envelope, MessageResponse
from informate_api.app.schemas.event import (
    EventCreated,
    EventDetail,
    EventFields,
    EventFilters,
    EventSummary,
)
from informate_api.app.schemas.user import UserRead
from informate_api.app.services.event_service import EventService, get_event_service
from informate_api.app.services.image_service import ImageUpload


router = APIRouter()


def event_id_param(event_id: str = Path(...)) -> int:
    """Parse the ``{event_id}`` path segment; non-integers are unknown events."""
    try:
        return int(event_id)
    except ValueError:
        raise NotFoundError("Event tidak ditemukan") from None


def event_form(
    nama_acara: Optional[str] = Form(None),
    deskripsi: Optional[str] = Form(None),
    tanggal_mulai: Optional[str] = Form(None),
    lokasi: Optional[str] = Form(None),
    kategori: Optional[str] = Form(None),
    kuota_maksimal: Optional[str] = Form(None),
    harga_tiket: Optional[str] = Form(None),
    contact_person: Optional[str] = Form(None),
) -> EventFields:
    """Collect the multipart event fields; absent ones stay ``UNSET``."""
    return EventFields.from_form(
        nama_acara=nama_acara,
        deskripsi=deskripsi,
        tanggal_mulai=tanggal_mulai,
        lokasi=lokasi,
        kategori=kategori,
        kuota_maksimal=kuota_maksimal,
        harga_tiket=harga_tiket,
        contact_person=contact_person,
    )


async def read_banner(upload, max_bytes: int) -> ImageUpload:
    """Read at most ``max_bytes + 1`` bytes of ``upload``.

    Anything beyond the limit is never pulled into memory: one extra byte
    is enough to know the file is too large.
    """
    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise PayloadTooLargeError(
            f"Ukuran file maksimal {max_bytes // (1024 * 1024)}MB",
            details={"max_size": max_bytes},
        )
    return ImageUpload(
        content=content,
        media_type=upload.content_type or "",
        filename=upload.filename,
    )


async def banner_upload(
    banner_image: Optional[UploadFile] = File(None),
    events: EventService = Depends(get_event_service),
) -> Optional[ImageUpload]:
    if banner_image is None or not banner_image.filename:
        return None
    return await read_banner(banner_image, events.image_sink.max_bytes)


@router.get("", response_model=Envelope[List[EventSummary]])
async def list_events(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user_id: Optional[int] = Depends(get_optional_user_id),
    events: EventService = Depends(get_event_service),
) -> Envelope[List[EventSummary]]:
    """List events, earliest first.

    - **search**: substring of the event name.
    - **category**: exact category.
    - **month**, **year**: only applied together.
    - **startDate**, **endDate**: inclusive date range, only applied together.
    """
    filters = EventFilters(
        search=search,
        category=category,
        month=month,
        year=year,
        start_date=start_date,
        end_date=end_date,
    )
    result = await events.list_events(filters, user_id=user_id)
    return Envelope(message="Berhasil mengambil data event", data=result)


@router.get("/categories", response_model=Envelope[List[str]], response_model_exclude_none=True)
async def list_categories(events: EventService = Depends(get_event_service)) -> Envelope[List[str]]:
    """Distinct categories used by existing events."""
    return Envelope(data=await events.list_categories())


@router.get("/{event_id}", response_model=Envelope[EventDetail])
async def get_event(
    event_id: int = Depends(event_id_param),
    events: EventService = Depends(get_event_service),
) -> Envelope[EventDetail]:
    """Retrieve a single event with its creator's name.  404 if unknown."""
    return Envelope(data=await events.get_event(event_id))


@router.post("", response_model=Envelope[EventCreated], status_code=status.HTTP_201_CREATED)
async def create_event(
    current_user: UserRead = Depends(get_current_user),
    fields: EventFields = Depends(event_form),
    image: Optional[ImageUpload] = Depends(banner_upload),
    events: EventService = Depends(get_event_service),
) -> Envelope[EventCreated]:
    """Create an event owned by the authenticated user.

    ``nama_acara``, ``tanggal_mulai`` and ``lokasi`` are required.  The
    optional ``banner_image`` must be JPEG or PNG and at most 2 MB.
    """
    event_id = await events.create_event(fields, current_user.user_id, image)
    return Envelope(message="Event berhasil ditambahkan", data=EventCreated(event_id=event_id))


@router.put("/{event_id}", response_model=MessageResponse)
async def update_event(
    event_id: int = Depends(event_id_param),
    current_user: UserRead = Depends(get_current_user),
    fields: EventFields = Depends(event_form),
    image: Optional[ImageUpload] = Depends(banner_upload),
    events: EventService = Depends(get_event_service),
) -> MessageResponse:
    """Replace all fields of an event.

    The banner is only replaced when a new ``banner_image`` is sent.
    """
    await events.update_event(event_id, fields, image, actor=current_user)
    return MessageResponse(message="Event berhasil diperbarui")


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: int = Depends(event_id_param),
    current_user: UserRead = Depends(get_current_user),
    events: EventService = Depends(get_event_service),
) -> MessageResponse:
    """Delete an event together with its bookmarks."""
    await events.delete_event(event_id, actor=current_user)
    return MessageResponse(message="Event berhasil dihapus")
