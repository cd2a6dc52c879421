"""
Pydantic models and form parsing for event data.

Field names follow the wire contract of the mobile client
(``nama_acara``, ``tanggal_mulai``, ...), which is also the column
naming of the ``events`` table.

``EventSummary`` is the list projection, ``EventDetail`` the single
item projection with the creator's name.  ``EventFields`` is not a
Pydantic model: it is the field set parsed from a multipart form, where
"not sent" (``UNSET``) and "sent empty" are kept apart until
``resolve`` applies defaults and validation.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from ..core.errors import ValidationError

DEFAULT_CATEGORY = "Umum"
DEFAULT_CONTACT = "-"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class EventSummary(BaseModel):
    event_id: int
    nama_acara: str
    deskripsi: Optional[str] = None
    tanggal_mulai: str = Field(..., examples=["2025-03-01 10:00:00"])
    lokasi: str
    kategori: str = DEFAULT_CATEGORY
    harga_tiket: int = 0
    image_url: Optional[str] = Field(None, description="Self-contained data URI of the banner")
    is_bookmarked: bool = False


class EventDetail(BaseModel):
    event_id: int
    nama_acara: str
    deskripsi: Optional[str] = None
    tanggal_mulai: str
    lokasi: str
    kategori: str = DEFAULT_CATEGORY
    harga_tiket: int = 0
    kuota_maksimal: int = 0
    contact_person: str = DEFAULT_CONTACT
    image_url: Optional[str] = None
    creator_id: Optional[int] = None
    nama_creator: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class EventCreated(BaseModel):
    event_id: int


@dataclass
class EventFilters:
    """Optional list filters, combined with AND.

    ``month``/``year`` and ``start_date``/``end_date`` only apply as
    pairs; an unpaired half is ignored by the query engine.
    """

    search: Optional[str] = None
    category: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class _Unset:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

FieldValue = Union[str, _Unset]


def parse_timestamp(value: str) -> str:
    """Normalise an ISO date or datetime string to ``YYYY-MM-DD HH:MM:SS``.

    Aware datetimes (including a trailing ``Z``) are converted to UTC.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid tanggal_mulai: {value!r}", field="tanggal_mulai") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.strftime(TIMESTAMP_FORMAT)


def _parse_count(name: str, value: FieldValue) -> int:
    if value is UNSET or value.strip() == "":
        return 0
    try:
        number = int(value.strip())
    except ValueError as exc:
        raise ValidationError(f"{name} must be a whole number", field=name) from exc
    if number < 0:
        raise ValidationError(f"{name} must not be negative", field=name)
    return number


@dataclass
class EventFields:
    """Mutable event fields as submitted by a client."""

    nama_acara: FieldValue = UNSET
    deskripsi: FieldValue = UNSET
    tanggal_mulai: FieldValue = UNSET
    lokasi: FieldValue = UNSET
    kategori: FieldValue = UNSET
    kuota_maksimal: FieldValue = UNSET
    harga_tiket: FieldValue = UNSET
    contact_person: FieldValue = UNSET

    @classmethod
    def from_form(cls, **values: Optional[str]) -> "EventFields":
        """Build from form values where ``None`` means the field was not sent."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: (UNSET if v is None else v) for k, v in values.items() if k in known})

    def provided(self) -> set:
        """Names of the fields the client actually sent."""
        return {f.name for f in fields(self) if getattr(self, f.name) is not UNSET}

    def resolve(self) -> Dict[str, Any]:
        """Validate and return column values with defaults applied.

        Raises ``ValidationError`` when a mandatory field is missing or
        blank, or when a value cannot be parsed.
        """
        missing = [
            name
            for name in ("nama_acara", "tanggal_mulai", "lokasi")
            if getattr(self, name) is UNSET or not getattr(self, name).strip()
        ]
        if missing:
            raise ValidationError(
                "Nama acara, tanggal, dan lokasi wajib diisi!", field=missing[0]
            )

        def text(value: FieldValue, default: Optional[str]) -> Optional[str]:
            if value is UNSET or not value.strip():
                return default
            return value.strip()

        return {
            "nama_acara": self.nama_acara.strip(),
            "deskripsi": text(self.deskripsi, None),
            "tanggal_mulai": parse_timestamp(self.tanggal_mulai),
            "lokasi": self.lokasi.strip(),
            "kategori": text(self.kategori, DEFAULT_CATEGORY),
            "kuota_maksimal": _parse_count("kuota_maksimal", self.kuota_maksimal),
            "harga_tiket": _parse_count("harga_tiket", self.harga_tiket),
            "contact_person": text(self.contact_person, DEFAULT_CONTACT),
        }
