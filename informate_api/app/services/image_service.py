"""
Banner image ingestion.

Uploaded banners are validated (media type, size) and handed to an
``ImageSink``, which returns the value stored in ``events.banner_image``.
The sink also maps that stored value back to the ``image_url`` clients
receive.  Whatever the sink, ``image_url`` must be usable as is, without
another request to resolve it.

The only sink shipped is ``InlineImageSink``: the image is embedded in the
row as a ``data:<mime>;base64,<payload>`` URI.  Rows get larger, but no
files or object-store keys need cleaning up when events are deleted.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Type

from ..core.errors import PayloadTooLargeError, UnsupportedMediaError

logger = logging.getLogger(__name__)

# ``image/jpg`` is not a registered type but some Android pickers send it.
ALLOWED_MEDIA_TYPES = {
    "image/jpeg": "image/jpeg",
    "image/jpg": "image/jpeg",
    "image/png": "image/png",
}


@dataclass(frozen=True)
class ImageUpload:
    content: bytes
    media_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


def validate_image(upload: ImageUpload, max_bytes: int) -> str:
    """Check ``upload`` and return its canonical media type.

    Raises ``UnsupportedMediaError`` for anything but JPEG/PNG and
    ``PayloadTooLargeError`` above ``max_bytes``.
    """
    media_type = (upload.media_type or "").split(";", 1)[0].strip().lower()
    canonical = ALLOWED_MEDIA_TYPES.get(media_type)
    if canonical is None:
        raise UnsupportedMediaError("Format file tidak didukung! Hanya boleh JPG/PNG.")
    if upload.size > max_bytes:
        raise PayloadTooLargeError(
            f"Ukuran file maksimal {max_bytes // (1024 * 1024)}MB",
            details={"size": upload.size, "max_size": max_bytes},
        )
    return canonical


class ImageSink:
    """Where accepted banner images are kept."""

    name = "base"

    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes

    def store(self, upload: ImageUpload) -> str:
        """Validate ``upload`` and return the value to persist."""
        raise NotImplementedError

    def url_for(self, stored: Optional[str]) -> Optional[str]:
        """Map a persisted value to the ``image_url`` sent to clients."""
        raise NotImplementedError


class InlineImageSink(ImageSink):
    name = "inline"

    def store(self, upload: ImageUpload) -> str:
        media_type = validate_image(upload, self.max_bytes)
        encoded = base64.b64encode(upload.content).decode("ascii")
        logger.debug("Encoded %s banner (%d bytes) inline", media_type, upload.size)
        return f"data:{media_type};base64,{encoded}"

    def url_for(self, stored: Optional[str]) -> Optional[str]:
        # The stored data URI is already self-contained.
        return stored or None


SINKS: Dict[str, Type[ImageSink]] = {
    InlineImageSink.name: InlineImageSink,
}


def build_image_sink(name: str, max_bytes: int) -> ImageSink:
    """Instantiate the sink configured as ``name``."""
    try:
        sink_cls = SINKS[name]
    except KeyError:
        raise ValueError(f"Unknown image sink: {name!r}") from None
    return sink_cls(max_bytes)
