import base64

import pytest

from informate_api.app.core.errors import PayloadTooLargeError, UnsupportedMediaError
from informate_api.app.services.image_service import (
    ImageUpload,
    InlineImageSink,
    build_image_sink,
    validate_image,
)

from .conftest import JPEG_BYTES, PNG_BYTES

MAX = 2 * 1024 * 1024


def test_inline_sink_builds_data_uri():
    stored = InlineImageSink(MAX).store(ImageUpload(PNG_BYTES, "image/png"))
    prefix, payload = stored.split(",", 1)
    assert prefix == "data:image/png;base64"
    assert base64.b64decode(payload) == PNG_BYTES


def test_jpg_alias_is_stored_as_jpeg():
    stored = InlineImageSink(MAX).store(ImageUpload(JPEG_BYTES, "image/jpg"))
    assert stored.startswith("data:image/jpeg;base64,")


def test_url_for_returns_stored_uri_or_none():
    sink = InlineImageSink(MAX)
    assert sink.url_for("data:image/png;base64,AAAA") == "data:image/png;base64,AAAA"
    assert sink.url_for(None) is None
    assert sink.url_for("") is None


@pytest.mark.parametrize("media_type", ["image/gif", "application/pdf", ""])
def test_unsupported_media_types(media_type):
    with pytest.raises(UnsupportedMediaError):
        validate_image(ImageUpload(PNG_BYTES, media_type), MAX)


def test_size_limit_is_inclusive():
    assert validate_image(ImageUpload(b"\x00" * MAX, "image/png"), MAX) == "image/png"
    with pytest.raises(PayloadTooLargeError):
        validate_image(ImageUpload(b"\x00" * (MAX + 1), "image/png"), MAX)


def test_build_image_sink():
    assert isinstance(build_image_sink("inline", MAX), InlineImageSink)
    with pytest.raises(ValueError):
        build_image_sink("s3", MAX)
