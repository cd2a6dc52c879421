import io

import pytest
from fastapi.testclient import TestClient

from informate_api.app.core.config import Settings
from informate_api.app.main import create_app

TEST_SECRET = "test-secret"

# Smallest valid-looking PNG header; the service never decodes images.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=str(tmp_path / "informate-test.db"),
        secret_key=TEST_SECRET,
        log_level="WARNING",
        event_edit_policy="any",
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    application.state.database.init()
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client, email, nama="Tester", role="organizer", password="rahasia123"):
    response = client.post(
        "/api/auth/register",
        json={"nama": nama, "email": email, "password": password, "role": role},
    )
    assert response.status_code == 201, response.text
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def organizer(client):
    return register_and_login(client, "organizer@example.com", nama="Organizer Satu")


@pytest.fixture
def auth_headers(organizer):
    return organizer[1]


def create_event(client, headers, image=None, **fields):
    form = {
        "nama_acara": "Seminar AI",
        "tanggal_mulai": "2025-03-01 10:00:00",
        "lokasi": "Aula A",
    }
    form.update(fields)
    files = None
    if image is not None:
        content, media_type = image
        files = {"banner_image": ("banner", io.BytesIO(content), media_type)}
    return client.post("/api/events", data=form, files=files, headers=headers)
