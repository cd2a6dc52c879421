import json
from unittest import mock

import pytest
import requests

from informate_client import InformateClient


def make_response(status_code=200, payload=None):
    response = requests.Response()
    response.status_code = status_code
    response.url = "http://api.test/api/x"
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    return response


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def api(session):
    return InformateClient(base_url="http://api.test/api/", session=session)


def test_login_stores_token_for_later_calls(api, session):
    session.request.side_effect = [
        make_response(200, {"success": True, "data": {"token": "abc", "user": {"user_id": 1}}}),
        make_response(200, {"success": True, "data": []}),
    ]
    user, error = api.login("a@example.com", "rahasia123")
    assert error is None
    assert user == {"user_id": 1}
    assert api.token == "abc"

    api.list_events()
    headers = session.request.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer abc"


def test_list_events_sends_only_given_filters(api, session):
    session.request.return_value = make_response(
        200, {"success": True, "data": [{"event_id": 1, "is_bookmarked": False}]}
    )
    events, error = api.list_events(category="Workshop", month=3, year=2025)
    assert error is None
    assert events == [{"event_id": 1, "is_bookmarked": False}]
    kwargs = session.request.call_args.kwargs
    assert kwargs["method"] == "GET"
    assert kwargs["url"] == "http://api.test/api/events"
    assert kwargs["params"] == {"category": "Workshop", "month": 3, "year": 2025}
    assert "Authorization" not in kwargs["headers"]


def test_create_event_posts_multipart(api, session, tmp_path):
    banner = tmp_path / "banner.png"
    banner.write_bytes(b"\x89PNG")
    session.request.return_value = make_response(201, {"success": True, "data": {"event_id": 9}})

    event_id, error = api.create_event(
        {"nama_acara": "Seminar AI", "tanggal_mulai": "2025-03-01 10:00:00", "lokasi": "Aula A", "harga_tiket": 0},
        image_path=str(banner),
    )
    assert (event_id, error) == (9, None)
    kwargs = session.request.call_args.kwargs
    assert kwargs["data"]["harga_tiket"] == "0"
    assert kwargs["files"]["banner_image"] == ("banner.png", b"\x89PNG", "image/png")


def test_http_errors_are_returned_not_raised(api, session):
    session.request.return_value = make_response(404, {"success": False, "message": "Event tidak ditemukan"})
    event, error = api.get_event(5)
    assert event is None
    assert error == {"status_code": 404, "message": "Event tidak ditemukan"}


def test_connection_errors_are_returned(api, session):
    session.request.side_effect = requests.ConnectionError("down")
    ok, error = api.delete_event(1)
    assert ok is False
    assert error["status_code"] is None
    assert "down" in error["message"]


def test_message_only_calls_report_success(api, session):
    session.request.return_value = make_response(200, {"success": True, "message": "Bookmark dihapus"})
    assert api.remove_bookmark(3) == (True, None)
    assert session.request.call_args.kwargs["url"] == "http://api.test/api/events/3/bookmark"


def test_forgot_password_and_list_users(api, session):
    session.request.side_effect = [
        make_response(200, {"success": True, "message": "Jika email terdaftar, instruksi reset password telah dikirim."}),
        make_response(403, {"success": False, "message": "Insufficient permissions"}),
    ]
    assert api.forgot_password("lupa@example.com") == (True, None)
    assert session.request.call_args.kwargs["json"] == {"email": "lupa@example.com"}

    users, error = api.list_users()
    assert users == []
    assert error == {"status_code": 403, "message": "Insufficient permissions"}
