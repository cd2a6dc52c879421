import logging

import pytest

from informate_api.app.core.security import PASSWORD_RESET_PURPOSE, TokenCodec

from .conftest import register_and_login


def test_register_and_me(client):
    user, headers = register_and_login(client, "Budi@Example.com", nama="Budi", role="user")
    assert user["email"] == "budi@example.com"
    assert user["role"] == "user"
    assert "password" not in user

    me = client.get("/api/auth/me", headers=headers).json()["data"]
    assert me == user


def test_register_duplicate_email_conflicts(client):
    register_and_login(client, "dup@example.com")
    response = client.post(
        "/api/auth/register",
        json={"nama": "Lagi", "email": "DUP@example.com", "password": "rahasia123"},
    )
    assert response.status_code == 409
    assert response.json()["success"] is False


def test_register_validates_payload(client):
    response = client.post("/api/auth/register", json={"nama": "X", "email": "x@example.com", "password": "123"})
    assert response.status_code == 400
    response = client.post(
        "/api/auth/register",
        json={"nama": "X", "email": "x@example.com", "password": "rahasia123", "role": "admin"},
    )
    assert response.status_code == 400


def test_login_with_wrong_password(client):
    register_and_login(client, "a@example.com")
    response = client.post("/api/auth/login", json={"email": "a@example.com", "password": "salah123"})
    assert response.status_code == 401
    assert response.json()["message"] == "Email atau password salah"


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401


def test_token_of_deleted_user_is_rejected(client, app):
    _, headers = register_and_login(client, "hilang@example.com")

    with app.state.database.cursor() as cursor:
        cursor.execute("DELETE FROM users WHERE email = ?", ("hilang@example.com",))
    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "User no longer exists"


def test_update_profile(client):
    _, headers = register_and_login(client, "lama@example.com", nama="Lama")
    response = client.put("/api/auth/update-profile", json={"nama": "Baru"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["nama"] == "Baru"
    assert response.json()["data"]["email"] == "lama@example.com"


def test_update_profile_email_conflict(client):
    register_and_login(client, "satu@example.com")
    _, headers = register_and_login(client, "dua@example.com")
    response = client.put("/api/auth/update-profile", json={"email": "satu@example.com"}, headers=headers)
    assert response.status_code == 409


def test_change_password(client):
    _, headers = register_and_login(client, "pw@example.com", password="lama12345")
    wrong = client.put(
        "/api/auth/change-password",
        json={"old_password": "keliru123", "new_password": "baru12345"},
        headers=headers,
    )
    assert wrong.status_code == 401

    ok = client.put(
        "/api/auth/change-password",
        json={"old_password": "lama12345", "new_password": "baru12345"},
        headers=headers,
    )
    assert ok.status_code == 200
    login = client.post("/api/auth/login", json={"email": "pw@example.com", "password": "baru12345"})
    assert login.status_code == 200


def _reset_token(caplog, client, email):
    caplog.clear()
    response = client.post("/api/auth/forgot-password", json={"email": email})
    assert response.status_code == 200
    tokens = [
        record.reset_token
        for record in caplog.records
        if record.name == "informate_api.password_reset"
    ]
    return response.json(), tokens


@pytest.fixture
def reset_log(caplog):
    caplog.set_level(logging.INFO, logger="informate_api.password_reset")
    return caplog


def test_forgot_password_answers_the_same_for_unknown_email(client, reset_log):
    register_and_login(client, "ada@example.com")
    known, known_tokens = _reset_token(reset_log, client, "ada@example.com")
    unknown, unknown_tokens = _reset_token(reset_log, client, "tidak-ada@example.com")

    assert known == unknown
    assert known["success"] is True
    assert len(known_tokens) == 1
    assert unknown_tokens == []


def test_reset_password_with_issued_token(client, reset_log):
    register_and_login(client, "lupa@example.com", password="lama12345")
    _, tokens = _reset_token(reset_log, client, "LUPA@example.com")

    response = client.post(
        "/api/auth/reset-password", json={"token": tokens[0], "new_password": "baru12345"}
    )
    assert response.status_code == 200
    assert client.post(
        "/api/auth/login", json={"email": "lupa@example.com", "password": "lama12345"}
    ).status_code == 401
    assert client.post(
        "/api/auth/login", json={"email": "lupa@example.com", "password": "baru12345"}
    ).status_code == 200

    # the token dies with the password it was issued for
    again = client.post(
        "/api/auth/reset-password", json={"token": tokens[0], "new_password": "ketiga123"}
    )
    assert again.status_code == 401


def test_reset_token_is_not_an_access_token(client, reset_log):
    register_and_login(client, "campur@example.com")
    _, tokens = _reset_token(reset_log, client, "campur@example.com")
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens[0]}"}).status_code == 401


def test_access_token_cannot_reset_password(client):
    _, headers = register_and_login(client, "akses@example.com")
    access_token = headers["Authorization"].split(" ", 1)[1]
    response = client.post(
        "/api/auth/reset-password", json={"token": access_token, "new_password": "baru12345"}
    )
    assert response.status_code == 401


def test_reset_token_from_another_secret_is_rejected(client):
    user, _ = register_and_login(client, "asing@example.com")
    forged = TokenCodec("secret-lain").issue(
        {"id": user["user_id"], "purpose": PASSWORD_RESET_PURPOSE, "stamp": "x"}
    )
    response = client.post("/api/auth/reset-password", json={"token": forged, "new_password": "baru12345"})
    assert response.status_code == 401


def test_list_users_is_for_organizers(client):
    organizer, organizer_headers = register_and_login(client, "org@example.com", nama="Org")
    member, member_headers = register_and_login(client, "anggota@example.com", nama="Anggota", role="user")

    response = client.get("/api/users", headers=organizer_headers)
    assert response.status_code == 200
    assert response.json()["data"] == [organizer, member]

    assert client.get("/api/users", headers=member_headers).status_code == 403
    assert client.get("/api/users").status_code == 401
