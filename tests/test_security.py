import pytest

from informate_api.app.core.config import Settings
from informate_api.app.core.security import TokenCodec, hash_password, verify_password


@pytest.fixture
def codec():
    return TokenCodec("s3cret")


def test_issue_and_verify_round_trip(codec):
    token = codec.issue({"id": 7, "sub": "a@example.com", "role": "organizer"})
    claims, error = codec.verify(token)
    assert error is None
    assert claims["id"] == 7
    assert claims["sub"] == "a@example.com"
    assert "exp" in claims


def test_user_id_extracts_integer_claim(codec):
    assert codec.user_id(codec.issue({"id": 42})) == (42, None)


def test_token_signed_with_other_secret_is_rejected(codec):
    foreign = TokenCodec("another-secret").issue({"id": 1})
    assert codec.verify(foreign) == (None, "bad_signature")


def test_expired_token_is_rejected(codec):
    token = codec.issue({"id": 1}, expires_in=-60)
    assert codec.verify(token) == (None, "expired")


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b", "a.b.c.d"])
def test_malformed_tokens(codec, token):
    claims, error = codec.verify(token)
    assert claims is None
    assert error in {"malformed", "bad_signature"}


def test_tampered_payload_is_rejected(codec):
    header, _, signature = codec.issue({"id": 1}).split(".")
    _, payload, _ = codec.issue({"id": 2}).split(".")
    assert codec.verify(f"{header}.{payload}.{signature}") == (None, "bad_signature")


def test_non_integer_id_claim_is_malformed(codec):
    assert codec.user_id(codec.issue({"id": "7"})) == (None, "malformed")
    assert codec.user_id(codec.issue({"sub": "x"})) == (None, "malformed")


def test_purpose_bound_tokens_only_serve_their_purpose(codec):
    reset = codec.issue({"id": 3, "purpose": "password_reset"})
    assert codec.user_id(reset) == (None, "wrong_purpose")
    assert codec.user_id(reset, purpose="password_reset") == (3, None)
    assert codec.user_id(codec.issue({"id": 3}), purpose="password_reset") == (None, "wrong_purpose")


def test_codec_secret_is_fixed_at_construction():
    settings = Settings(secret_key="first")
    codec = TokenCodec.from_settings(settings)
    token = codec.issue({"id": 1})
    settings.secret_key = "second"
    assert codec.user_id(token) == (1, None)


def test_unsupported_algorithm():
    with pytest.raises(ValueError):
        TokenCodec("s", algorithm="RS256")


def test_password_hash_and_verify():
    hashed = hash_password("rahasia123")
    assert "$" in hashed
    assert verify_password("rahasia123", hashed)
    assert not verify_password("salah", hashed)
    assert not verify_password("rahasia123", "garbage")
