"""
Security helpers for password hashing and bearer token authentication.

This module implements a lightweight JSON Web Token (JWT) codec using
HMAC-SHA256 signatures and base64url encoding.  Tokens embed the user
identifier (``id``), the e-mail (``sub``), the role and an expiration
timestamp (``exp``).

The codec is an object, :class:`TokenCodec`, built once by
``create_app`` from the application settings and stored on
``app.state``.  Its secret cannot change for the lifetime of the app.

Two FastAPI dependencies sit on top of it:

* ``get_optional_user_id``: soft authentication for public reads.  Any
  failure (no header, malformed, bad signature, expired) yields
  ``None`` and the caller is treated as anonymous.
* ``get_current_user``: strict authentication for writes.  Failures
  raise ``UnauthorizedError`` (HTTP 401).

Password hashing uses PBKDF2-HMAC with SHA-256.
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings
from .errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000

# ``purpose`` claim of tokens mailed out by ``POST /auth/forgot-password``.
PASSWORD_RESET_PURPOSE = "password_reset"


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


class TokenCodec:
    """Issue and verify HS256 bearer tokens with a fixed secret.

    ``verify`` and ``user_id`` never raise for bad input.  They return a
    ``(value, error)`` pair where exactly one side is ``None``; ``error``
    is one of ``"malformed"``, ``"bad_signature"``, ``"expired"`` or
    ``"wrong_purpose"``.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24) -> None:
        if algorithm != "HS256":
            raise ValueError(f"Unsupported token algorithm: {algorithm}")
        self._secret = secret.encode("utf-8")
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(settings.secret_key, settings.algorithm, settings.access_token_expire_minutes)

    def _sign(self, message: bytes) -> bytes:
        return hmac.new(self._secret, message, hashlib.sha256).digest()

    def issue(self, claims: Dict[str, Any], expires_in: Optional[int] = None) -> str:
        """Create a signed token carrying ``claims``.

        The payload is extended with ``exp``, ``expires_in`` seconds from
        now (default ``expire_minutes``).  Clients send the result in the
        ``Authorization`` header as ``Bearer <token>``.
        """
        to_encode = dict(claims)
        exp_seconds = expires_in if expires_in is not None else self.expire_minutes * 60
        to_encode["exp"] = int(time.time()) + exp_seconds
        header = {"alg": self.algorithm, "typ": "JWT"}
        header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
        payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(',', ':')).encode("utf-8"))
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        signature_b64 = _b64_url_encode(self._sign(signing_input))
        return f"{header_b64}.{payload_b64}.{signature_b64}"

    def verify(self, token: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        """Check the signature and expiry of ``token``.

        Returns ``(claims, None)`` on success and ``(None, reason)``
        otherwise.
        """
        parts = token.split('.')
        if len(parts) != 3:
            return None, "malformed"
        header_b64, payload_b64, signature_b64 = parts
        try:
            actual_sig = _b64_url_decode(signature_b64)
        except (binascii.Error, ValueError):
            return None, "malformed"
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        # Constant-time comparison to prevent timing attacks
        if not hmac.compare_digest(self._sign(signing_input), actual_sig):
            return None, "bad_signature"
        try:
            data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        except (binascii.Error, ValueError):
            return None, "malformed"
        if not isinstance(data, dict):
            return None, "malformed"
        exp = data.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            return None, "malformed"
        if int(exp) < int(time.time()):
            return None, "expired"
        return data, None

    def user_id(self, token: str, purpose: Optional[str] = None) -> Tuple[Optional[int], Optional[str]]:
        """Return the integer ``id`` claim of a valid token.

        Access tokens carry no ``purpose`` claim.  Single-purpose tokens
        (password reset) are only accepted when ``purpose`` names them,
        and are rejected as ``"wrong_purpose"`` everywhere else.
        """
        claims, error = self.verify(token)
        if error:
            return None, error
        if claims.get("purpose") != purpose:
            return None, "wrong_purpose"
        user_id = claims.get("id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            return None, "malformed"
        return user_id, None


security = HTTPBearer(auto_error=False)


def get_token_codec(request: Request) -> TokenCodec:
    """Dependency returning the codec configured at application start."""
    return request.app.state.token_codec


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    codec: TokenCodec = Depends(get_token_codec),
) -> Optional[int]:
    """Soft authentication: the caller's user id, or ``None`` for guests."""
    if credentials is None:
        return None
    user_id, error = codec.user_id(credentials.credentials)
    if error:
        logger.debug("Ignoring bearer token on public route: %s", error)
        return None
    return user_id


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Dependency that retrieves the current authenticated user.

    If the request does not contain an ``Authorization`` header, the
    token is invalid/expired, or its user no longer exists, an
    ``UnauthorizedError`` is raised.  On success, returns the user as
    ``UserRead``.
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    user_id, error = codec.user_id(credentials.credentials)
    if error:
        raise UnauthorizedError("Invalid or expired token")
    user = await request.app.state.user_service.get_user(user_id)
    if user is None:
        raise UnauthorizedError("User no longer exists")
    return user


def require_roles(*roles: str) -> Callable:
    """Dependency factory allowing only users whose role is in ``roles``.

    Use as ``Depends(require_roles("organizer"))``.  Other authenticated
    users get ``ForbiddenError`` (HTTP 403).
    """

    async def _role_dependency(current_user=Depends(get_current_user)):
        if current_user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return current_user

    return _role_dependency


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    A 16-byte random salt is generated for each password.  The result
    is ``salthex$hashhex``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored ``salthex$hashhex`` string."""
    try:
        salt_hex, hash_hex = hashed_password.split('$', 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac('sha256', plain_password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
