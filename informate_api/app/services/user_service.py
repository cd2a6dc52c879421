"""
Business logic for users.

Users register with a name, e-mail and password; the password is stored
as a PBKDF2 hash (see ``core.security``).  Login hands back the user so
the endpoint can issue a token.

Password resets are stamped with a short digest of the stored hash.  A
reset token carries that stamp, so it stops working as soon as the
password changes, whether through the reset itself or otherwise.
"""

import hashlib
import logging
import sqlite3
from typing import Any, List, Mapping, Optional, Tuple

from fastapi import Request

from ..core.db import Database
from ..core.errors import ConflictError, NotFoundError, UnauthorizedError
from ..core.security import hash_password, verify_password
from ..schemas.user import UserCreate, UserRead

logger = logging.getLogger(__name__)

USER_COLUMNS = "user_id, nama, email, role"


def _to_user(row: Mapping[str, Any]) -> UserRead:
    return UserRead(user_id=row["user_id"], nama=row["nama"], email=row["email"], role=row["role"])


def _password_stamp(password_hash: str) -> str:
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()[:16]


class UserService:
    """Service for registering and looking up users."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def register(self, data: UserCreate) -> UserRead:
        """Create a user.

        E-mails are compared case-insensitively by normalising them to
        lower case.  Raises ``ConflictError`` if the e-mail is taken.
        """
        email = data.email.strip().lower()
        with self.db.cursor() as cursor:
            try:
                cursor.execute(
                    "INSERT INTO users (nama, email, password, role) VALUES (?, ?, ?, ?)",
                    (data.nama.strip(), email, hash_password(data.password), data.role),
                )
            except sqlite3.IntegrityError as exc:
                raise ConflictError("Email sudah terdaftar") from exc
            user_id = cursor.lastrowid
        logger.info("Registered %s %s as user %s", data.role, email, user_id)
        return UserRead(user_id=user_id, nama=data.nama.strip(), email=email, role=data.role)

    async def authenticate(self, email: str, password: str) -> Optional[UserRead]:
        """Return the user if the credentials match, otherwise ``None``."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT {USER_COLUMNS}, password FROM users WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
        if not row or not verify_password(password, row["password"]):
            logger.info("Failed login for %s", email)
            return None
        return _to_user(row)

    async def get_user(self, user_id: int) -> Optional[UserRead]:
        """Retrieve a user by ID."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        return _to_user(row) if row else None

    async def list_users(self) -> List[UserRead]:
        """All users in registration order."""
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users ORDER BY user_id ASC"
            ).fetchall()
        return [_to_user(row) for row in rows]

    async def update_profile(
        self, user_id: int, nama: Optional[str] = None, email: Optional[str] = None
    ) -> UserRead:
        """Change the name and/or e-mail of a user.

        Raises ``NotFoundError`` for unknown ids and ``ConflictError`` if
        the new e-mail belongs to someone else.
        """
        updates = {}
        if nama is not None:
            updates["nama"] = nama.strip()
        if email is not None:
            updates["email"] = email.strip().lower()
        with self.db.cursor() as cursor:
            if not cursor.execute("SELECT 1 FROM users WHERE user_id = ?", (user_id,)).fetchone():
                raise NotFoundError("User tidak ditemukan")
            if updates:
                assignments = ", ".join(f"{key} = ?" for key in updates)
                try:
                    cursor.execute(
                        f"UPDATE users SET {assignments} WHERE user_id = ?",
                        (*updates.values(), user_id),
                    )
                except sqlite3.IntegrityError as exc:
                    raise ConflictError("Email sudah terdaftar") from exc
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE user_id = ?", (user_id,)
            ).fetchone()
        return _to_user(row)

    async def change_password(self, user_id: int, old_password: str, new_password: str) -> None:
        """Replace a password after checking the current one.

        Raises ``UnauthorizedError`` when ``old_password`` is wrong.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT password FROM users WHERE user_id = ?", (user_id,)
            ).fetchone()
            if not row:
                raise NotFoundError("User tidak ditemukan")
            if not verify_password(old_password, row["password"]):
                raise UnauthorizedError("Password lama salah")
            cursor.execute(
                "UPDATE users SET password = ? WHERE user_id = ?",
                (hash_password(new_password), user_id),
            )
        logger.info("User %s changed password", user_id)

    async def password_reset_stamp(self, email: str) -> Optional[Tuple[UserRead, str]]:
        """Look up ``email`` for a reset request.

        Returns the user and the stamp of the current password, or
        ``None`` if nobody is registered under ``email``.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT {USER_COLUMNS}, password FROM users WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
        if not row:
            logger.info("Password reset requested for unknown e-mail %s", email)
            return None
        return _to_user(row), _password_stamp(row["password"])

    async def reset_password(self, user_id: int, stamp: str, new_password: str) -> None:
        """Set a new password if ``stamp`` still matches the stored one.

        Raises ``UnauthorizedError`` for unknown users and for stamps of
        a password that has changed since the reset was requested.
        """
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT password FROM users WHERE user_id = ?", (user_id,)
            ).fetchone()
            if not row or _password_stamp(row["password"]) != stamp:
                raise UnauthorizedError("Token reset tidak valid atau sudah digunakan")
            cursor.execute(
                "UPDATE users SET password = ? WHERE user_id = ?",
                (hash_password(new_password), user_id),
            )
        logger.info("User %s reset password", user_id)


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service
