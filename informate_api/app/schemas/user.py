"""
Pydantic models for user data.

Passwords are accepted on registration and login only; ``UserRead`` never
carries the hash.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["user", "organizer"]


class UserBase(BaseModel):
    nama: str = Field(..., min_length=1, examples=["Budi Santoso"])
    email: str = Field(..., min_length=3, examples=["budi@example.com"])


class UserCreate(UserBase):
    """Schema for registering a user.

    ``role`` defaults to a regular ``user``; organizer accounts pass
    ``"organizer"``.
    """

    password: str = Field(..., min_length=6, examples=["rahasia123"])
    role: Role = "user"


class UserLogin(BaseModel):
    email: str
    password: str


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    user_id: int
    role: Role = "user"

    model_config = {
        "from_attributes": True,
    }


class LoginResult(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


class ChangePassword(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6)


class ProfileUpdate(BaseModel):
    nama: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=3)


class ForgotPassword(BaseModel):
    email: str = Field(..., min_length=3)


class ResetPassword(BaseModel):
    """Body of ``POST /auth/reset-password``: the mailed token and a new password."""

    token: str
    new_password: str = Field(..., min_length=6)
