"""
Authentication endpoints for API v1.

Registration, login (token issue), the caller's own profile and the
forgot/reset password pair.  Access tokens carry the user id (``id``),
e-mail (``sub``) and role.

``POST /forgot-password`` answers the same way whether or not the e-mail
is registered.  For a registered e-mail it issues a short-lived reset
token (``purpose`` claim ``password_reset``) and hands it to the
``informate_api.password_reset`` logger, the delivery channel operators
watch; the token is attached to the record as ``reset_token``.
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from informate_api.app.core.errors import UnauthorizedError
from informate_api.app.core.security import (
    PASSWORD_RESET_PURPOSE,
    TokenCodec,
    get_current_user,
    get_token_codec,
)
from informate_api.app.schemas.common import Envelope, MessageResponse
from informate_api.app.schemas.user import (
    ChangePassword,
    ForgotPassword,
    LoginResult,
    ProfileUpdate,
    ResetPassword,
    UserCreate,
    UserLogin,
    UserRead,
)
from informate_api.app.services.user_service import UserService, get_user_service


router = APIRouter()

reset_logger = logging.getLogger("informate_api.password_reset")

FORGOT_PASSWORD_MESSAGE = "Jika email terdaftar, instruksi reset password telah dikirim."


@router.post("/register", response_model=Envelope[UserRead], status_code=status.HTTP_201_CREATED)
async def register(
    user: UserCreate,
    users: UserService = Depends(get_user_service),
) -> Envelope[UserRead]:
    """Register a new account.  409 if the e-mail is taken."""
    created = await users.register(user)
    return Envelope(message="Registrasi berhasil", data=created)


@router.post("/login", response_model=Envelope[LoginResult])
async def login(
    credentials: UserLogin,
    codec: TokenCodec = Depends(get_token_codec),
    users: UserService = Depends(get_user_service),
) -> Envelope[LoginResult]:
    """Check e-mail and password and return a bearer token."""
    user = await users.authenticate(credentials.email, credentials.password)
    if user is None:
        raise UnauthorizedError("Email atau password salah")
    token = codec.issue({"id": user.user_id, "sub": user.email, "role": user.role})
    return Envelope(message="Login berhasil", data=LoginResult(token=token, user=user))


@router.get("/me", response_model=Envelope[UserRead])
async def me(current_user: UserRead = Depends(get_current_user)) -> Envelope[UserRead]:
    return Envelope(data=current_user)


@router.put("/update-profile", response_model=Envelope[UserRead])
async def update_profile(
    body: ProfileUpdate,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Envelope[UserRead]:
    """Change the caller's name and/or e-mail."""
    updated = await users.update_profile(current_user.user_id, nama=body.nama, email=body.email)
    return Envelope(message="Profil berhasil diperbarui", data=updated)


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePassword,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    await users.change_password(current_user.user_id, body.old_password, body.new_password)
    return MessageResponse(message="Password berhasil diubah")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPassword,
    request: Request,
    codec: TokenCodec = Depends(get_token_codec),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Start a password reset.  The answer never reveals whether the e-mail exists."""
    found = await users.password_reset_stamp(body.email)
    if found is not None:
        user, stamp = found
        expires_in = request.app.state.settings.reset_token_expire_minutes * 60
        token = codec.issue(
            {"id": user.user_id, "purpose": PASSWORD_RESET_PURPOSE, "stamp": stamp},
            expires_in=expires_in,
        )
        # TODO: mail the token to user.email once an SMTP relay is configured.
        reset_logger.info(
            "Password reset token issued for %s", user.email, extra={"reset_token": token}
        )
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPassword,
    codec: TokenCodec = Depends(get_token_codec),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Set a new password with a token from ``/forgot-password``.  Single use."""
    user_id, error = codec.user_id(body.token, purpose=PASSWORD_RESET_PURPOSE)
    if error:
        raise UnauthorizedError("Token reset tidak valid atau sudah digunakan")
    claims, _ = codec.verify(body.token)
    await users.reset_password(user_id, str(claims.get("stamp", "")), body.new_password)
    return MessageResponse(message="Password berhasil direset")
