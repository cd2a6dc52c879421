"""
User administration endpoints for API v1.

Backs the organizer dashboard of the mobile app.  Only organizers may
list accounts.
"""

from typing import List

from fastapi import APIRouter, Depends

from informate_api.app.core.security import require_roles
from informate_api.app.schemas.common import Envelope
from informate_api.app.schemas.user import UserRead
from informate_api.app.services.user_service import UserService, get_user_service


router = APIRouter()


@router.get("", response_model=Envelope[List[UserRead]])
async def list_users(
    current_user: UserRead = Depends(require_roles("organizer")),
    users: UserService = Depends(get_user_service),
) -> Envelope[List[UserRead]]:
    """All registered users, oldest account first.  403 for non-organizers."""
    return Envelope(data=await users.list_users())
