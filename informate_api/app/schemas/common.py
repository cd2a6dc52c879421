"""
Response envelope shared by all endpoints.

Every JSON response has the shape ``{success, message, data}``, which
is what the mobile client unwraps.  ``message`` and ``data`` are
omitted when empty.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class MessageResponse(BaseModel):
    """Envelope for mutations that return no payload."""

    success: bool = True
    message: str
