"""
Application package initializer.

The backend is split into ``core`` (configuration, database,
security, errors), ``schemas`` (Pydantic payloads), ``services``
(business logic over SQLite) and ``api`` (versioned FastAPI routers).
Each domain (events, bookmarks, auth) exposes a router defined in
``api/v1/endpoints``.
"""

from .main import app  # noqa: F401
