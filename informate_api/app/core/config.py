"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with no configuration at all; production deployments
must at least override ``SECRET_KEY`` (or ``JWT_SECRET``).

Settings are read once, at import time.  ``create_app`` accepts an
explicit ``Settings`` instance so tests and embedding code can inject
their own values instead of mutating the environment.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Informate API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    # Routers are mounted under this prefix.  The mobile client expects
    # ``/api`` (e.g. ``https://host/api/events``).
    api_prefix: str = os.getenv("API_PREFIX", "/api")
    debug: bool = _env_bool("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Signing secret for bearer tokens.  ``JWT_SECRET`` is accepted for
    # compatibility with existing deployments of the mobile backend.
    secret_key: str = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET") or "change_me"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    # Lifetime of the tokens handed out by ``POST /auth/forgot-password``.
    reset_token_expire_minutes: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "30"))

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "informate.db")

    # Banner uploads larger than this are rejected with 413.
    max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(2 * 1024 * 1024)))
    # Where accepted banner images go.  Only ``inline`` (data URI stored
    # in the event row) ships with the service.
    image_sink: str = os.getenv("IMAGE_SINK", "inline")

    # Who may update or delete an event: ``any`` authenticated user, or
    # only its ``creator``.
    event_edit_policy: str = os.getenv("EVENT_EDIT_POLICY", "any")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
