"""
Main entrypoint for the Informate API.

This module assembles the FastAPI application: logging, the token codec,
the per-app services (database, image sink, edit policy), error
handlers and the versioned routers.  ``create_app`` builds and
configures the app, which is then instantiated at module import time as
``app``, e.g.::

    uvicorn informate_api.app.main:app --reload
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.errors import InformateError, UnauthorizedError
from .core.logging_config import setup_logging
from .core.security import TokenCodec
from .services.bookmark_service import BookmarkService
from .services.event_service import EventService
from .services.image_service import build_image_sink
from .services.policy import build_policy
from .services.user_service import UserService

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(InformateError)
    async def informate_error_handler(request: Request, exc: InformateError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.details)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        message = f"{location}: {first.get('msg')}" if location else "Invalid request"
        return JSONResponse(status_code=400, content={"success": False, "message": message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the values read from the
        environment by ``core.config``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the setup below can
    # safely log messages.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    # Per-app collaborators; endpoints reach them through request.app.state.
    database = Database(settings.database_url)
    app.state.settings = settings
    app.state.database = database
    app.state.token_codec = TokenCodec.from_settings(settings)
    app.state.user_service = UserService(database)
    app.state.event_service = EventService(
        database,
        image_sink=build_image_sink(settings.image_sink, settings.max_image_bytes),
        policy=build_policy(settings.event_edit_policy),
    )
    app.state.bookmark_service = BookmarkService(database, app.state.event_service)

    _register_error_handlers(app)
    app.include_router(v1_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    # Apply migrations at startup.  This creates the database file if it
    # does not exist and brings the schema up to date.
    @app.on_event("startup")
    async def startup_event() -> None:
        database.init()
        logger.info(
            "%s %s ready on %s (image sink: %s, edit policy: %s)",
            settings.project_name,
            settings.api_version,
            database.path,
            settings.image_sink,
            settings.event_edit_policy,
        )

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
