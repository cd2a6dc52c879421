"""Entry point for the Informate API server.

Launches the FastAPI application with Uvicorn.  It is intended to be
executed from the project root, for example under Docker or a PaaS
where you only specify a single Python file to run.

Configuration (SECRET_KEY, DATABASE_URL, LOG_LEVEL, ...) is read from
the environment; see ``informate_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from informate_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted.

    Host and port are read from environment variables ``HOST`` and
    ``PORT``.  Defaults are ``0.0.0.0`` and ``8000``.
    """
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_config=None)
    server = Server(config)
    logging.getLogger(__name__).info("Serving Informate API on %s:%s", host, port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
