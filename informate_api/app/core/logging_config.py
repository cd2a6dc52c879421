"""
Logging configuration for the Informate API.

``setup_logging`` attaches a console handler (and optionally a file
handler) to the root logger.  Application modules only ever call
``logging.getLogger(__name__)``; uvicorn's own loggers propagate to the
same handlers so request logs and service logs share one format.

It may run more than once per process (the module-level app is built on
import, tests and embedding code build their own): the console handler
is added once, while the level and the file handler always follow the
latest call.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _has_file_handler(root: logging.Logger, path: str) -> bool:
    return any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == path
        for handler in root.handlers
    )


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path to a file to log messages to.  If empty, no file handler is
        added.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if not root.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    if logfile:
        path = os.path.abspath(logfile)
        if not _has_file_handler(root, path):
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
