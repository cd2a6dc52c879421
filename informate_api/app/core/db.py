"""
SQLite database integration and simple migration system.

``Database`` wraps one SQLite file: it opens connections
(``connect``), hands out a transactional cursor (``cursor``) and runs
the migrations applied on application start (``init``).  SQLite is
used as a lightweight embedded database; to switch to another DBMS you
would replace connection logic and adapt the date functions used by the
event query.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.

Driver errors never leave this module as ``sqlite3.Error``: ``cursor``
converts them to :class:`~informate_api.app.core.errors.StorageError`.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .errors import StorageError

logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            user_id INTEGER PRIMARY KEY AUTOINCREMENT,
            nama TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'user',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS events (
            event_id INTEGER PRIMARY KEY AUTOINCREMENT,
            nama_acara TEXT NOT NULL,
            deskripsi TEXT,
            tanggal_mulai TIMESTAMP NOT NULL,
            lokasi TEXT NOT NULL,
            kategori TEXT NOT NULL DEFAULT 'Umum',
            harga_tiket INTEGER NOT NULL DEFAULT 0,
            kuota_maksimal INTEGER NOT NULL DEFAULT 0,
            contact_person TEXT NOT NULL DEFAULT '-',
            banner_image TEXT,
            creator_id INTEGER,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(creator_id) REFERENCES users(user_id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS bookmarks (
            user_id INTEGER NOT NULL,
            event_id INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (user_id, event_id),
            FOREIGN KEY(user_id) REFERENCES users(user_id) ON DELETE CASCADE,
            FOREIGN KEY(event_id) REFERENCES events(event_id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: indices for the list query and the bookmark join
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_events_tanggal_mulai ON events(tanggal_mulai);
        CREATE INDEX IF NOT EXISTS idx_events_kategori ON events(kategori);
        CREATE INDEX IF NOT EXISTS idx_bookmarks_event_id ON bookmarks(event_id);
        """,
    ),
]


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    If the configured URL is an absolute path, use it directly.
    Otherwise resolve it relative to the package root.
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # informate_api/
    return str((base_dir / database_url).resolve())


class Database:
    """One SQLite database file.

    ``create_app`` builds one instance per application and hands it to
    the services; nothing here is shared between applications.
    """

    def __init__(self, database_url: str) -> None:
        self.path = resolve_database_path(database_url)

    def connect(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        Rows are returned as ``sqlite3.Row`` so columns can be read by name.
        Timestamps are stored and returned as ``YYYY-MM-DD HH:MM:SS`` text;
        no type detection is enabled.
        """
        try:
            conn = sqlite3.connect(self.path)
            # Foreign key support is off by default in SQLite and must be
            # enabled per connection; the bookmark cascade depends on it.
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            logger.exception("Cannot open database %s", self.path)
            raise StorageError(cause=exc) from exc
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction.

        Commits when the block exits normally and rolls back otherwise.
        ``sqlite3.Error`` raised inside the block is re-raised as
        ``StorageError``; application errors pass through untouched.
        """
        conn = self.connect()
        try:
            yield conn.cursor()
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("Database operation failed")
            raise StorageError(cause=exc) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init(self) -> None:
        """Initialise the database and apply pending migrations.

        Creates the ``migrations`` table if it does not exist, checks the
        current schema version, and applies any new migrations defined in
        ``MIGRATIONS``.  If you add a new migration, append it with an
        incremented version number.
        """
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) as version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    logger.info("Applying migration %s to %s", version, self.path)
                    cursor.executescript(sql)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    current_version = version
