"""Shared SQLite connection handling for the store modules."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class SqliteDatabase:
    """
    Opens a short-lived connection per operation. The schema is ensured on
    the first connection, so an unreachable file fails the operation that
    touched it rather than the constructor.
    """

    def __init__(self, db_path: str | Path):
        self._db_path = Path(db_path)
        self._schema_ready = False

    @property
    def path(self) -> Path:
        return self._db_path

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success, rolls back on error, always closes."""
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            if not self._schema_ready:
                conn.executescript(SCHEMA_PATH.read_text())
                self._schema_ready = True
            with conn:
                yield conn
        finally:
            conn.close()
