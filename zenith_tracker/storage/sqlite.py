# zenith_tracker/storage/sqlite.py
from __future__ import annotations

import contextlib
import logging
import sqlite3
from pathlib import Path

from zenith_tracker.storage.base import BaseStorage, StorageError

logger = logging.getLogger(__name__)


def _init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """
    )
    conn.commit()


class SQLiteStorage(BaseStorage):
    """Key/value table in a SQLite file.

    Each ``save`` is a single ``INSERT OR REPLACE`` committed on its own, so a
    value is replaced whole or not at all.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @classmethod
    def from_config(cls, storage_cfg: dict) -> "SQLiteStorage":
        return cls(str(Path(storage_cfg.get("db_path", "~/.zenith/zenith.db")).expanduser()))

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            path = Path(self.db_path)
            if self.db_path != ":memory:":
                path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            try:
                _init_db(conn)
            except sqlite3.DatabaseError:
                conn.close()
                raise
            self._conn = conn
        return self._conn

    @contextlib.contextmanager
    def _guard(self, action: str, key: str):
        try:
            yield
        except (sqlite3.DatabaseError, OSError) as exc:
            logger.error("Cannot %s %r in %s: %s", action, key, self.db_path, exc)
            raise StorageError(f"{self.db_path}: {exc}") from exc

    def load(self, key: str) -> str | None:
        with self._guard("read", key):
            row = self._connection().execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def save(self, key: str, payload: str) -> None:
        with self._guard("write", key):
            conn = self._connection()
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                    (key, payload),
                )

    def delete(self, key: str) -> None:
        with self._guard("delete", key):
            conn = self._connection()
            with conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
