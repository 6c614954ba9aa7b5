# src/storage/sqlite_store.py - v1
"""SQLite-based blob store (STORE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. All partitions share one
database file; a partition row exists for every opened partition.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from pydantic import ValidationError

from shellcache.core.models import ResourceResponse
from shellcache.storage.base_blob_store import BaseBlobStore, BasePartition

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS partitions (
    name TEXT PRIMARY KEY,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS entries (
    partition TEXT NOT NULL,
    key TEXT NOT NULL,
    data TEXT NOT NULL,
    stored_at TEXT DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (partition, key)
);
"""


class SqlitePartition(BasePartition):
    """Partition view over the shared entries table."""

    def __init__(self, name: str, conn: sqlite3.Connection) -> None:
        super().__init__(name)
        self._conn = conn

    async def get(self, key: str) -> ResourceResponse | None:
        cursor = self._conn.execute(
            "SELECT data FROM entries WHERE partition = ? AND key = ?",
            (self.name, key),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        try:
            return ResourceResponse.model_validate_json(row[0])
        except ValidationError as e:
            logger.warning("Failed to deserialize entry %s in %s: %s", key, self.name, e)
            return None

    async def put(self, key: str, response: ResourceResponse) -> None:
        self._conn.execute(
            "INSERT OR IGNORE INTO partitions (name) VALUES (?)", (self.name,)
        )
        self._conn.execute(
            """INSERT OR REPLACE INTO entries (partition, key, data)
               VALUES (?, ?, ?)""",
            (self.name, key, response.model_dump_json()),
        )
        self._conn.commit()

    async def delete(self, key: str) -> bool:
        cursor = self._conn.execute(
            "DELETE FROM entries WHERE partition = ? AND key = ?", (self.name, key)
        )
        self._conn.commit()
        return cursor.rowcount > 0

    async def keys(self) -> list[str]:
        cursor = self._conn.execute(
            "SELECT key FROM entries WHERE partition = ? ORDER BY key", (self.name,)
        )
        return [row[0] for row in cursor.fetchall()]


class SqliteBlobStore(BaseBlobStore):
    """SQLite-backed blob store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def open_partition(self, name: str) -> SqlitePartition:
        self._conn.execute("INSERT OR IGNORE INTO partitions (name) VALUES (?)", (name,))
        self._conn.commit()
        return SqlitePartition(name, self._conn)

    async def delete_partition(self, name: str) -> bool:
        self._conn.execute("DELETE FROM entries WHERE partition = ?", (name,))
        cursor = self._conn.execute("DELETE FROM partitions WHERE name = ?", (name,))
        self._conn.commit()
        return cursor.rowcount > 0

    async def partition_names(self) -> list[str]:
        cursor = self._conn.execute("SELECT name FROM partitions ORDER BY name")
        return [row[0] for row in cursor.fetchall()]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
