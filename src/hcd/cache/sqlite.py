"""
SQLite-backed persistence store.

Async store using aiosqlite. Values are JSON-serialized with orjson and
expired rows are dropped lazily on read or in bulk with purge_expired().
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import aiosqlite
import orjson

from hcd.cache.base import DEFAULT_TTL_SECONDS, PersistenceStore, storage_key
from hcd.logging import get_logger

logger = get_logger(__name__)


class SQLiteStore(PersistenceStore):
    """Persistent store that survives process restarts.

    Rows live in ``<cache_dir>/cache.db``; the scope column allows a whole
    content type to be cleared at once.
    """

    def __init__(
        self, cache_dir: str | Path, default_ttl_seconds: int = DEFAULT_TTL_SECONDS
    ) -> None:
        """Initialize the store.

        Args:
            cache_dir: Base directory for the database file.
            default_ttl_seconds: TTL used when a write does not pass one.
        """
        super().__init__(default_ttl_seconds)
        self.cache_dir = Path(cache_dir)
        self.db_path = self.cache_dir / "cache.db"
        self._db: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Create the directory and schema, and open the connection."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        self._db = await aiosqlite.connect(self.db_path)
        await self._db.execute("""
            CREATE TABLE IF NOT EXISTS cache (
                key TEXT PRIMARY KEY,
                scope TEXT,
                value BLOB NOT NULL,
                expires_at REAL NOT NULL
            )
        """)
        await self._db.execute(
            "CREATE INDEX IF NOT EXISTS idx_cache_scope ON cache(scope)"
        )
        await self._db.commit()
        logger.info("Cache store initialized", db_path=str(self.db_path))

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("SQLiteStore not initialized. Call init() first.")
        return self._db

    async def get(self, key: str, scope: str | None = None) -> Any | None:
        db = self._conn()
        physical = storage_key(key, scope)
        async with db.execute(
            "SELECT value, expires_at FROM cache WHERE key = ?", (physical,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        value, expires_at = row
        if expires_at <= time.time():
            logger.debug("Expired cache record dropped", key=physical)
            await self.remove(key, scope)
            return None
        return orjson.loads(value)

    async def set(
        self,
        key: str,
        value: Any,
        scope: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        if not key:
            return
        if value is None:
            await self.remove(key, scope)
            return

        db = self._conn()
        await db.execute(
            "INSERT OR REPLACE INTO cache (key, scope, value, expires_at) VALUES (?, ?, ?, ?)",
            (
                storage_key(key, scope),
                scope,
                orjson.dumps(value),
                time.time() + self._ttl(ttl_seconds),
            ),
        )
        await db.commit()

    async def remove(self, key: str, scope: str | None = None) -> None:
        db = self._conn()
        await db.execute("DELETE FROM cache WHERE key = ?", (storage_key(key, scope),))
        await db.commit()

    async def clear(self, scope: str | None = None) -> None:
        db = self._conn()
        if scope is None:
            await db.execute("DELETE FROM cache")
        else:
            await db.execute("DELETE FROM cache WHERE scope = ?", (scope,))
        await db.commit()

    async def purge_expired(self) -> int:
        """Delete every expired row.

        Returns:
            Number of rows removed.
        """
        db = self._conn()
        cursor = await db.execute("DELETE FROM cache WHERE expires_at <= ?", (time.time(),))
        await db.commit()
        return cursor.rowcount
