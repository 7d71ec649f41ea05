"""
In-memory persistence store.

Dict-backed store used by default and in tests. Records are serialized
with orjson so a cached value never aliases the caller's objects.
"""

from __future__ import annotations

from typing import Any

from hcd.cache.base import DEFAULT_TTL_SECONDS, CacheRecord, PersistenceStore, storage_key
from hcd.logging import get_logger

logger = get_logger(__name__)


class MemoryStore(PersistenceStore):
    """Process-local store with TTL support."""

    def __init__(self, default_ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        super().__init__(default_ttl_seconds)
        self._records: dict[str, bytes] = {}
        self._scopes: dict[str, str | None] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, key: str, scope: str | None = None) -> Any | None:
        physical = storage_key(key, scope)
        raw = self._records.get(physical)
        if raw is None:
            return None

        record = CacheRecord.loads(raw)
        if record.is_expired():
            logger.debug("Expired cache record dropped", key=physical)
            self._drop(physical)
            return None
        return record.value

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

        physical = storage_key(key, scope)
        record = CacheRecord.create(value, self._ttl(ttl_seconds))
        self._records[physical] = record.dumps()
        self._scopes[physical] = scope

    async def remove(self, key: str, scope: str | None = None) -> None:
        self._drop(storage_key(key, scope))

    async def clear(self, scope: str | None = None) -> None:
        if scope is None:
            self._records.clear()
            self._scopes.clear()
            return

        for physical in [k for k, s in self._scopes.items() if s == scope]:
            self._drop(physical)

    def _drop(self, physical: str) -> None:
        self._records.pop(physical, None)
        self._scopes.pop(physical, None)
