"""
Base classes for caching.

This module implements:
- PersistenceStore: Abstract interface for cache stores
- CacheRecord: Wrapper for cached values with their expiry time

Stores bucket records by scope (the content type uid), so a whole content
type can be evicted at once. Records are never mutated in place, only
overwritten or removed.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import orjson

KEY_PREFIX = "hcd_store"
DEFAULT_TTL_SECONDS = 60 * 60 * 24


@dataclass(frozen=True)
class CacheRecord:
    """A cached value and the epoch second it expires at."""

    value: Any
    expires_at: float

    @classmethod
    def create(cls, value: Any, ttl_seconds: float) -> CacheRecord:
        return cls(value=value, expires_at=time.time() + ttl_seconds)

    def is_expired(self, now: float | None = None) -> bool:
        return self.expires_at <= (time.time() if now is None else now)

    def dumps(self) -> bytes:
        return orjson.dumps({"value": self.value, "expires_at": self.expires_at})

    @classmethod
    def loads(cls, raw: bytes | str) -> CacheRecord:
        item = orjson.loads(raw)
        return cls(value=item["value"], expires_at=float(item["expires_at"]))


def storage_key(key: str, scope: str | None = None) -> str:
    """Build the physical key a record is stored under."""
    prefix = f"{scope}_{KEY_PREFIX}" if scope else KEY_PREFIX
    return f"{prefix}_{key}"


class PersistenceStore(ABC):
    """Abstract interface for persistence store implementations."""

    def __init__(self, default_ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self.default_ttl_seconds = default_ttl_seconds

    async def init(self) -> None:
        """Prepare the backend. Stores without setup keep this no-op."""

    async def close(self) -> None:
        """Release the backend."""

    def _ttl(self, ttl_seconds: int | None) -> int:
        return ttl_seconds if ttl_seconds else self.default_ttl_seconds

    @abstractmethod
    async def get(self, key: str, scope: str | None = None) -> Any | None:
        """Get a live value from the store, or None if absent or expired."""
        ...

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        scope: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        """Store a value. Setting None removes the record."""
        ...

    @abstractmethod
    async def remove(self, key: str, scope: str | None = None) -> None:
        """Remove a value from the store."""
        ...

    @abstractmethod
    async def clear(self, scope: str | None = None) -> None:
        """Remove every record, or only those of one scope."""
        ...
