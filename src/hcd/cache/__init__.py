"""
Cache package for request-level caching.

This package provides:
- Key derivation (keys.py): stable keys from a request's logical identity
- Persistence stores (memory.py, sqlite.py): TTL-aware key/value stores
- Policy engine (policy.py): cache/network ordering per cache policy
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hcd.cache.base import CacheRecord, PersistenceStore, storage_key
from hcd.cache.keys import entry_uid_from_path, resolve_cache_key, resolve_request_key
from hcd.cache.memory import MemoryStore
from hcd.cache.policy import CacheOptions, CachePolicyEngine
from hcd.cache.sqlite import SQLiteStore

if TYPE_CHECKING:
    from hcd.config import Settings


def build_store(settings: Settings) -> PersistenceStore:
    """Create the persistence store selected by CACHE_STORE.

    A SQLiteStore still needs ``await store.init()`` before use.
    """
    if settings.CACHE_STORE == "sqlite":
        return SQLiteStore(settings.CACHE_DIR, default_ttl_seconds=settings.CACHE_MAX_AGE)
    return MemoryStore(default_ttl_seconds=settings.CACHE_MAX_AGE)


__all__ = [
    "CacheOptions",
    "CachePolicyEngine",
    "CacheRecord",
    "MemoryStore",
    "PersistenceStore",
    "SQLiteStore",
    "build_store",
    "entry_uid_from_path",
    "resolve_cache_key",
    "resolve_request_key",
    "storage_key",
]
