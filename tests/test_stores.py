"""
Tests for the persistence stores.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from hcd.cache import MemoryStore, SQLiteStore, build_store, storage_key
from hcd.cache.base import CacheRecord
from hcd.config import Settings


@pytest.fixture
async def sqlite_store(temp_dir: Path) -> SQLiteStore:
    """Create an initialized sqlite store for testing."""
    store = SQLiteStore(temp_dir / "cache", default_ttl_seconds=3600)
    await store.init()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "sqlite"])
async def store(request: pytest.FixtureRequest, temp_dir: Path):
    """Run a test against both store backends."""
    if request.param == "memory":
        yield MemoryStore(default_ttl_seconds=3600)
        return

    sqlite = SQLiteStore(temp_dir / "cache", default_ttl_seconds=3600)
    await sqlite.init()
    yield sqlite
    await sqlite.close()


class TestStorageKey:
    """Test physical key naming."""

    def test_scoped_key(self) -> None:
        assert storage_key("blog_apiKey", "blog") == "blog_hcd_store_blog_apiKey"

    def test_unscoped_key(self) -> None:
        assert storage_key("apiKey") == "hcd_store_apiKey"


class TestCacheRecord:
    """Test record expiry and serialization."""

    def test_expiry(self) -> None:
        record = CacheRecord(value="v", expires_at=100.0)

        assert record.is_expired(now=100.0)
        assert not record.is_expired(now=99.0)

    def test_serialization_round_trip(self) -> None:
        record = CacheRecord(value={"entries": [1]}, expires_at=123.5)

        assert CacheRecord.loads(record.dumps()) == record


class TestStoreContract:
    """Behaviour shared by every store backend."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, store) -> None:
        """Test storing and retrieving a value."""
        await store.set("k", {"entry": {"uid": "e1"}}, "blog", 60)

        assert await store.get("k", "blog") == {"entry": {"uid": "e1"}}

    @pytest.mark.asyncio
    async def test_missing_key(self, store) -> None:
        """Test that a missing key reads as None."""
        assert await store.get("absent", "blog") is None

    @pytest.mark.asyncio
    async def test_scope_isolates_keys(self, store) -> None:
        """Test that the same key in two scopes holds two records."""
        await store.set("k", "blog value", "blog")
        await store.set("k", "page value", "page")

        assert await store.get("k", "blog") == "blog value"
        assert await store.get("k", "page") == "page value"

    @pytest.mark.asyncio
    async def test_overwrite(self, store) -> None:
        """Test that a second write replaces the record."""
        await store.set("k", "old", "blog")
        await store.set("k", "new", "blog")

        assert await store.get("k", "blog") == "new"

    @pytest.mark.asyncio
    async def test_none_value_removes(self, store) -> None:
        """Test that writing None removes the record."""
        await store.set("k", "v", "blog")
        await store.set("k", None, "blog")

        assert await store.get("k", "blog") is None

    @pytest.mark.asyncio
    async def test_remove(self, store) -> None:
        """Test removing a record."""
        await store.set("k", "v", "blog")
        await store.remove("k", "blog")

        assert await store.get("k", "blog") is None

    @pytest.mark.asyncio
    async def test_expired_record_is_absent(self, store) -> None:
        """Test that an expired record reads as None."""
        with patch("time.time", return_value=1_000.0):
            await store.set("k", "v", "blog", 10)

        with patch("time.time", return_value=1_011.0):
            assert await store.get("k", "blog") is None

        assert await store.get("k", "blog") is None

    @pytest.mark.asyncio
    async def test_clear_scope(self, store) -> None:
        """Test clearing one content type bucket."""
        await store.set("a", 1, "blog")
        await store.set("b", 2, "page")

        await store.clear("blog")

        assert await store.get("a", "blog") is None
        assert await store.get("b", "page") == 2

    @pytest.mark.asyncio
    async def test_clear_all(self, store) -> None:
        """Test clearing everything."""
        await store.set("a", 1, "blog")
        await store.set("b", 2, None)

        await store.clear()

        assert await store.get("a", "blog") is None
        assert await store.get("b") is None


class TestMemoryStore:
    """MemoryStore behaviour."""

    @pytest.mark.asyncio
    async def test_values_are_copied(self, memory_store: MemoryStore) -> None:
        """Test that mutating the original does not change the cached value."""
        value = {"items": [1]}
        await memory_store.set("k", value, "blog")
        value["items"].append(2)

        assert await memory_store.get("k", "blog") == {"items": [1]}

    @pytest.mark.asyncio
    async def test_default_ttl(self) -> None:
        """Test that writes without a ttl use the store default."""
        store = MemoryStore(default_ttl_seconds=5)
        with patch("time.time", return_value=0.0):
            await store.set("k", "v")
        with patch("time.time", return_value=4.0):
            assert await store.get("k") == "v"
        with patch("time.time", return_value=6.0):
            assert await store.get("k") is None


class TestSQLiteStore:
    """SQLiteStore behaviour."""

    @pytest.mark.asyncio
    async def test_persists_across_connections(self, temp_dir: Path) -> None:
        """Test that records survive closing and reopening the store."""
        first = SQLiteStore(temp_dir / "cache")
        await first.init()
        await first.set("k", {"v": 1}, "blog", 60)
        await first.close()

        second = SQLiteStore(temp_dir / "cache")
        await second.init()
        try:
            assert await second.get("k", "blog") == {"v": 1}
        finally:
            await second.close()

    @pytest.mark.asyncio
    async def test_purge_expired(self, sqlite_store: SQLiteStore) -> None:
        """Test bulk removal of expired rows."""
        with patch("time.time", return_value=1_000.0):
            await sqlite_store.set("old", "v", "blog", 10)
        await sqlite_store.set("fresh", "v", "blog", 3600)

        removed = await sqlite_store.purge_expired()

        assert removed == 1
        assert await sqlite_store.get("fresh", "blog") == "v"

    @pytest.mark.asyncio
    async def test_requires_init(self, temp_dir: Path) -> None:
        """Test that using the store before init() fails clearly."""
        store = SQLiteStore(temp_dir / "cache")

        with pytest.raises(RuntimeError, match="init"):
            await store.get("k")


class TestBuildStore:
    """Test store selection from settings."""

    def test_memory_by_default(self, mock_settings: Settings) -> None:
        store = build_store(mock_settings)

        assert isinstance(store, MemoryStore)
        assert store.default_ttl_seconds == 600

    def test_sqlite(self, mock_settings: Settings) -> None:
        settings = mock_settings.model_copy(update={"CACHE_STORE": "sqlite"})

        store = build_store(settings)

        assert isinstance(store, SQLiteStore)
        assert store.cache_dir == settings.CACHE_DIR
