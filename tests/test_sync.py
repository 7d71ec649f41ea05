"""
Tests for the synchronization engine.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from hcd.exceptions import DataFetchError
from hcd.sync import SynchronizationEngine, build_initial_params, item_identity
from hcd.types import PublishType


def entry_item(uid: str, title: str, locale: str = "en-us", ct: str = "blog") -> dict:
    return {
        "type": "entry_published",
        "content_type_uid": ct,
        "data": {"uid": uid, "locale": locale, "title": title},
    }


class TestBuildInitialParams:
    """Test first page parameter building."""

    def test_fresh_sync_sets_init(self) -> None:
        """Test that a fresh sync requests the initial snapshot."""
        assert build_initial_params({"locale": "en-us"}) == {"locale": "en-us", "init": True}

    def test_no_params(self) -> None:
        assert build_initial_params() == {"init": True}

    def test_keys_are_decamelized(self) -> None:
        """Test that camelCase filters are sent in snake_case."""
        params = build_initial_params(
            {"contentTypeUid": "blog", "startDate": "2024-01-01T00:00:00.000Z"}
        )

        assert params == {
            "content_type_uid": "blog",
            "start_date": "2024-01-01T00:00:00.000Z",
            "init": True,
        }

    def test_pagination_token_suppresses_init(self) -> None:
        assert build_initial_params({"paginationToken": "p1"}) == {"pagination_token": "p1"}

    def test_sync_token_suppresses_init(self) -> None:
        assert build_initial_params({"syncToken": "s1"}) == {"sync_token": "s1"}

    def test_type_list_is_joined(self) -> None:
        """Test that several event types become one comma-separated value."""
        params = build_initial_params(
            {"type": [PublishType.ENTRY_PUBLISHED, PublishType.ASSET_DELETED]}
        )

        assert params["type"] == "entry_published,asset_deleted"

    def test_type_string_kept(self) -> None:
        assert build_initial_params({"type": "entry_published"})["type"] == "entry_published"

    def test_input_not_mutated(self) -> None:
        original = {"contentTypeUid": "blog"}
        build_initial_params(original)

        assert original == {"contentTypeUid": "blog"}


class TestItemIdentity:
    """Test merge identity of sync items."""

    def test_identity_includes_locale(self) -> None:
        """Test that localized versions of one entry are distinct items."""
        english = item_identity(entry_item("e1", "Hello", "en-us"), 0)
        french = item_identity(entry_item("e1", "Bonjour", "fr-fr"), 1)

        assert english != french

    def test_identity_ignores_position_when_uid_present(self) -> None:
        assert item_identity(entry_item("e1", "a"), 0) == item_identity(entry_item("e1", "b"), 7)

    def test_items_without_uid_use_position(self) -> None:
        item = {"type": "content_type_deleted", "data": {}}

        assert item_identity(item, 3) == ("position", 3)
        assert item_identity(item, 3) != item_identity(item, 4)


class TestSynchronizationEngine:
    """Test draining the sync feed."""

    @pytest.mark.asyncio
    async def test_single_page_with_sync_token(self) -> None:
        """Test that a feed ending on the first page makes one call."""
        page = {"items": [entry_item("e1", "a")], "sync_token": "s1"}
        fetch_page = AsyncMock(return_value=page)
        engine = SynchronizationEngine(fetch_page)

        result = await engine.drain({"locale": "en-us"}, recursive=True)

        fetch_page.assert_awaited_once_with({"locale": "en-us", "init": True})
        assert result == {"items": [entry_item("e1", "a")], "sync_token": "s1"}

    @pytest.mark.asyncio
    async def test_non_recursive_returns_first_page(self) -> None:
        """Test that only the first page is fetched when not recursive."""
        page = {"items": [entry_item("e1", "a")], "pagination_token": "p1"}
        fetch_page = AsyncMock(return_value=page)
        engine = SynchronizationEngine(fetch_page)

        result = await engine.drain()

        fetch_page.assert_awaited_once()
        assert result is page
        assert result["pagination_token"] == "p1"

    @pytest.mark.asyncio
    async def test_recursive_follows_pagination(self) -> None:
        """Test that pagination tokens are followed until a sync token."""
        fetch_page = AsyncMock(
            side_effect=[
                {"items": [entry_item("e1", "a")], "pagination_token": "p1"},
                {"items": [entry_item("e2", "b")], "pagination_token": "p2"},
                {"items": [entry_item("e3", "c")], "sync_token": "s1"},
            ]
        )
        engine = SynchronizationEngine(fetch_page)

        result = await engine.drain({"contentTypeUid": "blog"}, recursive=True)

        assert fetch_page.await_count == 3
        calls = [c.args[0] for c in fetch_page.await_args_list]
        assert calls == [
            {"content_type_uid": "blog", "init": True},
            {"pagination_token": "p1"},
            {"pagination_token": "p2"},
        ]
        assert [i["data"]["uid"] for i in result["items"]] == ["e1", "e2", "e3"]
        assert result["sync_token"] == "s1"
        assert "pagination_token" not in result

    @pytest.mark.asyncio
    async def test_later_page_wins_for_same_entity(self) -> None:
        """Test that a republished entity keeps only its latest version."""
        fetch_page = AsyncMock(
            side_effect=[
                {"items": [entry_item("e1", "old"), entry_item("e2", "b")], "pagination_token": "p1"},
                {"items": [entry_item("e1", "new")], "sync_token": "s1"},
            ]
        )
        engine = SynchronizationEngine(fetch_page)

        result = await engine.drain(recursive=True)

        titles = {i["data"]["uid"]: i["data"]["title"] for i in result["items"]}
        assert titles == {"e1": "new", "e2": "b"}
        assert len(result["items"]) == 2

    @pytest.mark.asyncio
    async def test_resume_from_sync_token(self) -> None:
        """Test that a delta sync starts from the stored token."""
        fetch_page = AsyncMock(return_value={"items": [], "sync_token": "s2"})
        engine = SynchronizationEngine(fetch_page)

        result = await engine.drain({"syncToken": "s1"}, recursive=True)

        fetch_page.assert_awaited_once_with({"sync_token": "s1"})
        assert result == {"items": [], "sync_token": "s2"}

    @pytest.mark.asyncio
    async def test_failing_page_propagates(self) -> None:
        """Test that an error on a later page aborts the drain."""
        failure = DataFetchError("HTTP 500", context={"status_code": 500})
        fetch_page = AsyncMock(
            side_effect=[
                {"items": [entry_item("e1", "a")], "pagination_token": "p1"},
                failure,
            ]
        )
        engine = SynchronizationEngine(fetch_page)

        with pytest.raises(DataFetchError) as exc_info:
            await engine.drain(recursive=True)

        assert exc_info.value is failure
        assert fetch_page.await_count == 2

    @pytest.mark.asyncio
    async def test_page_without_items(self) -> None:
        """Test that pages missing an items list are tolerated."""
        fetch_page = AsyncMock(
            side_effect=[
                {"pagination_token": "p1"},
                {"items": [entry_item("e1", "a")], "sync_token": "s1"},
            ]
        )
        engine = SynchronizationEngine(fetch_page)

        result = await engine.drain(recursive=True)

        assert [i["data"]["uid"] for i in result["items"]] == ["e1"]
