"""
Tests for cache key derivation.
"""

from __future__ import annotations

from hcd.cache.keys import entry_uid_from_path, resolve_cache_key, resolve_request_key
from hcd.types import Request


class TestResolveCacheKey:
    """Test key composition."""

    def test_namespace_only(self) -> None:
        """Test that the namespace alone is a valid key."""
        assert resolve_cache_key("apiKey") == "apiKey"

    def test_content_type_prefix(self) -> None:
        """Test that the content type is prefixed."""
        assert resolve_cache_key("apiKey", "ct") == "ct_apiKey"

    def test_explicit_entry_suffix(self) -> None:
        """Test that an explicit entry uid is suffixed."""
        assert resolve_cache_key("apiKey", "blog", entry_uid="e1") == "blog_apiKey_entry_e1"

    def test_entry_from_path(self) -> None:
        """Test that the entry uid is parsed from the request path."""
        key = resolve_cache_key("apiKey", "blog", path="/content_types/blog/entries/e123")

        assert key.endswith("_entry_e123")
        assert key == "blog_apiKey_entry_e123"

    def test_explicit_entry_wins_over_path(self) -> None:
        """Test that an explicit entry uid takes precedence over the path."""
        key = resolve_cache_key(
            "apiKey", "blog", entry_uid="explicit", path="/content_types/blog/entries/from_path"
        )

        assert key == "blog_apiKey_entry_explicit"

    def test_collection_path_has_no_entry_suffix(self) -> None:
        """Test that collection requests get a collection-level key."""
        key = resolve_cache_key("apiKey", "blog", path="/content_types/blog/entries")

        assert key == "blog_apiKey"

    def test_deterministic(self) -> None:
        """Test that identical inputs always give the same key."""
        keys = {
            resolve_cache_key("apiKey", "blog", path="/content_types/blog/entries/e1")
            for _ in range(5)
        }
        assert len(keys) == 1

    def test_different_entries_differ(self) -> None:
        """Test that two entries of one content type never share a key."""
        first = resolve_cache_key("apiKey", "blog", entry_uid="e1")
        second = resolve_cache_key("apiKey", "blog", entry_uid="e2")

        assert first != second

    def test_resource_suffix(self) -> None:
        """Test that a resource name is appended after every other part."""
        assert resolve_cache_key("apiKey", resource="assets") == "apiKey_assets"
        assert resolve_cache_key("apiKey", "blog", resource="content_type") == "blog_apiKey_content_type"

    def test_resource_separates_schema_from_entries(self) -> None:
        """Test that a content type schema and its entries never share a key."""
        schema = resolve_cache_key(
            "apiKey", "blog", path="/content_types/blog", resource="content_type"
        )
        entries = resolve_cache_key("apiKey", "blog", path="/content_types/blog/entries")

        assert schema != entries
        assert entries == "blog_apiKey"


class TestEntryUidFromPath:
    """Test entry uid extraction."""

    def test_stops_at_slash(self) -> None:
        """Test that the segment ends at the next slash."""
        assert entry_uid_from_path("/v3/content_types/ct/entries/e1/variants") == "e1"

    def test_stops_at_query(self) -> None:
        """Test that the segment ends at the query string."""
        assert entry_uid_from_path("/content_types/ct/entries/e1?locale=en-us") == "e1"

    def test_no_match(self) -> None:
        """Test paths without an entry segment."""
        assert entry_uid_from_path("/assets/a1") is None
        assert entry_uid_from_path(None) is None
        assert entry_uid_from_path("") is None


class TestResolveRequestKey:
    """Test key derivation from requests."""

    def test_transport_fields_do_not_change_key(self) -> None:
        """Test that headers and retry count are not part of the key."""
        first = Request(
            path="/content_types/blog/entries/e1",
            content_type_uid="blog",
        )
        second = Request(
            path="/content_types/blog/entries/e1",
            headers={"x-cs-variant-uid": "v1", "access_token": "other"},
            content_type_uid="blog",
            retry_count=3,
        )

        assert resolve_request_key("apiKey", first) == resolve_request_key("apiKey", second)
        assert resolve_request_key("apiKey", first) == "blog_apiKey_entry_e1"

    def test_explicit_entry_on_request(self) -> None:
        """Test that Request.entry_uid is used when set."""
        request = Request(path="/anything", content_type_uid="ct", entry_uid="e9")

        assert resolve_request_key("apiKey", request) == "ct_apiKey_entry_e9"

    def test_resource_on_request(self) -> None:
        """Test that two assets resolve to two keys."""
        first = Request(path="/assets/a1", resource="asset_a1")
        second = Request(path="/assets/a2", resource="asset_a2")

        assert resolve_request_key("apiKey", first) == "apiKey_asset_a1"
        assert resolve_request_key("apiKey", second) == "apiKey_asset_a2"
