"""
Core types for the headless delivery client.

This module defines the data structures shared by the cache and sync layers:
- Enums for cache policies, regions, sync event types and query operators
- Frozen dataclasses describing a request and the two response shapes
  (the raw transport response and the settled delivery response)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CachePolicy(str, Enum):
    """Precedence of cache versus network for a read."""

    IGNORE_CACHE = "ignore_cache"
    NETWORK_ELSE_CACHE = "network_else_cache"
    CACHE_THEN_NETWORK = "cache_then_network"
    CACHE_ELSE_NETWORK = "cache_else_network"


class Region(str, Enum):
    """Hosting regions of the delivery API."""

    US = "us"
    EU = "eu"
    AZURE_NA = "azure-na"
    AZURE_EU = "azure-eu"
    GCP_NA = "gcp-na"


class PublishType(str, Enum):
    """Event types carried by sync items."""

    ENTRY_PUBLISHED = "entry_published"
    ENTRY_UNPUBLISHED = "entry_unpublished"
    ENTRY_DELETED = "entry_deleted"
    ASSET_PUBLISHED = "asset_published"
    ASSET_UNPUBLISHED = "asset_unpublished"
    ASSET_DELETED = "asset_deleted"
    CONTENT_TYPE_DELETED = "content_type_deleted"


class QueryOperation(str, Enum):
    """Comparison operators accepted by entry and asset queries."""

    EQUALS = "$eq"
    NOT_EQUALS = "$ne"
    IS_LESS_THAN = "$lt"
    IS_LESS_THAN_OR_EQUAL = "$lte"
    IS_GREATER_THAN = "$gt"
    IS_GREATER_THAN_OR_EQUAL = "$gte"
    INCLUDES = "$in"
    EXCLUDES = "$nin"
    EXISTS = "$exists"
    MATCHES = "$regex"


class TaxonomyQueryOperation(str, Enum):
    """Hierarchy-aware operators accepted by taxonomy queries."""

    EQUALS = "$eq"
    INCLUDES = "$in"
    EXCLUDES = "$nin"
    EQ_ABOVE = "$eq_above"
    EQ_BELOW = "$eq_below"
    ABOVE = "$above"
    BELOW = "$below"


@dataclass(frozen=True)
class Request:
    """A fully described read request.

    Only ``path``, ``content_type_uid``, ``entry_uid`` and ``resource``
    identify the resource; ``headers`` and ``retry_count`` are transport
    details. ``resource`` names requests that are not entries (a content
    type schema, an asset, a taxonomy term) so they never share a key with
    the entries of a content type.
    """

    path: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    content_type_uid: str | None = None
    entry_uid: str | None = None
    resource: str | None = None
    retry_count: int = 0


@dataclass(frozen=True)
class AdapterResponse:
    """Raw result of a transport call that did not fail.

    ``data`` holds the undecoded JSON body. A response without a body is
    the "empty" outcome; failures are raised, never returned.
    """

    data: str | None = None
    status: int = 200
    status_text: str = "OK"
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def has_payload(self) -> bool:
        return bool(self.data)


@dataclass(frozen=True)
class DeliveryResponse:
    """Settled result handed back to the caller."""

    data: Any
    status: int | None = None
    status_text: str | None = None
    headers: dict[str, str] | None = None
    config: dict[str, Any] | None = None
    from_cache: bool = False

    @classmethod
    def from_cache_hit(cls, value: Any) -> DeliveryResponse:
        """Synthesize the 200 OK envelope used for cache hits."""
        return cls(
            data=value,
            status=200,
            status_text="OK",
            headers={},
            config={},
            from_cache=True,
        )
