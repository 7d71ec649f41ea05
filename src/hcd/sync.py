"""
Delta synchronization.

Walks the paginated change feed of the sync endpoint and returns it as one
batch. The first request of a fresh sync carries ``init=true``; follow-up
pages are requested with the pagination token alone, since the feed keeps
the original filters for the duration of a drain.

A failing page aborts the drain and the error propagates unchanged; items
gathered from earlier pages are discarded. Retrying a drain from scratch
is always safe.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Hashable, Mapping

from hcd.logging import get_logger, log_context
from hcd.types import PublishType
from hcd.utils import decamelize_keys

logger = get_logger(__name__)

SYNC_PATH = "/stacks/sync"

FetchPage = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def build_initial_params(params: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build the wire params of the first page.

    Adds ``init`` when neither a pagination nor a sync token is given, joins a
    list of event types into a comma-separated string, and rewrites every key
    to snake_case.
    """
    wire = decamelize_keys(dict(params or {}))

    if "pagination_token" not in wire and "sync_token" not in wire:
        wire["init"] = True

    event_types = wire.get("type")
    if event_types and not isinstance(event_types, str):
        wire["type"] = ",".join(
            t.value if isinstance(t, PublishType) else str(t) for t in event_types
        )

    return wire


def item_identity(item: Mapping[str, Any], position: int) -> Hashable:
    """Identity an item is merged under across pages.

    Entities are identified by content type, uid and locale. Items without
    a uid are never merged and keep their position.
    """
    data = item.get("data") or {}
    uid = data.get("uid") if isinstance(data, Mapping) else None
    if not uid:
        return ("position", position)
    return (item.get("content_type_uid"), uid, data.get("locale"))


class SynchronizationEngine:
    """Drains the sync feed through an injected page fetcher."""

    def __init__(self, fetch_page: FetchPage) -> None:
        """Initialize the engine.

        Args:
            fetch_page: Performs one call against the sync endpoint with
                snake_case params and returns the decoded page.
        """
        self.fetch_page = fetch_page

    async def drain(
        self,
        params: Mapping[str, Any] | None = None,
        recursive: bool = False,
    ) -> dict[str, Any]:
        """Fetch the change feed.

        Args:
            params: Sync filters (``locale``, ``startDate``, ``contentTypeUid``,
                ``type``) or a ``paginationToken``/``syncToken`` to resume from.
            recursive: Follow pagination tokens until a sync token is returned.
                When False only the first page is fetched.

        Returns:
            Page shaped like the wire response: ``items`` plus either
            ``sync_token`` or ``pagination_token``.
        """
        with log_context(operation="sync"):
            page = await self.fetch_page(build_initial_params(params))
            if not recursive:
                return page

            merged: dict[Hashable, Any] = {}
            position = self._merge(merged, page, 0)
            pages = 1

            while page.get("pagination_token"):
                next_params = decamelize_keys({"paginationToken": page["pagination_token"]})
                page = await self.fetch_page(next_params)
                position = self._merge(merged, page, position)
                pages += 1

            logger.info("Sync drained", pages=pages, items=len(merged))

            result = dict(page)
            result["items"] = list(merged.values())
            return result

    @staticmethod
    def _merge(merged: dict[Hashable, Any], page: Mapping[str, Any], position: int) -> int:
        # later pages overwrite earlier versions of the same entity
        for item in page.get("items") or []:
            merged[item_identity(item, position)] = item
            position += 1
        return position
