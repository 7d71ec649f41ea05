"""
Content type, asset and global field handles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from hcd.logging import log_context
from hcd.query.base import BaseQuery
from hcd.query.entry import Entries, Entry
from hcd.query.query import Query

if TYPE_CHECKING:
    from hcd.client import DeliveryClient


class ContentType:
    """A content type; entry point for its entries."""

    def __init__(self, client: DeliveryClient, content_type_uid: str) -> None:
        self._client = client
        self.uid = content_type_uid
        self.path = f"/content_types/{content_type_uid}"

    def entry(self, entry_uid: str | None = None) -> Entry | Entries:
        """Return one entry when a uid is given, otherwise the entries collection."""
        if entry_uid:
            return Entry(self._client, self.uid, entry_uid)
        return Entries(self._client, self.uid)

    async def fetch(self) -> Any:
        """Fetch the content type schema."""
        with log_context(content_type=self.uid, operation="fetch"):
            response = await self._client.get_data(
                self.path, content_type_uid=self.uid, resource="content_type"
            )
        if isinstance(response, dict) and "content_type" in response:
            return response["content_type"]
        return response


class ContentTypeQuery:
    """All content types of the stack."""

    def __init__(self, client: DeliveryClient) -> None:
        self._client = client
        self.query_params: dict[str, Any] = {}

    def include_global_field_schema(self) -> ContentTypeQuery:
        self.query_params["include_global_field_schema"] = "true"
        return self

    async def find(self) -> dict[str, Any]:
        return await self._client.get_data(
            "/content_types", params=self.query_params, resource="content_types"
        )


class Asset:
    """A single asset."""

    def __init__(self, client: DeliveryClient, asset_uid: str) -> None:
        self._client = client
        self.uid = asset_uid
        self.path = f"/assets/{asset_uid}"
        self.query_params: dict[str, Any] = {}

    def include_dimension(self) -> Asset:
        self.query_params["include_dimension"] = "true"
        return self

    def include_fallback(self) -> Asset:
        self.query_params["include_fallback"] = "true"
        return self

    def locale(self, locale: str) -> Asset:
        self.query_params["locale"] = locale
        return self

    async def fetch(self) -> Any:
        response = await self._client.get_data(
            self.path, params=self.query_params, resource=f"asset_{self.uid}"
        )
        if isinstance(response, dict) and "asset" in response:
            return response["asset"]
        return response


class AssetQuery(Query):
    """Every asset of the stack, with optional filters."""

    def __init__(self, client: DeliveryClient) -> None:
        super().__init__(client)

    def include_dimension(self) -> AssetQuery:
        self.query_params["include_dimension"] = "true"
        return self

    def locale(self, locale: str) -> AssetQuery:
        self.query_params["locale"] = locale
        return self


class GlobalField:
    """A single global field schema."""

    def __init__(self, client: DeliveryClient, global_field_uid: str) -> None:
        self._client = client
        self.uid = global_field_uid
        self.path = f"/global_fields/{global_field_uid}"
        self.query_params: dict[str, Any] = {}

    def include_branch(self) -> GlobalField:
        self.query_params["include_branch"] = "true"
        return self

    async def fetch(self) -> Any:
        """Fetch the global field, unwrapping the ``global_field`` member."""
        response = await self._client.get_data(
            self.path, params=self.query_params, resource=f"global_field_{self.uid}"
        )
        if isinstance(response, dict) and "global_field" in response:
            return response["global_field"]
        return response


class GlobalFieldQuery(BaseQuery):
    """Every global field of the stack."""

    def __init__(self, client: DeliveryClient) -> None:
        super().__init__(client, "/global_fields", resource="global_fields")

    def include_branch(self) -> GlobalFieldQuery:
        self.query_params["include_branch"] = "true"
        return self
