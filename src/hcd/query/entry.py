"""
Single entry fetch and the entries collection of a content type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from hcd.logging import log_context
from hcd.query.base import BaseQuery, validate_field_uid
from hcd.query.query import Query

if TYPE_CHECKING:
    from hcd.client import DeliveryClient


def _join_variants(variants: str | Sequence[str]) -> str:
    if isinstance(variants, str):
        return variants
    return ",".join(variants)


def _project(query_params: dict[str, Any], kind: str, field_uids: str | Sequence[str]) -> None:
    # a single uid is sent as kind[BASE][], a list as indexed kind[BASE][i]
    if isinstance(field_uids, str):
        query_params[f"{kind}[BASE][]"] = validate_field_uid(field_uids)
        return
    for i, uid in enumerate(field_uids):
        query_params[f"{kind}[BASE][{i}]"] = validate_field_uid(uid)


class Entry:
    """A single entry, addressed by content type and entry uid."""

    def __init__(self, client: DeliveryClient, content_type_uid: str, entry_uid: str) -> None:
        self._client = client
        self.content_type_uid = content_type_uid
        self.entry_uid = entry_uid
        self.path = f"/content_types/{content_type_uid}/entries/{entry_uid}"
        self.query_params: dict[str, Any] = {}
        self._variants = ""

    def include_fallback(self) -> Entry:
        self.query_params["include_fallback"] = "true"
        return self

    def include_metadata(self) -> Entry:
        self.query_params["include_metadata"] = "true"
        return self

    def include_embedded_items(self) -> Entry:
        self.query_params["include_embedded_items[]"] = "BASE"
        return self

    def include_content_type(self) -> Entry:
        self.query_params["include_content_type"] = "true"
        return self

    def include_branch(self) -> Entry:
        self.query_params["include_branch"] = "true"
        return self

    def include_reference(self, *field_uids: str) -> Entry:
        self.query_params["include[]"] = [validate_field_uid(uid) for uid in field_uids]
        return self

    def locale(self, locale: str) -> Entry:
        self.query_params["locale"] = locale
        return self

    def variants(self, variants: str | Sequence[str]) -> Entry:
        """Request personalized variants, sent as the ``x-cs-variant-uid`` header."""
        joined = _join_variants(variants)
        if joined:
            self._variants = joined
        return self

    async def fetch(self) -> Any:
        """Fetch the entry.

        Returns:
            The ``entry`` member of the response, or the whole payload
            when the response has none.
        """
        headers = {"x-cs-variant-uid": self._variants} if self._variants else {}
        with log_context(content_type=self.content_type_uid, operation="fetch"):
            response = await self._client.get_data(
                self.path,
                params=self.query_params,
                headers=headers,
                content_type_uid=self.content_type_uid,
                entry_uid=self.entry_uid,
            )
        if isinstance(response, dict) and "entry" in response:
            return response["entry"]
        return response


class Entries(BaseQuery):
    """Every entry of a content type, with optional filters."""

    def __init__(self, client: DeliveryClient, content_type_uid: str) -> None:
        super().__init__(
            client,
            f"/content_types/{content_type_uid}/entries",
            content_type_uid=content_type_uid,
        )

    def include_fallback(self) -> Entries:
        self.query_params["include_fallback"] = "true"
        return self

    def include_metadata(self) -> Entries:
        self.query_params["include_metadata"] = "true"
        return self

    def include_embedded_items(self) -> Entries:
        self.query_params["include_embedded_items[]"] = "BASE"
        return self

    def include_content_type(self) -> Entries:
        self.query_params["include_content_type"] = "true"
        return self

    def include_branch(self) -> Entries:
        self.query_params["include_branch"] = "true"
        return self

    def include_reference(self, *field_uids: str) -> Entries:
        self.query_params["include[]"] = [validate_field_uid(uid) for uid in field_uids]
        return self

    def include_reference_content_type_uid(self) -> Entries:
        self.query_params["include_reference_content_type_uid"] = "true"
        return self

    def include_schema(self) -> Entries:
        self.query_params["include_schema"] = "true"
        return self

    def only(self, field_uids: str | Sequence[str]) -> Entries:
        """Return only the given fields of each entry."""
        _project(self.query_params, "only", field_uids)
        return self

    def except_(self, field_uids: str | Sequence[str]) -> Entries:
        """Return every field of each entry except the given ones."""
        _project(self.query_params, "except", field_uids)
        return self

    def locale(self, locale: str) -> Entries:
        self.query_params["locale"] = locale
        return self

    def variants(self, variants: str | Sequence[str]) -> Entries:
        joined = _join_variants(variants)
        if joined:
            self._variants = joined
        return self

    def query(self, filters: dict[str, Any] | None = None) -> Query:
        """Start a filtered query carrying the params set so far."""
        return Query(
            self._client,
            self._content_type_uid,
            query_params=self.query_params,
            parameters=filters,
            variants=self._variants,
        )

    async def find(self, encode: bool = False) -> dict[str, Any]:
        with log_context(content_type=self._content_type_uid, operation="find"):
            return await super().find(encode)
