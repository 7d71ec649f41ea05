"""
Shared behaviour of collection queries.

BaseQuery holds two parameter sets: ``query_params`` (plain query-string
params such as ``limit`` or ``include_count``) and ``parameters`` (the JSON
``query`` filter built by Query.where() and friends).
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from hcd.exceptions import ValidationError
from hcd.utils import encode_query_params

if TYPE_CHECKING:
    from hcd.client import DeliveryClient

_FIELD_UID = re.compile(r"^[a-zA-Z0-9_.-]+$")


def validate_field_uid(field_uid: str, label: str = "field_uid") -> str:
    """Reject field uids that are not alphanumeric (``_ . -`` allowed).

    Raises:
        ValidationError: If the uid contains other characters.
    """
    if not isinstance(field_uid, str) or not _FIELD_UID.match(field_uid):
        raise ValidationError(
            f"Invalid {label}. Provide an alphanumeric value and try again.",
            context={"field": label, "value": field_uid},
        )
    return field_uid


class BaseQuery:
    """Pagination, ordering and raw params shared by every collection query."""

    def __init__(
        self,
        client: DeliveryClient,
        path: str,
        content_type_uid: str | None = None,
        query_params: dict[str, Any] | None = None,
        parameters: dict[str, Any] | None = None,
        variants: str = "",
        resource: str | None = None,
    ) -> None:
        self._client = client
        self._path = path
        self._content_type_uid = content_type_uid
        self._resource = resource
        self.query_params: dict[str, Any] = dict(query_params or {})
        self.parameters: dict[str, Any] = dict(parameters or {})
        self._variants = variants

    @property
    def path(self) -> str:
        return self._path

    def include_count(self):
        self.query_params["include_count"] = "true"
        return self

    def order_by_ascending(self, key: str):
        self.query_params["asc"] = key
        return self

    def order_by_descending(self, key: str):
        self.query_params["desc"] = key
        return self

    def limit(self, count: int):
        self.query_params["limit"] = count
        return self

    def skip(self, count: int):
        self.query_params["skip"] = count
        return self

    def param(self, key: str, value: str | int):
        self.query_params[key] = value
        return self

    def add_params(self, params: dict[str, str | bool | int]):
        self.query_params.update(params)
        return self

    def remove_param(self, key: str):
        self.query_params.pop(key, None)
        return self

    def _headers(self) -> dict[str, str]:
        if self._variants:
            return {"x-cs-variant-uid": self._variants}
        return {}

    def build_params(self, encode: bool = False) -> dict[str, Any]:
        """Merge the query-string params with the JSON ``query`` filter."""
        params = dict(self.query_params)
        if self.parameters:
            filters = dict(self.parameters)
            if encode:
                filters = encode_query_params(filters)
            params["query"] = filters
        return params

    async def find(self, encode: bool = False) -> dict[str, Any]:
        """Run the query.

        Args:
            encode: Percent-encode string values of the filter.

        Returns:
            Decoded response (``entries``/``assets`` plus ``count`` when requested).
        """
        return await self._client.get_data(
            self._path,
            params=self.build_params(encode),
            headers=self._headers(),
            content_type_uid=self._content_type_uid,
            resource=self._resource,
        )
