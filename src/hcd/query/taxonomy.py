"""
Taxonomies, their terms, and hierarchical taxonomy queries.

TaxonomyQuery filters entries by the taxonomy terms they are tagged with. The
hierarchy-aware operators (``$eq_below``, ``$below``, ``$eq_above``,
``$above``) take an optional ``levels`` depth.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from hcd.query.base import BaseQuery, validate_field_uid
from hcd.types import TaxonomyQueryOperation

if TYPE_CHECKING:
    from hcd.client import DeliveryClient

TAXONOMY_PATH = "/taxonomies/entries"

_HIERARCHY_OPERATIONS = frozenset({
    TaxonomyQueryOperation.EQ_ABOVE,
    TaxonomyQueryOperation.EQ_BELOW,
    TaxonomyQueryOperation.ABOVE,
    TaxonomyQueryOperation.BELOW,
})


class TaxonomyQuery(BaseQuery):
    """Query entries across content types by taxonomy term."""

    def __init__(self, client: DeliveryClient) -> None:
        super().__init__(client, TAXONOMY_PATH, resource="taxonomy_entries")

    def where(
        self,
        taxonomy_field: str,
        operation: TaxonomyQueryOperation,
        value: Any,
        levels: int | None = None,
    ) -> TaxonomyQuery:
        """Filter on a taxonomy field, e.g. ``taxonomies.colors``.

        Args:
            taxonomy_field: Dotted taxonomy path.
            operation: Taxonomy operator.
            value: Term uid, or list of term uids for ``$in``/``$nin``.
            levels: Depth limit for hierarchy operators.
        """
        validate_field_uid(taxonomy_field, "taxonomy_field")
        if operation == TaxonomyQueryOperation.EQUALS:
            self.parameters[taxonomy_field] = value
            return self

        condition: dict[str, Any] = {operation.value: value}
        if levels is not None and operation in _HIERARCHY_OPERATIONS:
            condition["levels"] = levels
        self.parameters[taxonomy_field] = condition
        return self


class Taxonomy:
    """A published taxonomy and the entry point for its terms."""

    def __init__(self, client: DeliveryClient, taxonomy_uid: str) -> None:
        self._client = client
        self.uid = taxonomy_uid
        self.path = f"/taxonomy-manager/{taxonomy_uid}"

    def term(self, term_uid: str | None = None) -> Term | TermQuery:
        """Return one term when a uid is given, otherwise every term."""
        if term_uid:
            return Term(self._client, self.uid, term_uid)
        return TermQuery(self._client, self.uid)

    async def fetch(self) -> Any:
        response = await self._client.get_data(self.path, resource=f"taxonomy_{self.uid}")
        if isinstance(response, dict) and "taxonomy" in response:
            return response["taxonomy"]
        return response


class TermQuery:
    """Every published term of a taxonomy."""

    def __init__(self, client: DeliveryClient, taxonomy_uid: str) -> None:
        self._client = client
        self.taxonomy_uid = taxonomy_uid
        self.path = f"/taxonomy-manager/{taxonomy_uid}/terms"
        self.query_params: dict[str, Any] = {}

    async def find(self) -> dict[str, Any]:
        return await self._client.get_data(
            self.path,
            params=self.query_params,
            resource=f"taxonomy_{self.taxonomy_uid}_terms",
        )


class Term:
    """A single published term, with its locales and hierarchy."""

    def __init__(self, client: DeliveryClient, taxonomy_uid: str, term_uid: str) -> None:
        self._client = client
        self.taxonomy_uid = taxonomy_uid
        self.uid = term_uid
        self.path = f"/taxonomies/{taxonomy_uid}/terms/{term_uid}"

    async def _get(self, suffix: str, member: str) -> Any:
        resource = f"taxonomy_{self.taxonomy_uid}_term_{self.uid}"
        if suffix:
            resource = f"{resource}_{suffix}"
        path = f"{self.path}/{suffix}" if suffix else self.path
        response = await self._client.get_data(path, resource=resource)
        if isinstance(response, dict) and member in response:
            return response[member]
        return response

    async def fetch(self) -> Any:
        return await self._get("", "term")

    async def locales(self) -> Any:
        """Fetch every published localized version of the term."""
        return await self._get("locales", "locales")

    async def ancestors(self) -> Any:
        """Fetch the ancestors of the term, up to the root."""
        return await self._get("ancestors", "ancestors")

    async def descendants(self) -> Any:
        return await self._get("descendants", "descendants")
