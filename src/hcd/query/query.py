"""
Filtered queries over entries and assets.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Sequence

from hcd.exceptions import ValidationError
from hcd.query.base import BaseQuery, validate_field_uid
from hcd.types import QueryOperation, TaxonomyQueryOperation

if TYPE_CHECKING:
    from hcd.client import DeliveryClient

_SAFE_REGEX = re.compile(r"^[a-zA-Z0-9|^$.*+?()\[\]{}\\-]+$")

Scalar = str | int | float | bool


def _validate_values(values: Sequence[Any]) -> list[Any]:
    if isinstance(values, (str, bytes)) or not all(
        isinstance(v, (str, int, float, bool)) for v in values
    ):
        raise ValidationError(
            "Invalid value. Provide an array of strings, numbers, or booleans and try again.",
            context={"value": values},
        )
    return list(values)


def _validate_scalar(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationError(
            "Invalid value. Provide a string or number and try again.",
            context={"value": value},
        )
    return value


class Query(BaseQuery):
    """Query over the entries of a content type, or over assets when no uid is given."""

    def __init__(
        self,
        client: DeliveryClient,
        content_type_uid: str | None = None,
        query_params: dict[str, Any] | None = None,
        parameters: dict[str, Any] | None = None,
        variants: str = "",
    ) -> None:
        path = f"/content_types/{content_type_uid}/entries" if content_type_uid else "/assets"
        super().__init__(
            client,
            path,
            content_type_uid=content_type_uid,
            query_params=query_params,
            parameters=parameters,
            variants=variants,
            resource=None if content_type_uid else "assets",
        )

    def where(
        self,
        field_uid: str,
        operation: QueryOperation | TaxonomyQueryOperation,
        value: Any,
        **additional: Any,
    ) -> Query:
        """Add a filter on a field.

        ``EQUALS`` stores the bare value; any other operator is stored as
        ``{operator: value, **additional}``.
        """
        validate_field_uid(field_uid)
        if operation == QueryOperation.EQUALS:
            self.parameters[field_uid] = value
        else:
            self.parameters[field_uid] = {operation.value: value, **additional}
        return self

    def regex(self, field_uid: str, pattern: str, options: str | None = None) -> Query:
        validate_field_uid(field_uid)
        if not _SAFE_REGEX.match(pattern):
            raise ValidationError(
                "Invalid regex pattern: Must be a valid regular expression",
                context={"field": field_uid, "value": pattern},
            )
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValidationError(
                "Invalid regex pattern: Must be a valid regular expression",
                context={"field": field_uid, "value": pattern, "error": str(e)},
            ) from e

        condition: dict[str, str] = {"$regex": pattern}
        if options:
            condition["$options"] = options
        self.parameters[field_uid] = condition
        return self

    def contained_in(self, key: str, values: Sequence[Scalar]) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$in": _validate_values(values)}
        return self

    def not_contained_in(self, key: str, values: Sequence[Scalar]) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$nin": _validate_values(values)}
        return self

    def exists(self, key: str) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$exists": True}
        return self

    def not_exists(self, key: str) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$exists": False}
        return self

    def equal_to(self, key: str, value: str | int | float) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = _validate_scalar(value)
        return self

    def not_equal_to(self, key: str, value: str | int | float) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$ne": _validate_scalar(value)}
        return self

    def less_than(self, key: str, value: str | int | float) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$lt": _validate_scalar(value)}
        return self

    def less_than_or_equal_to(self, key: str, value: str | int | float) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$lte": _validate_scalar(value)}
        return self

    def greater_than(self, key: str, value: str | int | float) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$gt": _validate_scalar(value)}
        return self

    def greater_than_or_equal_to(self, key: str, value: str | int | float) -> Query:
        validate_field_uid(key, "key")
        self.parameters[key] = {"$gte": _validate_scalar(value)}
        return self

    def reference_in(self, key: str, query: Query) -> Query:
        """Match entries whose reference field points at entries matching ``query``."""
        validate_field_uid(key, "reference_uid")
        self.parameters[key] = {"$in_query": dict(query.parameters)}
        return self

    def reference_not_in(self, key: str, query: Query) -> Query:
        validate_field_uid(key, "reference_uid")
        self.parameters[key] = {"$nin_query": dict(query.parameters)}
        return self

    def tags(self, values: Sequence[Scalar]) -> Query:
        self.parameters["tags"] = _validate_values(values)
        return self

    def search(self, key: str) -> Query:
        validate_field_uid(key, "key")
        self.query_params["typeahead"] = key
        return self

    def or_(self, *queries: Query) -> Query:
        self.parameters["$or"] = [dict(q.parameters) for q in queries]
        return self

    def and_(self, *queries: Query) -> Query:
        self.parameters["$and"] = [dict(q.parameters) for q in queries]
        return self

    def get_query(self) -> dict[str, Any]:
        return self.parameters
