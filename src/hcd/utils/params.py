"""Parameter marshaling helpers: host resolution, key casing and query encoding.

Shared by the transport, the query builders and the sync engine.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

from hcd.types import Region

DEFAULT_HOST = "cdn.contentstack.io"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def get_host_for_region(region: Region | str = Region.US, host: str | None = None) -> str:
    """Resolve the API host for a region.

    An explicit host always wins. The US region uses the default host;
    every other region is served from ``<region>-cdn.contentstack.com``.
    """
    if host:
        return host

    region_value = region.value if isinstance(region, Region) else str(region)
    if region_value.lower() == Region.US.value:
        return DEFAULT_HOST
    return f"{region_value.lower()}-cdn.contentstack.com"


def decamelize(key: str) -> str:
    """Convert a camelCase key to snake_case (``startDate`` -> ``start_date``)."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def decamelize_keys(value: Any) -> Any:
    """Recursively rewrite every dict key from camelCase to snake_case.

    Lists are walked element by element; scalar values are returned as-is.
    The input is never mutated.
    """
    if isinstance(value, dict):
        return {
            (decamelize(k) if isinstance(k, str) else k): decamelize_keys(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [decamelize_keys(item) for item in value]
    return value


def encode_query_params(params: dict[str, Any]) -> dict[str, Any]:
    """Percent-encode string values, descending into nested dicts.

    Numbers, booleans and other non-string values are kept unchanged.
    """
    encoded: dict[str, Any] = {}
    for key, value in params.items():
        if isinstance(value, str):
            encoded[key] = quote(value, safe="!~*'()")
        elif isinstance(value, dict):
            encoded[key] = encode_query_params(value)
        else:
            encoded[key] = value
    return encoded
