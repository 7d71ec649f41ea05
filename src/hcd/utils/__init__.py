"""Utility modules for the headless delivery client."""

from hcd.utils.params import (
    decamelize,
    decamelize_keys,
    encode_query_params,
    get_host_for_region,
)

__all__ = [
    "decamelize",
    "decamelize_keys",
    "encode_query_params",
    "get_host_for_region",
]
