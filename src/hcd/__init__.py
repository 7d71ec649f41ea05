"""
Headless delivery client.

Read-only client for a hosted headless-content delivery API, with a
per-request cache policy and delta synchronization.
"""

__version__ = "0.1.0"

from hcd.cache import CacheOptions, MemoryStore, PersistenceStore, SQLiteStore
from hcd.exceptions import (
    ConfigurationError,
    DataFetchError,
    EmptyResponseError,
    HCDError,
    ValidationError,
)
from hcd.stack import Stack, stack
from hcd.types import (
    CachePolicy,
    PublishType,
    QueryOperation,
    Region,
    TaxonomyQueryOperation,
)

__all__ = [
    "CacheOptions",
    "CachePolicy",
    "ConfigurationError",
    "DataFetchError",
    "EmptyResponseError",
    "HCDError",
    "MemoryStore",
    "PersistenceStore",
    "PublishType",
    "QueryOperation",
    "Region",
    "SQLiteStore",
    "Stack",
    "TaxonomyQueryOperation",
    "ValidationError",
    "__version__",
    "stack",
]
