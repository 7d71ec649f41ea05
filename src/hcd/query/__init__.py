"""
Fluent request builders.

Each builder only shapes params and paths; dispatch (and caching) happens
in DeliveryClient.get_data().
"""

from hcd.query.base import BaseQuery, validate_field_uid
from hcd.query.entry import Entries, Entry
from hcd.query.query import Query
from hcd.query.resources import (
    Asset,
    AssetQuery,
    ContentType,
    ContentTypeQuery,
    GlobalField,
    GlobalFieldQuery,
)
from hcd.query.taxonomy import Taxonomy, TaxonomyQuery, Term, TermQuery

__all__ = [
    "Asset",
    "AssetQuery",
    "BaseQuery",
    "ContentType",
    "ContentTypeQuery",
    "Entries",
    "Entry",
    "GlobalField",
    "GlobalFieldQuery",
    "Query",
    "Taxonomy",
    "TaxonomyQuery",
    "Term",
    "TermQuery",
    "validate_field_uid",
]
