"""
Cache key derivation.

A key is built from the logical identity of a request only: the namespace
token (usually the stack API key), the content type uid, the entry uid and,
for anything that is not an entry, a resource name. Headers, retry counters
and other transport details never take part.
"""

from __future__ import annotations

import re

from hcd.types import Request

ENTRY_PATH_PATTERN = re.compile(r"/content_types/[^/?]+/entries/([^/?]+)")


def entry_uid_from_path(path: str | None) -> str | None:
    """Extract the entry uid from an ``.../content_types/<ct>/entries/<uid>`` path."""
    if not path:
        return None
    match = ENTRY_PATH_PATTERN.search(path)
    return match.group(1) if match else None


def resolve_cache_key(
    namespace: str,
    content_type_uid: str | None = None,
    entry_uid: str | None = None,
    path: str | None = None,
    resource: str | None = None,
) -> str:
    """Derive the cache key of a logical resource.

    An explicit entry uid wins over one parsed from the path. Without either,
    the key addresses the whole collection of the content type. A resource
    name is appended last, so a content type schema or an asset never lands
    on the key of an entries collection.

    Examples:
        >>> resolve_cache_key("apiKey", "blog")
        'blog_apiKey'
        >>> resolve_cache_key("apiKey", "blog", path="/content_types/blog/entries/e1")
        'blog_apiKey_entry_e1'
        >>> resolve_cache_key("apiKey", "blog", resource="content_type")
        'blog_apiKey_content_type'
    """
    key = namespace
    if content_type_uid:
        key = f"{content_type_uid}_{key}"

    resolved_entry = entry_uid or entry_uid_from_path(path)
    if resolved_entry:
        key = f"{key}_entry_{resolved_entry}"
    if resource:
        key = f"{key}_{resource}"
    return key


def resolve_request_key(namespace: str, request: Request) -> str:
    """Derive the cache key of a request."""
    return resolve_cache_key(
        namespace,
        content_type_uid=request.content_type_uid,
        entry_uid=request.entry_uid,
        path=request.path,
        resource=request.resource,
    )
