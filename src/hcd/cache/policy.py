"""
Cache policy engine.

Decides, per request, the order in which the persistence store and the
network are consulted, and settles the request exactly once: it either
returns a DeliveryResponse or raises.

Branching rules:
- NETWORK_ELSE_CACHE: network first. A response with a payload is written
  through to the store; a response without one falls back to the store.
- CACHE_THEN_NETWORK / CACHE_ELSE_NETWORK: store first, network on a miss
  with write-through. A hit never touches the network.
- IGNORE_CACHE never reaches the engine; callers go straight to the network.

A network call that raises is never answered from the store. Only a
successful call without a payload triggers the fallback.

Concurrent requests for the same key are not serialized: both may miss,
both fetch, and the last write wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import orjson

from hcd.cache.base import PersistenceStore
from hcd.cache.keys import resolve_request_key
from hcd.exceptions import ConfigurationError, DataFetchError, EmptyResponseError
from hcd.logging import get_logger
from hcd.types import AdapterResponse, CachePolicy, DeliveryResponse, Request

logger = get_logger(__name__)

NetworkCall = Callable[[Request], Awaitable[AdapterResponse]]


@dataclass(frozen=True)
class CacheOptions:
    """Cache configuration of a client.

    Attributes:
        policy: Cache policy, fixed for the lifetime of the client.
        max_age: Time-to-live in seconds applied to every write.
        store: Persistence store handle. Required by every caching policy.
    """

    policy: CachePolicy = CachePolicy.IGNORE_CACHE
    max_age: int = 60 * 60 * 24
    store: PersistenceStore | None = None

    @property
    def enabled(self) -> bool:
        return self.policy is not CachePolicy.IGNORE_CACHE


class CachePolicyEngine:
    """Applies a cache policy around a network call."""

    def __init__(self, options: CacheOptions, namespace: str) -> None:
        """Initialize the engine.

        Args:
            options: Cache options of the client.
            namespace: Root of every cache key, usually the stack API key.

        Raises:
            ConfigurationError: If the policy is IGNORE_CACHE or no store is set.
        """
        if not options.enabled:
            raise ConfigurationError(
                "IGNORE_CACHE requests bypass the cache engine",
                context={"policy": options.policy.value},
            )
        if options.store is None:
            raise ConfigurationError(
                "Cache policy requires a persistence store",
                context={"policy": options.policy.value},
            )
        self.options = options
        self.namespace = namespace
        self.store: PersistenceStore = options.store

    async def handle(self, request: Request, network_call: NetworkCall) -> DeliveryResponse:
        """Settle a request under the configured policy.

        Args:
            request: The request to serve.
            network_call: Performs the actual transport call.

        Returns:
            The network payload, or a cached value in a synthesized 200 envelope.

        Raises:
            EmptyResponseError: If neither the network nor the store had data.
            Exception: Whatever the network call raised, unchanged.
        """
        key = resolve_request_key(self.namespace, request)
        scope = request.content_type_uid

        if self.options.policy is CachePolicy.NETWORK_ELSE_CACHE:
            response = await network_call(request)
            if response.has_payload:
                return await self._write_through(key, scope, response)

            cached = await self.store.get(key, scope)
            if cached is not None:
                logger.debug("Empty network response answered from cache", key=key)
                return DeliveryResponse.from_cache_hit(cached)
            raise EmptyResponseError(response, context={"key": key})

        # CACHE_THEN_NETWORK and CACHE_ELSE_NETWORK share one flow
        cached = await self.store.get(key, scope)
        if cached is not None:
            logger.debug("Cache hit", key=key)
            return DeliveryResponse.from_cache_hit(cached)

        logger.debug("Cache miss", key=key)
        response = await network_call(request)
        if response.has_payload:
            return await self._write_through(key, scope, response)
        raise EmptyResponseError(response, context={"key": key})

    async def _write_through(
        self, key: str, scope: str | None, response: AdapterResponse
    ) -> DeliveryResponse:
        payload = decode_payload(response)
        await self.store.set(key, payload, scope, self.options.max_age)
        logger.debug("Cache write", key=key, ttl=self.options.max_age)
        return DeliveryResponse(data=payload)


def decode_payload(response: AdapterResponse) -> Any:
    """Decode the JSON body of a transport response.

    Raises:
        DataFetchError: If the body is not valid JSON.
    """
    try:
        return orjson.loads(response.data)
    except orjson.JSONDecodeError as e:
        raise DataFetchError(
            "Failed to decode response body",
            context={"status_code": response.status, "error": str(e)},
        ) from e
