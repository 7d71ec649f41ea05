"""
Request dispatch.

Every read issued by the query builders and the stack goes through
DeliveryClient.get_data(), which routes it either straight to the transport
(IGNORE_CACHE) or through the cache policy engine.
"""

from __future__ import annotations

from typing import Any

from hcd.cache.policy import CacheOptions, CachePolicyEngine, decode_payload
from hcd.logging import get_logger, log_context
from hcd.transport import HttpTransport
from hcd.types import DeliveryResponse, Request

logger = get_logger(__name__)


class DeliveryClient:
    """Dispatches requests with the configured cache policy."""

    def __init__(
        self,
        transport: HttpTransport,
        namespace: str,
        cache_options: CacheOptions | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            transport: Transport performing the network calls.
            namespace: Root of every cache key, usually the stack API key.
            cache_options: Cache configuration. None disables caching.

        Raises:
            ConfigurationError: If a caching policy has no store.
        """
        self.transport = transport
        self.namespace = namespace
        self.cache_options = cache_options or CacheOptions()
        self._engine: CachePolicyEngine | None = None
        if self.cache_options.enabled:
            self._engine = CachePolicyEngine(self.cache_options, namespace)

    async def request(self, request: Request, use_cache: bool = True) -> DeliveryResponse:
        """Settle a request, consulting the cache when a policy is active.

        Args:
            request: Request to settle.
            use_cache: False sends the request straight to the transport.
        """
        with log_context(stack=self.namespace):
            if use_cache and self._engine is not None:
                logger.debug(
                    "Dispatching through cache",
                    path=request.path,
                    policy=self.cache_options.policy.value,
                )
                return await self._engine.handle(request, self.transport.send)

            response = await self.transport.send(request)
        return DeliveryResponse(
            data=decode_payload(response) if response.has_payload else None,
            status=response.status,
            status_text=response.status_text,
            headers=response.headers,
        )

    async def get_data(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        content_type_uid: str | None = None,
        entry_uid: str | None = None,
        resource: str | None = None,
        use_cache: bool = True,
    ) -> Any:
        """Fetch a path and return its decoded JSON payload.

        Args:
            path: API path below the version prefix.
            params: Query params.
            headers: Per-request headers.
            content_type_uid: Content type the request belongs to (cache scope).
            entry_uid: Entry the request addresses, if any.
            resource: Cache identity of a request that is not an entry.
            use_cache: False bypasses the cache policy.

        Returns:
            Decoded response payload.
        """
        request = Request(
            path=path,
            params=dict(params or {}),
            headers=dict(headers or {}),
            content_type_uid=content_type_uid,
            entry_uid=entry_uid,
            resource=resource,
        )
        response = await self.request(request, use_cache=use_cache)
        return response.data

    async def close(self) -> None:
        await self.transport.close()
