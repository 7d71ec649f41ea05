"""
Stack: the entry point of the delivery client.

Validates the stack credentials, resolves the API host, wires the transport
and the cache policy, and hands out the request builders.
"""

from __future__ import annotations

from typing import Any, Mapping

from hcd.cache import CacheOptions, PersistenceStore, build_store
from hcd.client import DeliveryClient
from hcd.config import Settings
from hcd.exceptions import ConfigurationError, EmptyResponseError
from hcd.logging import get_logger
from hcd.query import (
    Asset,
    AssetQuery,
    ContentType,
    ContentTypeQuery,
    GlobalField,
    GlobalFieldQuery,
    Taxonomy,
    TaxonomyQuery,
)
from hcd.sync import SYNC_PATH, SynchronizationEngine
from hcd.transport import HttpTransport
from hcd.types import AdapterResponse, Region, Request
from hcd.utils import get_host_for_region

logger = get_logger(__name__)


class Stack:
    """A configured stack.

    Usage:
        async with stack(api_key, delivery_token, environment) as s:
            entry = await s.content_type("blog").entry("e1").fetch()
            changes = await s.sync(recursive=True)
    """

    def __init__(
        self,
        client: DeliveryClient,
        api_key: str,
        environment: str,
        locale: str | None = None,
    ) -> None:
        self._client = client
        self.api_key = api_key
        self.environment = environment
        self.locale = locale
        self._sync_engine = SynchronizationEngine(self._fetch_sync_page)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: PersistenceStore | None = None,
    ) -> Stack:
        """Build a stack from environment settings.

        Args:
            settings: Loaded settings.
            store: Persistence store; built from CACHE_STORE when omitted
                and a caching policy is configured.
        """
        if store is None and settings.caching_enabled:
            store = build_store(settings)

        return stack(
            api_key=settings.api_key,
            delivery_token=settings.delivery_token,
            environment=settings.environment,
            region=settings.HCD_REGION,
            host=settings.HCD_HOST,
            branch=settings.HCD_BRANCH,
            locale=settings.HCD_LOCALE,
            cache_options=CacheOptions(
                policy=settings.CACHE_POLICY,
                max_age=settings.CACHE_MAX_AGE,
                store=store,
            ),
            timeout=settings.HTTP_TIMEOUT,
            max_retries=settings.MAX_RETRIES,
            retry_delay=settings.RETRY_DELAY,
        )

    @property
    def client(self) -> DeliveryClient:
        return self._client

    def content_type(self, uid: str | None = None) -> ContentType | ContentTypeQuery:
        """Return one content type when a uid is given, otherwise all of them."""
        if uid:
            return ContentType(self._client, uid)
        return ContentTypeQuery(self._client)

    def asset(self, uid: str | None = None) -> Asset | AssetQuery:
        """Return one asset when a uid is given, otherwise the asset query."""
        if uid:
            return Asset(self._client, uid)
        return AssetQuery(self._client)

    def global_field(self, uid: str | None = None) -> GlobalField | GlobalFieldQuery:
        """Return one global field when a uid is given, otherwise all of them."""
        if uid:
            return GlobalField(self._client, uid)
        return GlobalFieldQuery(self._client)

    def taxonomy(self, uid: str | None = None) -> Taxonomy | TaxonomyQuery:
        """Return one taxonomy when a uid is given, otherwise a taxonomy query over entries."""
        if uid:
            return Taxonomy(self._client, uid)
        return TaxonomyQuery(self._client)

    def set_locale(self, locale: str) -> None:
        """Set the locale sent with every following request."""
        self.locale = locale
        self._client.transport.set_locale(locale)

    async def sync(
        self,
        params: Mapping[str, Any] | None = None,
        recursive: bool = False,
    ) -> dict[str, Any]:
        """Fetch delta updates of the stack.

        Args:
            params: ``locale``, ``startDate``, ``contentTypeUid``, ``type``, or a
                ``paginationToken``/``syncToken`` to resume from.
            recursive: Follow pagination tokens until a sync token is returned.

        Returns:
            ``items`` plus ``sync_token`` (or ``pagination_token`` when not recursive).

        Raises:
            EmptyResponseError: If a page of the feed came back without a body.
            DataFetchError: If a page request failed.
        """
        return await self._sync_engine.drain(params, recursive=recursive)

    async def _fetch_sync_page(self, params: dict[str, Any]) -> dict[str, Any]:
        # the change feed is never served from the cache
        response = await self._client.request(
            Request(path=SYNC_PATH, params=params), use_cache=False
        )
        if response.data is None:
            raise EmptyResponseError(
                AdapterResponse(
                    data=None,
                    status=response.status or 200,
                    status_text=response.status_text or "",
                    headers=response.headers or {},
                ),
                context={"path": SYNC_PATH},
            )
        return response.data

    async def open(self) -> Stack:
        """Initialize the persistence store, if any."""
        store = self._client.cache_options.store
        if store is not None:
            await store.init()
        return self

    async def close(self) -> None:
        """Close the transport and the persistence store."""
        try:
            await self._client.close()
        finally:
            store = self._client.cache_options.store
            if store is not None:
                await store.close()

    async def __aenter__(self) -> Stack:
        return await self.open()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def stack(
    api_key: str,
    delivery_token: str,
    environment: str,
    region: Region | str = Region.US,
    host: str | None = None,
    branch: str | None = None,
    locale: str | None = None,
    cache_options: CacheOptions | None = None,
    timeout: float = 30.0,
    max_retries: int = 5,
    retry_delay: float = 0.3,
    headers: dict[str, str] | None = None,
    transport: HttpTransport | None = None,
) -> Stack:
    """Create a stack.

    Args:
        api_key: Stack API key (also the root of every cache key).
        delivery_token: Delivery token of the environment.
        environment: Publishing environment.
        region: Hosting region, used when no host is given.
        host: Explicit API host.
        branch: Branch to read from.
        locale: Default locale.
        cache_options: Cache policy, TTL and store.
        timeout: Transport timeout in seconds.
        max_retries: Attempts per request.
        retry_delay: Base backoff delay in seconds.
        headers: Extra default headers.
        transport: Prebuilt transport, mostly for tests.

    Returns:
        The configured Stack.

    Raises:
        ConfigurationError: If a credential is missing, or a caching policy
            has no persistence store.
    """
    if not api_key:
        raise ConfigurationError("API key for Stack is required.")
    if not delivery_token:
        raise ConfigurationError("Delivery token for Stack is required.")
    if not environment:
        raise ConfigurationError("Environment for Stack is required.")

    if transport is None:
        transport = HttpTransport(
            host=get_host_for_region(region, host),
            api_key=api_key,
            delivery_token=delivery_token,
            environment=environment,
            branch=branch,
            locale=locale,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            headers=headers,
        )

    client = DeliveryClient(transport, namespace=api_key, cache_options=cache_options)
    logger.debug(
        "Stack configured",
        base_url=transport.base_url,
        policy=client.cache_options.policy.value,
    )
    return Stack(client, api_key=api_key, environment=environment, locale=locale)
