"""
HTTP transport for the delivery API.

Wraps an httpx.AsyncClient with the stack's default headers and params,
retries transient failures with tenacity, and reports the outcome of a call
as an AdapterResponse (with or without payload) or a raised DataFetchError.
"""

from __future__ import annotations

from typing import Any

import httpx
import orjson
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from hcd import __version__
from hcd.exceptions import DataFetchError
from hcd.logging import get_logger, level_for_status
from hcd.types import AdapterResponse, Request

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
USER_AGENT = f"headless-delivery-python/{__version__}"


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, DataFetchError) and bool(exc.context.get("retryable"))


def serialize_params(params: dict[str, Any]) -> dict[str, Any]:
    """Flatten request params into query-string values.

    Dicts are JSON-encoded, lists become repeated params, booleans become
    ``true``/``false`` and None values are dropped.
    """
    serialized: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            serialized[key] = "true" if value else "false"
        elif isinstance(value, dict):
            serialized[key] = orjson.dumps(value).decode()
        elif isinstance(value, (list, tuple)):
            serialized[key] = [str(v) for v in value]
        else:
            serialized[key] = value
    return serialized


class HttpTransport:
    """Transport for GET requests against one stack.

    Sends ``api_key``/``access_token`` headers and the environment (and
    locale, when set) as default params on every request.
    """

    def __init__(
        self,
        host: str,
        api_key: str,
        delivery_token: str,
        environment: str,
        branch: str | None = None,
        locale: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 5,
        retry_delay: float = 0.3,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            host: API host without scheme.
            api_key: Stack API key.
            delivery_token: Delivery token of the environment.
            environment: Publishing environment.
            branch: Optional branch header.
            locale: Optional default locale.
            timeout: Request timeout in seconds.
            max_retries: Attempts per request, including the first.
            retry_delay: Base delay of the exponential backoff.
            headers: Extra default headers.
            client: Preconfigured httpx client (tests inject a MockTransport).
        """
        self.base_url = f"https://{host}/v3"
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self.default_headers: dict[str, str] = {
            "api_key": api_key,
            "access_token": delivery_token,
            "X-User-Agent": USER_AGENT,
            "Accept": "application/json",
        }
        if branch:
            self.default_headers["branch"] = branch
        if headers:
            self.default_headers.update(headers)

        self.default_params: dict[str, Any] = {"environment": environment}
        if locale:
            self.default_params["locale"] = locale

        self._client = client

    def set_locale(self, locale: str) -> None:
        self.default_params["locale"] = locale

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, request: Request) -> AdapterResponse:
        """Send a request, retrying transient failures.

        Args:
            request: Request to send.

        Returns:
            The response; ``data`` is None when the body was empty.

        Raises:
            DataFetchError: On a non-2xx status, timeout or connection failure.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_delay, max=10),
            reraise=True,
        ):
            with attempt:
                number = attempt.retry_state.attempt_number
                if number > 1:
                    logger.warning("Retrying request", path=request.path, attempt=number)
                response = await self._send_once(request)
        return response

    async def _send_once(self, request: Request) -> AdapterResponse:
        client = await self._get_client()
        params = serialize_params({**self.default_params, **request.params})
        headers = {**self.default_headers, **request.headers}

        logger.debug("Request", method="GET", path=request.path, params=params)

        try:
            response = await client.get(
                f"{self.base_url}{request.path}", params=params, headers=headers
            )
        except httpx.TimeoutException as e:
            raise DataFetchError(
                f"Request to {request.path} timed out",
                context={"url": request.path, "error": str(e), "retryable": True},
            ) from e
        except httpx.RequestError as e:
            raise DataFetchError(
                f"Request to {request.path} failed: {e}",
                context={"url": request.path, "error": str(e)},
            ) from e

        logger.log(
            level_for_status(response.status_code),
            "Response",
            path=request.path,
            status=response.status_code,
        )

        if response.is_error:
            status = response.status_code
            raise DataFetchError(
                f"Delivery API error: {status}",
                context={
                    "url": request.path,
                    "status_code": status,
                    "response": response.text[:500] if response.text else None,
                    "retryable": status in RETRYABLE_STATUS_CODES,
                },
            )

        return AdapterResponse(
            data=response.text or None,
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
        )
