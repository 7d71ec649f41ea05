"""
Pytest configuration and fixtures for delivery client tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Generator
from unittest.mock import patch

import httpx
import pytest

from hcd.cache import MemoryStore
from hcd.config import Settings, clear_settings_cache
from hcd.transport import HttpTransport


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "HCD_API_KEY": "blt-test-api-key-1234567890",
        "HCD_DELIVERY_TOKEN": "cs-test-delivery-token-abcdef",
        "HCD_ENVIRONMENT": "production",
        "HCD_REGION": "eu",
        "HCD_HOST": "",
        "HCD_BRANCH": "",
        "HCD_LOCALE": "",
        "CACHE_POLICY": "cache_then_network",
        "CACHE_MAX_AGE": "600",
        "CACHE_STORE": "memory",
        "CACHE_DIR": ".test_cache",
        "MAX_RETRIES": "2",
        "RETRY_DELAY": "0",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str], temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide a Settings instance with mock configuration.

    Uses temp_dir for the cache directory.
    """
    with patch.dict(os.environ, {"CACHE_DIR": str(temp_dir / "cache")}):
        clear_settings_cache()
        from hcd.config import get_settings

        settings = get_settings()
        settings.ensure_directories()
        yield settings
        clear_settings_cache()


@pytest.fixture
def memory_store() -> MemoryStore:
    """Provide an empty in-memory persistence store."""
    return MemoryStore(default_ttl_seconds=3600)


@pytest.fixture
def make_transport() -> Callable[..., HttpTransport]:
    """Build an HttpTransport whose HTTP calls are answered by a handler.

    The handler receives the httpx.Request; every handled request is also
    appended to ``transport.sent`` for assertions.
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> HttpTransport:
        sent: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        options: dict[str, Any] = {
            "host": "cdn.example.test",
            "api_key": "apiKey",
            "delivery_token": "token",
            "environment": "production",
            "retry_delay": 0,
            "max_retries": 2,
        }
        options.update(kwargs)
        transport = HttpTransport(client=client, **options)
        transport.sent = sent  # type: ignore[attr-defined]
        return transport

    return factory


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
