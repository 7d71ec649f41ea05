"""
Custom exception hierarchy for the headless delivery client.

All exceptions inherit from HCDError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hcd.types import AdapterResponse


class HCDError(Exception):
    """Base exception for all delivery client errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(HCDError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Missing api key, delivery token or environment
        - A caching policy configured without a persistence store
    """

    pass


class DataFetchError(HCDError):
    """Raised when the transport call fails.

    Context should include:
        - url: The URL that was being fetched
        - status_code: HTTP status code if applicable
        - error: The underlying error message
    """

    @property
    def status_code(self) -> int | None:
        return self.context.get("status_code")


class EmptyResponseError(HCDError):
    """Raised when the network answered without a payload and no cached copy exists.

    The original transport response is kept untouched on ``response``.
    """

    def __init__(
        self,
        response: AdapterResponse,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__("Network response carried no payload", context)
        self.response = response


class ValidationError(HCDError):
    """Raised when query builder arguments are invalid.

    Context should include:
        - field: The field that failed validation
        - value: The invalid value
    """

    pass
