"""Application context handed to every tool and resource module.

Holds the settings and the long-lived collaborators built from them, so
handlers never reach for global state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from .api import BookStackClient
from .api import RetryPolicy
from .config import Settings
from .errors import ErrorHandler
from .exceptions import ConfigurationError
from .logger_config import flush_logging
from .rate_limit import RateLimiter
from .validation import ValidationHandler


@dataclass
class AppContext:
    settings: Settings
    logger: logging.Logger
    error_handler: ErrorHandler
    validator: ValidationHandler
    rate_limiter: RateLimiter
    client: BookStackClient

    async def aclose(self) -> None:
        """Close the connection pool and flush log handlers."""
        await self.client.aclose()
        flush_logging()


def create_context(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
    rate_limiter: RateLimiter | None = None,
    retry_policy: RetryPolicy | None = None,
) -> AppContext:
    """Build the context for one server process.

    Args:
        settings: Validated application settings.
        transport: Optional httpx transport for the BookStack client.
        rate_limiter: Optional pre-built limiter (defaults from settings).
        retry_policy: Optional retry policy (defaults from settings).

    Raises:
        ConfigurationError: If no API token is configured.
    """
    if not settings.has_api_token:
        raise ConfigurationError(
            "BookStack API token is required - set BOOKSTACK_API_TOKEN environment variable",
            field="bookstack_api_token",
        )

    logger = logging.getLogger("bookstack_mcp")
    error_handler = ErrorHandler(logging.getLogger("bookstack_mcp.errors"))
    rate_limiter = rate_limiter or RateLimiter(
        settings.rate_limit_requests_per_minute, settings.rate_limit_burst_limit
    )
    client = BookStackClient(
        settings,
        error_handler,
        rate_limiter=rate_limiter,
        retry_policy=retry_policy,
        transport=transport,
    )
    return AppContext(
        settings=settings,
        logger=logger,
        error_handler=error_handler,
        validator=ValidationHandler(settings.validation_enabled, settings.validation_strict_mode),
        rate_limiter=rate_limiter,
        client=client,
    )
