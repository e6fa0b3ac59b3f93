"""Centralized configuration management for the BookStack MCP server.

This module provides a single source of truth for all configuration
including the BookStack connection, rate limiting, validation, retry,
logging and transport settings.
"""

from __future__ import annotations

import os
from typing import Any
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings

from .. import __version__


class Settings(BaseSettings):
    """Centralized settings for the BookStack MCP server."""

    # === BookStack Connection ===
    bookstack_base_url: str = Field(
        default="http://localhost:8080/api", description="Base URL of the BookStack API"
    )
    bookstack_api_token: str = Field(
        default="", description="API token in the form '<token_id>:<token_secret>'"
    )
    bookstack_timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    pool_max_connections: int = Field(default=10, ge=1, description="HTTP connection pool size")

    # === Server Identity ===
    server_name: str = Field(default="bookstack-mcp-server", description="MCP server name")
    server_version: str = Field(default=__version__, description="MCP server version")

    # === Rate Limiting ===
    rate_limit_requests_per_minute: int = Field(default=60, gt=0, description="Sustained request rate")
    rate_limit_burst_limit: int = Field(default=10, ge=1, description="Token bucket capacity")
    rate_limit_max_wait: float | None = Field(
        default=None, description="Maximum seconds to wait for a rate limit token (unbounded if unset)"
    )

    # === Validation ===
    validation_enabled: bool = Field(default=True, description="Validate tool parameters")
    validation_strict_mode: bool = Field(
        default=False, description="Reject invalid parameters instead of warning"
    )

    # === Retry ===
    retry_max_attempts: int = Field(default=1, ge=1, description="Attempts per request (1 disables retry)")
    retry_backoff: Literal["exponential", "linear"] = Field(
        default="exponential", description="Backoff strategy between attempts"
    )
    retry_initial_delay: float = Field(default=1.0, ge=0, description="Delay before the first retry")
    retry_max_delay: float = Field(default=30.0, ge=0, description="Upper bound for a single retry delay")

    # === Logging Configuration ===
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["pretty", "json"] = Field(default="pretty", description="Console log format")
    log_file: str | None = Field(default=None, description="Optional rotating log file path")

    # === Environment ===
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Deployment environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # === HTTP SSE Server Configuration ===
    sse_host: str = Field(default="localhost", description="SSE server host")
    sse_port: int = Field(default=3001, description="SSE server port")

    # === Performance Configuration ===
    enable_metrics: bool = Field(default=False, description="Enable metrics collection")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @field_validator("bookstack_base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        if not value.startswith(("http://", "https://")):
            raise ValueError("Invalid BookStack base URL")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level == "WARN":
            level = "WARNING"
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level

    @property
    def is_test_environment(self) -> bool:
        """Check if running in test environment."""
        return "PYTEST_CURRENT_TEST" in os.environ or self.environment == "test"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_api_token(self) -> bool:
        return bool(self.bookstack_api_token and self.bookstack_api_token.strip())

    @property
    def user_agent(self) -> str:
        return f"{self.server_name}/{self.server_version}"

    def validate_for_production(self) -> list[str]:
        """Check settings that must hold before running in production.

        Returns:
            A list of problems; empty when the configuration is production ready.
        """
        errors = []
        if not self.has_api_token:
            errors.append("BOOKSTACK_API_TOKEN is required")
        if self.is_production:
            if "localhost" in self.bookstack_base_url:
                errors.append("Production should not use localhost for BookStack URL")
            if self.debug:
                errors.append("Debug mode should be disabled in production")
            if self.log_level == "DEBUG":
                errors.append("Debug logging should be disabled in production")
        return errors

    def summary(self) -> dict[str, Any]:
        """Get a configuration summary that is safe to log (no token)."""
        return {
            "bookstack": {
                "base_url": self.bookstack_base_url,
                "has_api_token": self.has_api_token,
                "timeout": self.bookstack_timeout,
            },
            "server": {"name": self.server_name, "version": self.server_version},
            "rate_limit": {
                "requests_per_minute": self.rate_limit_requests_per_minute,
                "burst_limit": self.rate_limit_burst_limit,
                "max_wait": self.rate_limit_max_wait,
            },
            "validation": {
                "enabled": self.validation_enabled,
                "strict_mode": self.validation_strict_mode,
            },
            "retry": {
                "max_attempts": self.retry_max_attempts,
                "backoff": self.retry_backoff,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "environment": self.environment,
            "debug": self.debug,
        }


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        load_dotenv()  # Load .env file
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (primarily for testing)."""
    global _settings
    _settings = None
