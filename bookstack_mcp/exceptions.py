"""Exception hierarchy for the BookStack MCP server.

Two families live here:

- ``BookStackMCPError`` and its subclasses describe local failures
  (configuration, unknown tool or resource, missing schema, rate limit
  wait exhausted). They never leave the server as-is; the error handler
  converts them.
- ``BookStackError`` is the single error shape clients see. It is an
  ``McpError`` so the MCP runtime serializes it as a JSON-RPC error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR
from mcp.types import INVALID_PARAMS
from mcp.types import METHOD_NOT_FOUND
from mcp.types import ErrorData


class ErrorKind(str, Enum):
    """Classification of every failure reported to clients."""

    VALIDATION = "validation_error"
    AUTHENTICATION = "authentication_error"
    PERMISSION = "permission_error"
    NOT_FOUND = "not_found_error"
    RATE_LIMIT = "rate_limit_error"
    SERVER = "server_error"
    UNKNOWN = "unknown_error"
    INTERNAL = "internal_error"


class BookStackError(McpError):
    """Uniform error raised by the dispatcher, client and validation gate.

    The JSON-RPC code, message and detail payload are carried on the
    wrapped ``ErrorData`` so the MCP runtime can send them unchanged.
    """

    def __init__(
        self,
        kind: ErrorKind,
        code: int,
        message: str,
        detail: dict[str, Any] | None = None,
    ):
        super().__init__(ErrorData(code=code, message=message, data=detail or {}))
        self._kind = ErrorKind(kind)

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def detail(self) -> dict[str, Any]:
        return dict(self.error.data or {})

    @property
    def status(self) -> int | None:
        """HTTP status of the upstream response, if there was one."""
        return self.detail.get("status")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "code": self.code, "message": self.message, "detail": self.detail}

    def __repr__(self) -> str:
        return f"BookStackError(kind={self.kind.value!r}, code={self.code}, message={self.message!r})"


class BookStackMCPError(Exception):
    """Base exception for local BookStack MCP failures."""

    rpc_code: int = INTERNAL_ERROR
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.user_message = user_message or message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }


class ConfigurationError(BookStackMCPError):
    """Raised when the server cannot start with the given settings."""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = dict(details or {})
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=error_details,
            user_message=f"Configuration error: {message}",
        )


class SchemaNotFoundError(BookStackMCPError):
    """Raised when a handler asks for a validation schema that is not registered."""

    def __init__(self, schema_name: str):
        super().__init__(
            message=f"No validation schema found for {schema_name}",
            error_code="SCHEMA_NOT_FOUND",
            details={"schema": schema_name},
        )
        self.schema_name = schema_name


class ToolNotFoundError(BookStackMCPError):
    """Raised when a tool name is not registered."""

    rpc_code = METHOD_NOT_FOUND
    kind = ErrorKind.NOT_FOUND

    def __init__(self, tool_name: str):
        super().__init__(
            message=f"Unknown tool: {tool_name}",
            error_code="TOOL_NOT_FOUND",
            details={"tool": tool_name},
            user_message=f"Tool '{tool_name}' does not exist. Call bookstack_server_info to list tools.",
        )
        self.tool_name = tool_name


class ResourceNotFoundError(BookStackMCPError):
    """Raised when no registered resource pattern matches a URI."""

    rpc_code = INVALID_PARAMS
    kind = ErrorKind.NOT_FOUND

    def __init__(self, uri: str):
        super().__init__(
            message=f"Unknown resource: {uri}",
            error_code="RESOURCE_NOT_FOUND",
            details={"uri": uri},
            user_message=f"No resource matches '{uri}'.",
        )
        self.uri = uri


class RateLimitTimeoutError(BookStackMCPError):
    """Raised when waiting for a rate limit token exceeds the allowed time."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(self, timeout: float):
        super().__init__(
            message=f"Timed out after {timeout:.2f}s waiting for a rate limit token",
            error_code="RATE_LIMIT_TIMEOUT",
            details={"timeout": timeout},
            user_message="Rate limit exceeded",
        )
        self.timeout = timeout
