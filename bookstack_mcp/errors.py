"""Error classification and translation.

Every failure that leaves the dispatcher passes through ``ErrorHandler``
and comes out as a ``BookStackError`` carrying a taxonomy kind, a JSON-RPC
code, a short message and a detail payload.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any
from typing import NamedTuple

import httpx
import pydantic
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR
from mcp.types import INVALID_PARAMS
from mcp.types import INVALID_REQUEST

from .exceptions import BookStackError
from .exceptions import BookStackMCPError
from .exceptions import ErrorKind
from .exceptions import RateLimitTimeoutError
from .logger_config import ErrorCategory
from .logger_config import log_structured_error

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})

COMMUNICATION_ERROR_MESSAGE = "An error occurred while communicating with BookStack"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ErrorMapping(NamedTuple):
    kind: ErrorKind
    message: str


ERROR_MAPPINGS: dict[int, ErrorMapping] = {
    400: ErrorMapping(ErrorKind.VALIDATION, "Invalid request parameters"),
    401: ErrorMapping(ErrorKind.AUTHENTICATION, "Invalid or missing authentication token"),
    403: ErrorMapping(ErrorKind.PERMISSION, "Insufficient permissions for this operation"),
    404: ErrorMapping(ErrorKind.NOT_FOUND, "Requested resource not found"),
    422: ErrorMapping(ErrorKind.VALIDATION, "Validation failed"),
    429: ErrorMapping(ErrorKind.RATE_LIMIT, "Rate limit exceeded"),
    500: ErrorMapping(ErrorKind.SERVER, "Internal server error"),
    502: ErrorMapping(ErrorKind.SERVER, "Bad gateway"),
    503: ErrorMapping(ErrorKind.SERVER, "Service unavailable"),
    504: ErrorMapping(ErrorKind.SERVER, "Gateway timeout"),
}

UNKNOWN_MAPPING = ErrorMapping(ErrorKind.UNKNOWN, "Unknown error occurred")


def map_status_to_error_code(status: int | None) -> int:
    """Map an HTTP status to the JSON-RPC error code reported to clients."""
    if status in (400, 422):
        return INVALID_PARAMS
    if status in (401, 403, 404):
        return INVALID_REQUEST
    return INTERNAL_ERROR


def format_validation_errors(exc: pydantic.ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into ``{field, message}`` pairs with dotted paths."""
    issues = []
    for error in exc.errors():
        message = error.get("msg", "")
        # Messages raised from model validators carry pydantic's prefix.
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        issues.append({"field": ".".join(str(part) for part in error.get("loc", ())), "message": message})
    return issues


def validation_error(issues: list[dict[str, str]], message: str = "Validation failed") -> BookStackError:
    return BookStackError(
        ErrorKind.VALIDATION,
        INVALID_PARAMS,
        message,
        {"type": ErrorKind.VALIDATION.value, "validation": issues},
    )


def _request_of(exc: httpx.HTTPError) -> httpx.Request | None:
    try:
        return exc.request
    except RuntimeError:
        return None


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class ErrorHandler:
    """Translate any exception into a ``BookStackError``."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def handle_http_error(self, exc: httpx.HTTPError) -> BookStackError:
        """Classify a failed HTTP exchange by its response status.

        Transport failures have no response and classify as ``unknown_error``.
        """
        response = exc.response if isinstance(exc, httpx.HTTPStatusError) else None
        status = response.status_code if response is not None else None
        mapping = ERROR_MAPPINGS.get(status, UNKNOWN_MAPPING)
        request = _request_of(exc)

        detail = {
            "type": mapping.kind.value,
            "status": status,
            "details": _response_body(response) if response is not None else None,
            "url": str(request.url) if request is not None else None,
            "method": request.method.upper() if request is not None else None,
        }

        log_structured_error(
            category=ErrorCategory.ERROR,
            message=f"BookStack request failed: {mapping.message}",
            operation="http_request",
            context={
                "status": status,
                "error_type": mapping.kind.value,
                "url": detail["url"],
                "method": detail["method"],
                "error_message": str(exc),
            },
        )
        return BookStackError(mapping.kind, map_status_to_error_code(status), mapping.message, detail)

    def handle_error(self, exc: BaseException) -> BookStackError | McpError:
        """Translate an arbitrary exception.

        Already-translated errors are returned unchanged, so calling this
        twice yields the same error.
        """
        if isinstance(exc, McpError):
            return exc

        if isinstance(exc, httpx.HTTPError):
            return self.handle_http_error(exc)

        if isinstance(exc, pydantic.ValidationError):
            return validation_error(format_validation_errors(exc))

        if isinstance(exc, RateLimitTimeoutError):
            return BookStackError(
                ErrorKind.RATE_LIMIT,
                INTERNAL_ERROR,
                ERROR_MAPPINGS[429].message,
                {"type": ErrorKind.RATE_LIMIT.value, "status": None, "details": exc.details},
            )

        if isinstance(exc, BookStackMCPError):
            self.logger.warning("%s: %s", exc.__class__.__name__, exc.message)
            return BookStackError(
                exc.kind,
                exc.rpc_code,
                exc.message,
                {"type": exc.kind.value, "error_code": exc.error_code, **exc.details},
            )

        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        log_structured_error(
            category=ErrorCategory.ERROR,
            message=f"Unhandled error: {exc}",
            exception=exc,
            operation="error_translation",
            error_name=type(exc).__name__,
        )
        return BookStackError(
            ErrorKind.INTERNAL,
            INTERNAL_ERROR,
            str(exc) or UNEXPECTED_ERROR_MESSAGE,
            {"type": ErrorKind.INTERNAL.value, "stack": stack},
        )

    def is_retryable(self, exc: BaseException) -> bool:
        """Only upstream 429 and 5xx gateway/server statuses are worth retrying."""
        if isinstance(exc, httpx.HTTPStatusError):
            return exc.response.status_code in RETRYABLE_STATUSES
        if isinstance(exc, BookStackError):
            return exc.status in RETRYABLE_STATUSES
        return False

    def get_user_friendly_message(self, exc: BaseException) -> str:
        if isinstance(exc, McpError):
            return exc.error.message
        if isinstance(exc, httpx.HTTPStatusError):
            mapping = ERROR_MAPPINGS.get(exc.response.status_code)
            return mapping.message if mapping else COMMUNICATION_ERROR_MESSAGE
        if isinstance(exc, httpx.HTTPError):
            return COMMUNICATION_ERROR_MESSAGE
        if isinstance(exc, BookStackMCPError):
            return exc.user_message
        return UNEXPECTED_ERROR_MESSAGE

    def map_status_to_error_code(self, status: int | None) -> int:
        return map_status_to_error_code(status)
