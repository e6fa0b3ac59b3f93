"""Logging setup for the BookStack MCP server.

- ``configure_logging`` wires console (stderr) and optional rotating file
  handlers onto the ``bookstack_mcp`` logger tree. stdout is never used
  because the stdio transport owns it.
- ``StructuredLogFormatter`` renders one JSON object per record.
- ``log_structured_error`` gives the validation gate and the error
  handler the same error reporting shape.
- ``log_mcp_call`` wraps async tool handlers with call logging and metrics.
"""

from __future__ import annotations

import datetime
import functools
import json
import logging
import sys
import traceback
from enum import Enum
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING
from typing import Any

from .metrics_config import calculate_argument_size
from .metrics_config import record_tool_call_error
from .metrics_config import record_tool_call_start
from .metrics_config import record_tool_call_success

if TYPE_CHECKING:
    from .config import Settings

PACKAGE_LOGGER = "bookstack_mcp"

# Attributes every LogRecord carries; anything else was passed through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys() | {"message", "asctime", "taskName"}
)


class ErrorCategory(Enum):
    """Severity buckets for structured error reports."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class StructuredLogFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(log_entry, default=str)


PRETTY_FORMATTER = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# --- Logging Setup ---
package_logger = logging.getLogger(PACKAGE_LOGGER)

mcp_call_logger = logging.getLogger(f"{PACKAGE_LOGGER}.calls")

error_logger = logging.getLogger(f"{PACKAGE_LOGGER}.errors")
error_logger.setLevel(logging.INFO)

_CATEGORY_LEVELS = {
    ErrorCategory.CRITICAL: logging.CRITICAL,
    ErrorCategory.ERROR: logging.ERROR,
    ErrorCategory.WARNING: logging.WARNING,
    ErrorCategory.INFO: logging.INFO,
}


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach handlers for the configured level and format.

    Safe to call more than once; previously installed handlers are replaced.

    Args:
        settings: Application settings providing ``log_level``, ``log_format``
            and ``log_file``.

    Returns:
        The package root logger.
    """
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = StructuredLogFormatter() if settings.log_format == "json" else PRETTY_FORMATTER

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if settings.log_file:
        # 10MB per file, 5 backups
        file_handler = RotatingFileHandler(settings.log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(StructuredLogFormatter())
        package_logger.addHandler(file_handler)

    package_logger.setLevel(settings.log_level)
    package_logger.propagate = False
    return package_logger


def flush_logging() -> None:
    for handler in package_logger.handlers:
        handler.flush()


def log_structured_error(
    category: ErrorCategory,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    operation: str | None = None,
    **extra_fields: Any,
) -> None:
    """Log an error report with a category, operation and context fields.

    Args:
        category: Severity bucket; selects the log level.
        message: Human readable summary.
        exception: Exception being reported; its traceback is attached.
        context: Extra fields merged into the record.
        operation: Name of the operation that failed.
        **extra_fields: Further fields merged into the record.
    """
    extra: dict[str, Any] = {"error_category": category.value}
    if operation:
        extra["operation"] = operation
    if context:
        extra.update(context)
    extra.update(extra_fields)
    # Keys that collide with LogRecord attributes would make logging raise.
    extra = {(f"ctx_{k}" if k in _RESERVED_ATTRS else k): v for k, v in extra.items()}

    error_logger.log(
        _CATEGORY_LEVELS[category],
        message,
        exc_info=True if exception is not None else None,
        extra=extra,
    )


def _result_size(result: Any) -> int:
    try:
        if isinstance(result, str):
            return len(result.encode("utf-8"))
        return len(json.dumps(result, default=str))
    except (TypeError, ValueError):
        return len(repr(result))


# --- Decorator for Logging MCP Calls with Metrics ---
def log_mcp_call(func):
    """Log and meter every call of an async tool handler."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        func_name = getattr(func, "__name__", "unknown_function")
        start_time = record_tool_call_start(func_name, args, kwargs)

        mcp_call_logger.info(
            "Calling tool: %s (%d bytes of arguments)", func_name, calculate_argument_size(args, kwargs)
        )
        mcp_call_logger.debug("Tool %s arguments: args=%r kwargs=%r", func_name, args, kwargs)
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            record_tool_call_error(func_name, start_time, e)
            log_structured_error(
                category=ErrorCategory.ERROR,
                message=f"Tool {func_name} raised exception: {e}",
                exception=e,
                operation="tool_execution",
                function=func_name,
            )
            raise

        result_size = _result_size(result)
        record_tool_call_success(func_name, start_time, result_size)
        mcp_call_logger.info("Tool %s returned %d bytes", func_name, result_size)
        return result

    return wrapper
