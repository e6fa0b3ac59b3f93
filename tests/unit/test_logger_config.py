"""
Unit tests for logger_config module.

Covers the structured JSON formatter, log_structured_error, the async log_mcp_call decorator and
configure_logging handler wiring.
"""

import json
import logging
import sys
from io import StringIO

import pytest

from bookstack_mcp.logger_config import PRETTY_FORMATTER
from bookstack_mcp.logger_config import ErrorCategory
from bookstack_mcp.logger_config import StructuredLogFormatter
from bookstack_mcp.logger_config import configure_logging
from bookstack_mcp.logger_config import error_logger
from bookstack_mcp.logger_config import log_mcp_call
from bookstack_mcp.logger_config import log_structured_error
from bookstack_mcp.logger_config import package_logger


def make_record(msg="Test message", level=logging.ERROR, exc_info=None):
    return logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestErrorCategory:
    """Test suite for ErrorCategory enum."""

    def test_error_category_values(self):
        assert ErrorCategory.CRITICAL.value == "CRITICAL"
        assert ErrorCategory.ERROR.value == "ERROR"
        assert ErrorCategory.WARNING.value == "WARNING"
        assert ErrorCategory.INFO.value == "INFO"


class TestStructuredLogFormatter:
    """Test suite for StructuredLogFormatter."""

    def test_formatter_basic_log_entry(self):
        log_data = json.loads(StructuredLogFormatter().format(make_record()))

        assert log_data["level"] == "ERROR"
        assert log_data["logger"] == "test_logger"
        assert log_data["message"] == "Test message"
        assert "timestamp" in log_data

    def test_formatter_with_exception_info(self):
        """Exception type, message and traceback lines are included."""
        try:
            raise ValueError("Test exception")
        except ValueError:
            record = make_record("Error occurred", exc_info=sys.exc_info())

        log_data = json.loads(StructuredLogFormatter().format(record))

        assert log_data["exception"]["type"] == "ValueError"
        assert log_data["exception"]["message"] == "Test exception"
        assert isinstance(log_data["exception"]["traceback"], list)

    def test_formatter_with_extra_fields(self):
        record = make_record("Operation completed", level=logging.INFO)
        record.operation = "http_request"
        record.url = "http://bookstack.test/api/books/1"
        record.error_category = "INFO"

        log_data = json.loads(StructuredLogFormatter().format(record))

        assert log_data["operation"] == "http_request"
        assert log_data["url"] == "http://bookstack.test/api/books/1"
        assert log_data["error_category"] == "INFO"

    def test_formatter_serializes_unknown_types(self):
        record = make_record()
        record.payload = {1, 2}

        log_data = json.loads(StructuredLogFormatter().format(record))

        assert isinstance(log_data["payload"], str)


class TestLogStructuredError:
    """Test suite for log_structured_error function."""

    def test_log_structured_error_basic(self, mocker):
        mock_logger = mocker.patch("bookstack_mcp.logger_config.error_logger")
        log_structured_error(category=ErrorCategory.ERROR, message="Test error message", operation="http_request")

        mock_logger.log.assert_called_once()
        call_args = mock_logger.log.call_args
        assert call_args[0][0] == logging.ERROR
        assert call_args[0][1] == "Test error message"
        extra = call_args[1]["extra"]
        assert extra["error_category"] == "ERROR"
        assert extra["operation"] == "http_request"

    def test_log_structured_error_with_exception(self, mocker):
        mock_logger = mocker.patch("bookstack_mcp.logger_config.error_logger")
        log_structured_error(
            category=ErrorCategory.CRITICAL,
            message="Critical error occurred",
            exception=ValueError("Test exception"),
        )

        call_args = mock_logger.log.call_args
        assert call_args[0][0] == logging.CRITICAL
        assert call_args[1]["exc_info"] is True

    def test_log_structured_error_with_context(self, mocker):
        mock_logger = mocker.patch("bookstack_mcp.logger_config.error_logger")
        log_structured_error(
            category=ErrorCategory.WARNING,
            message="Validation warning",
            context={"schema": "book_create", "status": 422},
            operation="parameter_validation",
        )

        extra = mock_logger.log.call_args[1]["extra"]
        assert extra["schema"] == "book_create"
        assert extra["status"] == 422
        assert mock_logger.log.call_args[0][0] == logging.WARNING

    def test_reserved_keys_are_prefixed(self, mocker):
        """Context keys that clash with LogRecord attributes are renamed."""
        mock_logger = mocker.patch("bookstack_mcp.logger_config.error_logger")
        log_structured_error(
            category=ErrorCategory.ERROR,
            message="clash",
            context={"message": "upstream text", "name": "x"},
        )

        extra = mock_logger.log.call_args[1]["extra"]
        assert "message" not in extra
        assert extra["ctx_message"] == "upstream text"
        assert extra["ctx_name"] == "x"

    def test_reserved_keys_do_not_break_real_logger(self):
        log_structured_error(
            category=ErrorCategory.INFO,
            message="real logger",
            context={"args": [1, 2], "module": "m"},
        )


class TestLogMCPCallDecorator:
    """Test suite for log_mcp_call decorator."""

    @pytest.mark.asyncio
    async def test_log_mcp_call_success(self, mocker):
        mock_logger = mocker.patch("bookstack_mcp.logger_config.mcp_call_logger")

        @log_mcp_call
        async def bookstack_books_read(params):
            return {"id": params["id"], "name": "Guide"}

        result = await bookstack_books_read({"id": 1})

        assert result == {"id": 1, "name": "Guide"}
        assert mock_logger.info.call_count == 2
        assert mock_logger.info.call_args_list[0][0][1] == "bookstack_books_read"

    @pytest.mark.asyncio
    async def test_log_mcp_call_with_exception(self, mocker):
        mocker.patch("bookstack_mcp.logger_config.mcp_call_logger")
        mock_log_error = mocker.patch("bookstack_mcp.logger_config.log_structured_error")

        @log_mcp_call
        async def failing_tool(params):
            raise LookupError("missing")

        with pytest.raises(LookupError):
            await failing_tool({})

        call_args = mock_log_error.call_args
        assert call_args[1]["category"] == ErrorCategory.ERROR
        assert call_args[1]["operation"] == "tool_execution"
        assert call_args[1]["function"] == "failing_tool"

    @pytest.mark.asyncio
    async def test_log_mcp_call_records_metrics(self, mocker):
        start = mocker.patch("bookstack_mcp.logger_config.record_tool_call_start", return_value=None)
        success = mocker.patch("bookstack_mcp.logger_config.record_tool_call_success")

        @log_mcp_call
        async def tool(params):
            return "ok"

        await tool({"a": 1})

        start.assert_called_once_with("tool", ({"a": 1},), {})
        success.assert_called_once_with("tool", None, 2)

    def test_preserves_function_name(self):
        @log_mcp_call
        async def bookstack_search(params):
            return None

        assert bookstack_search.__name__ == "bookstack_search"


class TestConfigureLogging:
    """Tests for handler wiring from settings."""

    @pytest.fixture(autouse=True)
    def restore_handlers(self):
        handlers = list(package_logger.handlers)
        level = package_logger.level
        propagate = package_logger.propagate
        yield
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
        for handler in handlers:
            package_logger.addHandler(handler)
        package_logger.setLevel(level)
        package_logger.propagate = propagate

    def test_pretty_console_handler_on_stderr(self, make_settings):
        configure_logging(make_settings(log_format="pretty", log_level="WARNING"))

        assert len(package_logger.handlers) == 1
        handler = package_logger.handlers[0]
        assert handler.stream is sys.stderr
        assert handler.formatter is PRETTY_FORMATTER
        assert package_logger.level == logging.WARNING
        assert package_logger.propagate is False

    def test_json_format(self, make_settings):
        configure_logging(make_settings(log_format="json"))
        assert isinstance(package_logger.handlers[0].formatter, StructuredLogFormatter)

    def test_reconfigure_replaces_handlers(self, make_settings):
        configure_logging(make_settings())
        configure_logging(make_settings())
        assert len(package_logger.handlers) == 1

    def test_log_file_adds_rotating_handler(self, make_settings, tmp_path):
        from logging.handlers import RotatingFileHandler

        log_file = tmp_path / "server.log"
        configure_logging(make_settings(log_file=str(log_file)))

        file_handlers = [h for h in package_logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert isinstance(file_handlers[0].formatter, StructuredLogFormatter)
        file_handlers[0].close()


class TestIntegrationWithActualLogger:
    """Integration tests with actual logger instances."""

    def test_error_logger_configuration(self):
        assert error_logger.name == "bookstack_mcp.errors"
        assert error_logger.level == logging.INFO

    def test_actual_structured_logging_output(self):
        log_stream = StringIO()
        handler = logging.StreamHandler(log_stream)
        handler.setFormatter(StructuredLogFormatter())
        test_logger = logging.getLogger("test_structured")
        test_logger.addHandler(handler)
        test_logger.setLevel(logging.INFO)

        try:
            raise ValueError("Test exception for logging")
        except ValueError:
            test_logger.error(
                "Test structured log entry",
                exc_info=True,
                extra={"error_category": "ERROR", "operation": "http_request", "status": 500},
            )
        test_logger.removeHandler(handler)

        log_data = json.loads(log_stream.getvalue().strip())
        assert log_data["level"] == "ERROR"
        assert log_data["message"] == "Test structured log entry"
        assert log_data["error_category"] == "ERROR"
        assert log_data["operation"] == "http_request"
        assert log_data["status"] == 500
        assert log_data["exception"]["type"] == "ValueError"
