"""Unit tests for the custom exception hierarchy."""

from __future__ import annotations

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR
from mcp.types import INVALID_PARAMS
from mcp.types import METHOD_NOT_FOUND

from bookstack_mcp.exceptions import BookStackError
from bookstack_mcp.exceptions import BookStackMCPError
from bookstack_mcp.exceptions import ConfigurationError
from bookstack_mcp.exceptions import ErrorKind
from bookstack_mcp.exceptions import RateLimitTimeoutError
from bookstack_mcp.exceptions import ResourceNotFoundError
from bookstack_mcp.exceptions import SchemaNotFoundError
from bookstack_mcp.exceptions import ToolNotFoundError


class TestBookStackError:
    """Tests for the client-facing error."""

    def test_is_mcp_error(self):
        error = BookStackError(ErrorKind.NOT_FOUND, INVALID_PARAMS, "Requested resource not found", {"status": 404})

        assert isinstance(error, McpError)
        assert error.error.code == INVALID_PARAMS
        assert error.error.message == "Requested resource not found"
        assert error.error.data == {"status": 404}

    def test_accessors(self):
        error = BookStackError("server_error", INTERNAL_ERROR, "Bad gateway", {"status": 502, "type": "server_error"})

        assert error.kind is ErrorKind.SERVER
        assert error.code == INTERNAL_ERROR
        assert error.message == "Bad gateway"
        assert error.status == 502

    def test_detail_defaults_to_empty(self):
        error = BookStackError(ErrorKind.INTERNAL, INTERNAL_ERROR, "boom")
        assert error.detail == {}
        assert error.status is None

    def test_detail_is_a_copy(self):
        error = BookStackError(ErrorKind.INTERNAL, INTERNAL_ERROR, "boom", {"a": 1})
        error.detail["a"] = 2
        assert error.detail == {"a": 1}

    def test_to_dict(self):
        error = BookStackError(ErrorKind.VALIDATION, INVALID_PARAMS, "Validation failed", {"validation": []})

        assert error.to_dict() == {
            "kind": "validation_error",
            "code": INVALID_PARAMS,
            "message": "Validation failed",
            "detail": {"validation": []},
        }

    def test_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            BookStackError("teapot_error", INTERNAL_ERROR, "no")


class TestBookStackMCPError:
    """Tests for the base BookStackMCPError class."""

    def test_basic_initialization(self):
        error = BookStackMCPError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.error_code == "UNKNOWN_ERROR"
        assert error.details == {}
        assert error.user_message == "Something went wrong"
        assert error.rpc_code == INTERNAL_ERROR
        assert error.kind is ErrorKind.INTERNAL

    def test_with_all_parameters(self):
        error = BookStackMCPError(
            message="Technical error",
            error_code="CUSTOM_ERROR",
            details={"key": "value"},
            user_message="User-friendly message",
        )

        assert error.error_code == "CUSTOM_ERROR"
        assert error.details == {"key": "value"}
        assert error.user_message == "User-friendly message"

    def test_to_dict_preserves_subclass_name(self):
        result = SchemaNotFoundError("book_create").to_dict()

        assert result["error_type"] == "SchemaNotFoundError"
        assert result["error_code"] == "SCHEMA_NOT_FOUND"
        assert result["details"] == {"schema": "book_create"}


class TestSubclasses:
    """Tests for the concrete local errors."""

    def test_configuration_error_with_field(self):
        error = ConfigurationError("API token is required", field="bookstack_api_token")

        assert error.error_code == "CONFIGURATION_ERROR"
        assert error.details["field"] == "bookstack_api_token"
        assert error.user_message == "Configuration error: API token is required"

    def test_tool_not_found(self):
        error = ToolNotFoundError("bookstack_nope")

        assert error.message == "Unknown tool: bookstack_nope"
        assert error.rpc_code == METHOD_NOT_FOUND
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.tool_name == "bookstack_nope"

    def test_resource_not_found(self):
        error = ResourceNotFoundError("bookstack://nowhere")

        assert error.rpc_code == INVALID_PARAMS
        assert error.details == {"uri": "bookstack://nowhere"}

    def test_rate_limit_timeout(self):
        error = RateLimitTimeoutError(2.5)

        assert error.kind is ErrorKind.RATE_LIMIT
        assert error.timeout == 2.5
        assert error.user_message == "Rate limit exceeded"
        assert "2.50s" in error.message

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("x"),
            SchemaNotFoundError("x"),
            ToolNotFoundError("x"),
            ResourceNotFoundError("x"),
            RateLimitTimeoutError(1.0),
        ],
    )
    def test_all_inherit_from_base(self, error):
        assert isinstance(error, BookStackMCPError)
        assert not isinstance(error, McpError)
