"""Unit tests for the tool and resource dispatcher."""

import json

import pytest
from mcp.types import INVALID_PARAMS
from mcp.types import METHOD_NOT_FOUND

from bookstack_mcp.errors import ErrorHandler
from bookstack_mcp.exceptions import BookStackError
from bookstack_mcp.exceptions import ErrorKind
from bookstack_mcp.exceptions import ResourceNotFoundError
from bookstack_mcp.models import ResourceDescriptor
from bookstack_mcp.models import ToolDescriptor
from bookstack_mcp.registry import Dispatcher
from bookstack_mcp.registry import compile_uri_pattern


def make_tool(name, result=None, error=None):
    async def handler(params):
        if error is not None:
            raise error
        return result if result is not None else {"tool": name, "params": params}

    return ToolDescriptor(name=name, description=f"{name} tool", input_schema={"type": "object"}, handler=handler)


def make_resource(uri, label=None):
    async def handler(requested_uri):
        return {"pattern": uri, "label": label, "uri": requested_uri}

    return ResourceDescriptor(uri=uri, name=label or uri, description="", handler=handler)


@pytest.fixture
def registry():
    return Dispatcher(ErrorHandler())


class TestCompileUriPattern:
    def test_placeholder_matches_one_segment(self):
        pattern = compile_uri_pattern("bookstack://books/{id}")

        assert pattern.match("bookstack://books/12").groupdict() == {"id": "12"}
        assert pattern.match("bookstack://books/12/pages") is None
        assert pattern.match("bookstack://books/") is None

    def test_literal_text_is_escaped(self):
        pattern = compile_uri_pattern("bookstack://search/{query}")
        assert pattern.match("bookstackX//search/x") is None

    def test_multiple_placeholders(self):
        pattern = compile_uri_pattern("bookstack://{type}/{id}")
        assert pattern.match("bookstack://pages/3").groupdict() == {"type": "pages", "id": "3"}


class TestTools:
    """Tool registration and dispatch."""

    @pytest.mark.asyncio
    async def test_call_wraps_result_as_json_text(self, registry):
        registry.register_tool(make_tool("echo"))

        result = await registry.call_tool("echo", {"id": 1})

        assert result["content"][0]["type"] == "text"
        assert json.loads(result["content"][0]["text"]) == {"tool": "echo", "params": {"id": 1}}
        assert result["content"][0]["text"] == json.dumps({"tool": "echo", "params": {"id": 1}}, indent=2)

    @pytest.mark.asyncio
    async def test_string_results_are_not_reencoded(self, registry):
        registry.register_tool(make_tool("text", result="# Heading"))

        result = await registry.call_tool("text")

        assert result == {"content": [{"type": "text", "text": "# Heading"}]}

    @pytest.mark.asyncio
    async def test_missing_arguments_become_empty(self, registry):
        registry.register_tool(make_tool("echo"))
        result = await registry.call_tool("echo", None)
        assert json.loads(result["content"][0]["text"])["params"] == {}

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry):
        with pytest.raises(BookStackError) as exc_info:
            await registry.call_tool("nope")

        assert exc_info.value.code == METHOD_NOT_FOUND
        assert exc_info.value.message == "Unknown tool: nope"

    @pytest.mark.asyncio
    async def test_handler_failure_is_translated(self, registry):
        registry.register_tool(make_tool("broken", error=RuntimeError("kaput")))

        with pytest.raises(BookStackError) as exc_info:
            await registry.call_tool("broken")

        assert exc_info.value.kind is ErrorKind.INTERNAL
        assert exc_info.value.message == "kaput"

    @pytest.mark.asyncio
    async def test_translated_errors_pass_through(self, registry):
        original = BookStackError(ErrorKind.NOT_FOUND, INVALID_PARAMS, "gone", {"status": 404})
        registry.register_tool(make_tool("missing", error=original))

        with pytest.raises(BookStackError) as exc_info:
            await registry.call_tool("missing")

        assert exc_info.value is original

    @pytest.mark.asyncio
    async def test_duplicate_name_replaces_and_warns(self, registry, mocker):
        logger = mocker.patch("bookstack_mcp.registry.logger")
        registry.register_tool(make_tool("dup", result="first"))
        registry.register_tool(make_tool("dup", result="second"))

        assert len(registry.list_tools()) == 1
        logger.warning.assert_called_once()
        assert logger.warning.call_args[0][1] == "dup"
        result = await registry.call_tool("dup")
        assert result["content"][0]["text"] == "second"

    def test_list_keeps_registration_order(self, registry):
        for name in ("b", "a", "c"):
            registry.register_tool(make_tool(name))
        assert [tool.name for tool in registry.list_tools()] == ["b", "a", "c"]


class TestResources:
    """Resource matching and reading."""

    def test_exact_before_template(self, registry):
        registry.register_resource(make_resource("bookstack://books", "all books"))
        registry.register_resource(make_resource("bookstack://books/{id}", "one book"))

        resource, params = registry.match_resource("bookstack://books")
        assert resource.name == "all books"
        assert params == {}

        resource, params = registry.match_resource("bookstack://books/5")
        assert resource.name == "one book"
        assert params == {"id": "5"}

    def test_exact_wins_even_when_registered_later(self, registry):
        registry.register_resource(make_resource("bookstack://{kind}", "template"))
        registry.register_resource(make_resource("bookstack://books", "exact"))

        resource, params = registry.match_resource("bookstack://books")
        assert resource.name == "exact"
        assert params == {}

        resource, params = registry.match_resource("bookstack://pages")
        assert resource.name == "template"
        assert params == {"kind": "pages"}

    def test_first_registered_template_wins(self, registry):
        registry.register_resource(make_resource("bookstack://{kind}/{id}", "generic"))
        registry.register_resource(make_resource("bookstack://books/{id}", "specific"))

        resource, _ = registry.match_resource("bookstack://books/5")
        assert resource.name == "generic"

    def test_exact_pattern_is_not_a_prefix_match(self, registry):
        registry.register_resource(make_resource("bookstack://books"))

        with pytest.raises(ResourceNotFoundError):
            registry.match_resource("bookstack://books/extra")

    @pytest.mark.asyncio
    async def test_read_resource_contents(self, registry):
        registry.register_resource(make_resource("bookstack://books/{id}"))

        result = await registry.read_resource("bookstack://books/9")

        content = result["contents"][0]
        assert content["uri"] == "bookstack://books/9"
        assert content["mimeType"] == "application/json"
        assert json.loads(content["text"])["uri"] == "bookstack://books/9"

    @pytest.mark.asyncio
    async def test_read_unknown_resource(self, registry):
        with pytest.raises(BookStackError) as exc_info:
            await registry.read_resource("bookstack://nothing")

        assert exc_info.value.code == INVALID_PARAMS
        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.detail["uri"] == "bookstack://nothing"

    def test_template_flag(self):
        assert make_resource("bookstack://books/{id}").is_template
        assert not make_resource("bookstack://books").is_template
