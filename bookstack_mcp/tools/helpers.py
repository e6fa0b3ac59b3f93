"""Shared plumbing for tool modules."""

from __future__ import annotations

import copy
from typing import Any
from typing import Callable

from ..logger_config import log_mcp_call
from ..models import OperationStatus
from ..models import ToolDescriptor
from ..models import ToolHandler
from ..registry import Dispatcher
from ..validation.schemas import SCHEMAS


def input_schema(
    schema_name: str | None = None,
    *,
    id_field: str | None = None,
    id_description: str = "ID of the item",
    extra_properties: dict[str, Any] | None = None,
    required: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Build a tool's JSON input schema from a registered validation schema.

    Args:
        schema_name: Validation schema whose fields make up the arguments.
        id_field: Name of an integer ID argument that sits outside the schema
            (update and delete tools take the ID separately from the body).
        id_description: Description for the ID argument.
        extra_properties: Further argument definitions.
        required: Names of extra required arguments.
    """
    if schema_name:
        schema = copy.deepcopy(SCHEMAS[schema_name].model_json_schema())
    else:
        schema = {"type": "object", "properties": {}}
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)

    properties = schema.setdefault("properties", {})
    required_fields = list(schema.get("required", []))
    if id_field:
        schema["properties"] = {id_field: {"type": "integer", "minimum": 1, "description": id_description}, **properties}
        required_fields.insert(0, id_field)
    if extra_properties:
        schema["properties"].update(extra_properties)
    required_fields.extend(name for name in required if name not in required_fields)
    if required_fields:
        schema["required"] = required_fields
    return schema


def tool_registrar(dispatcher: Dispatcher, category: str) -> Callable[..., Callable[[ToolHandler], ToolHandler]]:
    """Return a decorator factory that registers handlers under ``category``.

    Usage::

        tool = tool_registrar(dispatcher, "books")

        @tool("bookstack_books_read", "Get a book", input_schema(id_field="id"))
        async def read_book(params): ...
    """

    def tool(name: str, description: str, schema: dict[str, Any]) -> Callable[[ToolHandler], ToolHandler]:
        def decorator(func: ToolHandler) -> ToolHandler:
            func.__name__ = name
            func.__qualname__ = name
            handler = log_mcp_call(func)
            dispatcher.register_tool(
                ToolDescriptor(
                    name=name,
                    description=description,
                    input_schema=schema,
                    handler=handler,
                    category=category,
                )
            )
            return handler

        return decorator

    return tool


def split_id(params: dict[str, Any], field: str = "id") -> tuple[Any, dict[str, Any]]:
    """Separate the path ID from the rest of an update request."""
    body = dict(params)
    return body.pop(field, None), body


def deleted(label: str, item_id: int) -> dict[str, Any]:
    return OperationStatus(success=True, message=f"{label} {item_id} deleted successfully").model_dump(
        exclude_none=True
    )
