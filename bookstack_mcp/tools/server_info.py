"""Server Self-Description Tools.

- bookstack_server_info: Capabilities, tool and resource catalogue, error guide
- bookstack_error_guides: How to recover from each error kind

These read the dispatcher at call time, so they always describe the full
registered set.
"""

from collections import defaultdict
from typing import Any

from ..context import AppContext
from ..errors import ERROR_MAPPINGS
from ..errors import validation_error
from ..exceptions import ErrorKind
from ..registry import Dispatcher
from .helpers import input_schema
from .helpers import tool_registrar

SECTIONS = ("all", "capabilities", "tools", "resources", "errors")

RECOVERY_SUGGESTIONS = {
    ErrorKind.VALIDATION: "Check the tool's input schema; the error detail lists each invalid field.",
    ErrorKind.AUTHENTICATION: "Verify BOOKSTACK_API_TOKEN is set as '<token_id>:<token_secret>'.",
    ErrorKind.PERMISSION: "The token's user lacks permission; use an account with the required role.",
    ErrorKind.NOT_FOUND: "Confirm the ID with a list or search tool before retrying.",
    ErrorKind.RATE_LIMIT: "Slow down; requests are limited per minute and will succeed after a pause.",
    ErrorKind.SERVER: "BookStack failed to handle the request; retry later or check the server logs.",
    ErrorKind.UNKNOWN: "Check that BOOKSTACK_BASE_URL points at a reachable BookStack API.",
    ErrorKind.INTERNAL: "An unexpected server-side failure; report it with the error detail.",
}


def error_guide() -> list[dict[str, Any]]:
    statuses: dict[ErrorKind, list[int]] = defaultdict(list)
    for status, mapping in ERROR_MAPPINGS.items():
        statuses[mapping.kind].append(status)
    return [
        {"type": kind.value, "http_status": statuses.get(kind, []), "recovery": suggestion}
        for kind, suggestion in RECOVERY_SUGGESTIONS.items()
    ]


def register_server_info_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    tool = tool_registrar(dispatcher, "meta")
    settings = ctx.settings

    def tool_catalogue() -> dict[str, list[dict[str, str]]]:
        categories: dict[str, list[dict[str, str]]] = defaultdict(list)
        for descriptor in dispatcher.list_tools():
            categories[descriptor.category or "other"].append(
                {"name": descriptor.name, "description": descriptor.description}
            )
        return dict(categories)

    def capabilities() -> dict[str, Any]:
        return {
            "tools": {"total": len(dispatcher.list_tools()), "categories": sorted(tool_catalogue())},
            "resources": {"total": len(dispatcher.list_resources())},
            "authentication": {"required": True, "methods": ["API Token"]},
            "rate_limiting": {
                "requests_per_minute": settings.rate_limit_requests_per_minute,
                "burst_limit": settings.rate_limit_burst_limit,
            },
            "validation": {
                "enabled": settings.validation_enabled,
                "strict_mode": settings.validation_strict_mode,
            },
            "retry": {"max_attempts": settings.retry_max_attempts},
        }

    @tool(
        "bookstack_server_info",
        "Get server information including capabilities, tools, resources, and error guidance. "
        "Call at the start of a session to plan tool usage.",
        input_schema(
            extra_properties={
                "section": {
                    "type": "string",
                    "enum": list(SECTIONS),
                    "default": "all",
                    "description": "Which section of server info to retrieve",
                }
            }
        ),
    )
    async def server_info(params):
        section = params.get("section") or "all"
        if section not in SECTIONS:
            raise validation_error([{"field": "section", "message": f"Use one of: {', '.join(SECTIONS)}"}])

        info = {
            "name": settings.server_name,
            "version": settings.server_version,
            "description": "MCP server providing access to a BookStack knowledge base: "
            "books, chapters, pages, shelves, users, roles, attachments, images and administration.",
            "bookstack_url": settings.bookstack_base_url,
            "capabilities": capabilities(),
            "tools": tool_catalogue(),
            "resources": [resource.to_dict() for resource in dispatcher.list_resources()],
            "errors": error_guide(),
        }
        if section == "all":
            return info
        return {"name": info["name"], "version": info["version"], section: info[section]}

    @tool(
        "bookstack_error_guides",
        "Explain each error type this server returns and how to recover from it",
        input_schema(),
    )
    async def error_guides(params):
        return {"errors": error_guide()}
