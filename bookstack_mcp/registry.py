"""Tool and resource registry with dispatch.

Tools are looked up by exact name. A resource URI equal to a registered
exact pattern always resolves to it; otherwise templates are tried in
registration order and the first match wins.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .errors import ErrorHandler
from .exceptions import ResourceNotFoundError
from .exceptions import ToolNotFoundError
from .models import ResourceDescriptor
from .models import ToolDescriptor

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{([^{}/]+)\}")


def compile_uri_pattern(pattern: str) -> re.Pattern[str]:
    """Turn ``bookstack://books/{id}`` into an anchored regex with one group per placeholder.

    A placeholder matches one or more characters other than ``/``.
    """
    parts = []
    position = 0
    for match in _PLACEHOLDER_RE.finditer(pattern):
        parts.append(re.escape(pattern[position : match.start()]))
        parts.append(f"(?P<{match.group(1)}>[^/]+)")
        position = match.end()
    parts.append(re.escape(pattern[position:]))
    return re.compile("^" + "".join(parts) + "$")


def to_text(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=str)


class Dispatcher:
    """Holds every tool and resource and routes invocations to them."""

    def __init__(self, error_handler: ErrorHandler):
        self.error_handler = error_handler
        self._tools: dict[str, ToolDescriptor] = {}
        self._resources: list[tuple[ResourceDescriptor, re.Pattern[str] | None]] = []

    def register_tool(self, tool: ToolDescriptor) -> None:
        if tool.name in self._tools:
            logger.warning("Tool %s registered twice; the later registration replaces the earlier", tool.name)
        self._tools[tool.name] = tool

    def register_resource(self, resource: ResourceDescriptor) -> None:
        compiled = compile_uri_pattern(resource.uri) if resource.is_template else None
        self._resources.append((resource, compiled))

    def list_tools(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def list_resources(self) -> list[ResourceDescriptor]:
        return [resource for resource, _ in self._resources]

    def get_tool(self, name: str) -> ToolDescriptor:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run the named tool and wrap its result as MCP text content.

        Returns:
            ``{"content": [{"type": "text", "text": <JSON result>}]}``

        Raises:
            BookStackError: For an unknown tool or any handler failure.
        """
        try:
            tool = self.get_tool(name)
            logger.debug("Dispatching tool %s", name)
            result = await tool.handler(arguments or {})
        except Exception as e:
            raise self.error_handler.handle_error(e) from e

        return {"content": [{"type": "text", "text": to_text(result)}]}

    def match_resource(self, uri: str) -> tuple[ResourceDescriptor, dict[str, str]]:
        """Find the resource serving ``uri``.

        Exact patterns take priority over templates regardless of when they
        were registered.

        Returns:
            The resource and the values captured by its placeholders.

        Raises:
            ResourceNotFoundError: If nothing matches.
        """
        for resource, compiled in self._resources:
            if compiled is None and resource.uri == uri:
                return resource, {}
        for resource, compiled in self._resources:
            if compiled is None:
                continue
            match = compiled.match(uri)
            if match:
                return resource, match.groupdict()
        raise ResourceNotFoundError(uri)

    async def read_resource(self, uri: str) -> dict[str, Any]:
        """Read a resource by concrete URI.

        Returns:
            ``{"contents": [{"uri", "mimeType", "text"}]}``
        """
        try:
            resource, _ = self.match_resource(uri)
            logger.debug("Reading resource %s via %s", uri, resource.uri)
            result = await resource.handler(uri)
        except Exception as e:
            raise self.error_handler.handle_error(e) from e

        return {"contents": [{"uri": uri, "mimeType": resource.mime_type, "text": to_text(result)}]}
