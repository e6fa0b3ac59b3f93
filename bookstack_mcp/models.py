"""Models shared by the registry, tools and server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Literal

from pydantic import BaseModel

ToolHandler = Callable[[dict[str, Any]], Awaitable[Any]]
ResourceHandler = Callable[[str], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDescriptor:
    """A named tool: JSON schema for its arguments plus the coroutine that runs it."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler
    category: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
            "category": self.category,
        }


@dataclass(frozen=True)
class ResourceDescriptor:
    """A URI pattern such as ``bookstack://books/{id}`` and the coroutine that reads it."""

    uri: str
    name: str
    description: str
    handler: ResourceHandler
    mime_type: str = "application/json"

    @property
    def is_template(self) -> bool:
        return "{" in self.uri

    def to_dict(self) -> dict[str, Any]:
        return {"uri": self.uri, "name": self.name, "description": self.description, "mimeType": self.mime_type}


class OperationStatus(BaseModel):
    """Generic status for mutation operations."""

    success: bool
    message: str
    details: dict[str, Any] | None = None


class HealthCheck(BaseModel):
    name: str
    healthy: bool
    message: str | None = None


class HealthReport(BaseModel):
    """Overall server health and the individual checks behind it."""

    status: Literal["healthy", "unhealthy"]
    checks: list[HealthCheck]
