"""Resource modules for the BookStack MCP server."""

from ..context import AppContext
from ..registry import Dispatcher
from .entities import register_entity_resources
from .entities import register_search_resources


def register_all_resources(dispatcher: Dispatcher, ctx: AppContext) -> None:
    register_entity_resources(dispatcher, ctx)
    register_search_resources(dispatcher, ctx)


__all__ = ["register_all_resources", "register_entity_resources", "register_search_resources"]
