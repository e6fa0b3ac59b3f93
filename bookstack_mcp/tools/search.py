"""Search Tools.

- bookstack_search: Full text search across shelves, books, chapters and pages
"""

from ..context import AppContext
from ..registry import Dispatcher
from .helpers import input_schema
from .helpers import tool_registrar


def register_search_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    tool = tool_registrar(dispatcher, "search")

    @tool(
        "bookstack_search",
        "Search all content. Supports BookStack search syntax, e.g. exact \"phrases\", [tag=value] "
        "and filters such as {type:page} or {in_name:setup}.",
        input_schema("search"),
    )
    async def search(params):
        return await ctx.client.search(ctx.validator.validate_params(params, "search"))
