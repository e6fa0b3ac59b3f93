"""Read-only resources over BookStack content.

For each entity a collection URI (``bookstack://books``) and an item
template (``bookstack://books/{id}``) are registered, collection first.
"""

from __future__ import annotations

from typing import Any
from typing import Awaitable
from typing import Callable
from urllib.parse import unquote

from ..context import AppContext
from ..models import ResourceDescriptor
from ..registry import Dispatcher

# (entity, singular label, collection description, item description)
ENTITY_RESOURCES = (
    (
        "books",
        "Book",
        "All books in the BookStack instance with metadata",
        "Specific book with full content hierarchy including all chapters and pages",
    ),
    ("pages", "Page", "All pages with metadata", "Specific page including its HTML and markdown content"),
    ("chapters", "Chapter", "All chapters with metadata", "Specific chapter including its pages"),
    ("shelves", "Shelf", "All shelves with metadata", "Specific shelf including its books"),
    ("users", "User", "All users with metadata", "Specific user including roles"),
)


def uri_tail(uri: str) -> str:
    """Return the last path segment of a resource URI, percent-decoded."""
    return unquote(uri.rstrip("/").rsplit("/", 1)[-1])


def register_entity_resources(dispatcher: Dispatcher, ctx: AppContext) -> None:
    client = ctx.client
    fetchers: dict[str, tuple[Callable[..., Awaitable[Any]], Callable[[int], Awaitable[Any]]]] = {
        "books": (client.list_books, client.get_book),
        "pages": (client.list_pages, client.get_page),
        "chapters": (client.list_chapters, client.get_chapter),
        "shelves": (client.list_shelves, client.get_shelf),
        "users": (client.list_users, client.get_user),
    }

    for entity, label, collection_description, item_description in ENTITY_RESOURCES:
        list_fn, get_fn = fetchers[entity]

        async def read_collection(uri: str, list_fn=list_fn) -> Any:
            return await list_fn()

        async def read_item(uri: str, get_fn=get_fn) -> Any:
            return await get_fn(ctx.validator.validate_id(uri_tail(uri)))

        dispatcher.register_resource(
            ResourceDescriptor(
                uri=f"bookstack://{entity}",
                name=entity.capitalize(),
                description=collection_description,
                handler=read_collection,
            )
        )
        dispatcher.register_resource(
            ResourceDescriptor(
                uri=f"bookstack://{entity}/{{id}}",
                name=label,
                description=item_description,
                handler=read_item,
            )
        )


def register_search_resources(dispatcher: Dispatcher, ctx: AppContext) -> None:
    async def read_search(uri: str) -> Any:
        return await ctx.client.search({"query": uri_tail(uri)})

    dispatcher.register_resource(
        ResourceDescriptor(
            uri="bookstack://search/{query}",
            name="Search",
            description="Search results for a specific (URL-encoded) query",
            handler=read_search,
        )
    )
