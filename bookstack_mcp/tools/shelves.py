"""Shelf Management Tools.

Shelves collect books:
- bookstack_shelves_list / _create / _read / _update / _delete
"""

from ..context import AppContext
from ..registry import Dispatcher
from .helpers import deleted
from .helpers import input_schema
from .helpers import split_id
from .helpers import tool_registrar


def register_shelf_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    """Register all shelf tools with the dispatcher."""
    tool = tool_registrar(dispatcher, "shelves")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_shelves_list",
        "List shelves with pagination, sorting and filtering",
        input_schema("shelves_list"),
    )
    async def list_shelves(params):
        return await client.list_shelves(validator.validate_params(params, "shelves_list"))

    @tool(
        "bookstack_shelves_create",
        "Create a shelf, optionally placing books on it",
        input_schema("shelf_create"),
    )
    async def create_shelf(params):
        ctx.logger.info("Creating shelf %r", params.get("name"))
        return await client.create_shelf(validator.validate_params(params, "shelf_create"))

    @tool(
        "bookstack_shelves_read",
        "Get a shelf including the books on it",
        input_schema(id_field="id", id_description="Shelf ID to retrieve"),
    )
    async def read_shelf(params):
        return await client.get_shelf(validator.validate_id(params.get("id")))

    @tool(
        "bookstack_shelves_update",
        "Update a shelf's details or replace its list of books",
        input_schema("shelf_update", id_field="id", id_description="Shelf ID to update"),
    )
    async def update_shelf(params):
        raw_id, body = split_id(params)
        shelf_id = validator.validate_id(raw_id)
        return await client.update_shelf(shelf_id, validator.validate_params(body, "shelf_update"))

    @tool(
        "bookstack_shelves_delete",
        "Delete a shelf. The books on it are kept.",
        input_schema(id_field="id", id_description="Shelf ID to delete"),
    )
    async def delete_shelf(params):
        shelf_id = validator.validate_id(params.get("id"))
        await client.delete_shelf(shelf_id)
        return deleted("Shelf", shelf_id)
