"""Page Management Tools.

Pages hold the actual content and live in a book or a chapter:
- bookstack_pages_list / _create / _read / _update / _delete
- bookstack_pages_export: Export a page as html, pdf, plaintext or markdown
"""

from ..context import AppContext
from ..registry import Dispatcher
from .helpers import deleted
from .helpers import input_schema
from .helpers import split_id
from .helpers import tool_registrar


def register_page_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    """Register all page tools with the dispatcher."""
    tool = tool_registrar(dispatcher, "pages")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_pages_list",
        "List pages with pagination, sorting and filters such as book_id, chapter_id, draft or template",
        input_schema("pages_list"),
    )
    async def list_pages(params):
        return await client.list_pages(validator.validate_params(params, "pages_list"))

    @tool(
        "bookstack_pages_create",
        "Create a page in a book or chapter. Provide either html or markdown content and either "
        "book_id or chapter_id.",
        input_schema("page_create"),
    )
    async def create_page(params):
        ctx.logger.info("Creating page %r", params.get("name"))
        return await client.create_page(validator.validate_params(params, "page_create"))

    @tool(
        "bookstack_pages_read",
        "Get a page including its HTML and markdown content",
        input_schema(id_field="id", id_description="Page ID to retrieve"),
    )
    async def read_page(params):
        return await client.get_page(validator.validate_id(params.get("id")))

    @tool(
        "bookstack_pages_update",
        "Update a page's name, content, tags or priority, or move it to another book or chapter",
        input_schema("page_update", id_field="id", id_description="Page ID to update"),
    )
    async def update_page(params):
        raw_id, body = split_id(params)
        page_id = validator.validate_id(raw_id)
        return await client.update_page(page_id, validator.validate_params(body, "page_update"))

    @tool(
        "bookstack_pages_delete",
        "Delete a page. The page moves to the recycle bin.",
        input_schema(id_field="id", id_description="Page ID to delete"),
    )
    async def delete_page(params):
        page_id = validator.validate_id(params.get("id"))
        await client.delete_page(page_id)
        return deleted("Page", page_id)

    @tool(
        "bookstack_pages_export",
        "Export a page in html, pdf, plaintext or markdown. PDF content is base64 encoded.",
        input_schema("export"),
    )
    async def export_page(params):
        validated = validator.validate_params(params, "export")
        page_id = validator.validate_id(validated.get("id"))
        return await client.export_page(page_id, validated.get("format"))
