"""Chapter Management Tools.

Chapters group pages inside a book:
- bookstack_chapters_list / _create / _read / _update / _delete
- bookstack_chapters_export: Export a chapter as html, pdf, plaintext or markdown
"""

from ..context import AppContext
from ..registry import Dispatcher
from .helpers import deleted
from .helpers import input_schema
from .helpers import split_id
from .helpers import tool_registrar


def register_chapter_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    """Register all chapter tools with the dispatcher."""
    tool = tool_registrar(dispatcher, "chapters")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_chapters_list",
        "List chapters with pagination, sorting and filtering by book or name",
        input_schema("chapters_list"),
    )
    async def list_chapters(params):
        return await client.list_chapters(validator.validate_params(params, "chapters_list"))

    @tool(
        "bookstack_chapters_create",
        "Create a chapter inside a book",
        input_schema("chapter_create"),
    )
    async def create_chapter(params):
        ctx.logger.info("Creating chapter %r", params.get("name"))
        return await client.create_chapter(validator.validate_params(params, "chapter_create"))

    @tool(
        "bookstack_chapters_read",
        "Get a chapter including the list of pages it contains",
        input_schema(id_field="id", id_description="Chapter ID to retrieve"),
    )
    async def read_chapter(params):
        return await client.get_chapter(validator.validate_id(params.get("id")))

    @tool(
        "bookstack_chapters_update",
        "Update a chapter's details or move it to another book",
        input_schema("chapter_update", id_field="id", id_description="Chapter ID to update"),
    )
    async def update_chapter(params):
        raw_id, body = split_id(params)
        chapter_id = validator.validate_id(raw_id)
        return await client.update_chapter(chapter_id, validator.validate_params(body, "chapter_update"))

    @tool(
        "bookstack_chapters_delete",
        "Delete a chapter and its pages. They move to the recycle bin.",
        input_schema(id_field="id", id_description="Chapter ID to delete"),
    )
    async def delete_chapter(params):
        chapter_id = validator.validate_id(params.get("id"))
        await client.delete_chapter(chapter_id)
        return deleted("Chapter", chapter_id)

    @tool(
        "bookstack_chapters_export",
        "Export a chapter in html, pdf, plaintext or markdown. PDF content is base64 encoded.",
        input_schema("export"),
    )
    async def export_chapter(params):
        validated = validator.validate_params(params, "export")
        chapter_id = validator.validate_id(validated.get("id"))
        return await client.export_chapter(chapter_id, validated.get("format"))
