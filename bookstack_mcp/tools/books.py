"""Book Management Tools.

Books are the top-level containers in the BookStack hierarchy:
- bookstack_books_list: List books with pagination, sorting and filters
- bookstack_books_create: Create a book
- bookstack_books_read: Read a book with its chapters and pages
- bookstack_books_update: Update a book
- bookstack_books_delete: Delete a book (moves it to the recycle bin)
- bookstack_books_export: Export a book as html, pdf, plaintext or markdown
"""

from ..context import AppContext
from ..registry import Dispatcher
from .helpers import deleted
from .helpers import input_schema
from .helpers import split_id
from .helpers import tool_registrar


def register_book_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    """Register all book tools with the dispatcher."""
    tool = tool_registrar(dispatcher, "books")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_books_list",
        "List all books visible to the authenticated user with pagination and filtering options. "
        "Books are the top-level containers in BookStack hierarchy.",
        input_schema("books_list"),
    )
    async def list_books(params):
        return await client.list_books(validator.validate_params(params, "books_list"))

    @tool(
        "bookstack_books_create",
        "Create a new book with name, description, tags, and template settings",
        input_schema("book_create"),
    )
    async def create_book(params):
        ctx.logger.info("Creating book %r", params.get("name"))
        return await client.create_book(validator.validate_params(params, "book_create"))

    @tool(
        "bookstack_books_read",
        "Get details of a specific book including its complete content hierarchy (chapters and pages)",
        input_schema(id_field="id", id_description="Book ID to retrieve"),
    )
    async def read_book(params):
        return await client.get_book(validator.validate_id(params.get("id")))

    @tool(
        "bookstack_books_update",
        "Update a book's details including name, description, tags, and template settings",
        input_schema("book_update", id_field="id", id_description="Book ID to update"),
    )
    async def update_book(params):
        raw_id, body = split_id(params)
        book_id = validator.validate_id(raw_id)
        return await client.update_book(book_id, validator.validate_params(body, "book_update"))

    @tool(
        "bookstack_books_delete",
        "Delete a book. The book and its contents move to the recycle bin.",
        input_schema(id_field="id", id_description="Book ID to delete"),
    )
    async def delete_book(params):
        book_id = validator.validate_id(params.get("id"))
        await client.delete_book(book_id)
        return deleted("Book", book_id)

    @tool(
        "bookstack_books_export",
        "Export a book in html, pdf, plaintext or markdown. PDF content is base64 encoded.",
        input_schema("export"),
    )
    async def export_book(params):
        validated = validator.validate_params(params, "export")
        book_id = validator.validate_id(validated.get("id"))
        return await client.export_book(book_id, validated.get("format"))
