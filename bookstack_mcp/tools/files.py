"""Attachment and Image Gallery Tools.

- bookstack_attachments_list / _create / _read / _update / _delete
- bookstack_images_list / _create / _read / _update / _delete

File and image content travels base64 encoded.
"""

from ..context import AppContext
from ..registry import Dispatcher
from .helpers import deleted
from .helpers import input_schema
from .helpers import split_id
from .helpers import tool_registrar


def register_attachment_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    """Register all attachment tools with the dispatcher."""
    tool = tool_registrar(dispatcher, "attachments")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_attachments_list",
        "List attachments with pagination, sorting and filtering by name, page or extension",
        input_schema("attachments_list"),
    )
    async def list_attachments(params):
        return await client.list_attachments(validator.validate_params(params, "attachments_list"))

    @tool(
        "bookstack_attachments_create",
        "Attach a file (base64 content) or an external link to a page",
        input_schema("attachment_create"),
    )
    async def create_attachment(params):
        ctx.logger.info("Creating attachment %r", params.get("name"))
        return await client.create_attachment(validator.validate_params(params, "attachment_create"))

    @tool(
        "bookstack_attachments_read",
        "Get an attachment including its content or link",
        input_schema(id_field="id", id_description="Attachment ID to retrieve"),
    )
    async def read_attachment(params):
        return await client.get_attachment(validator.validate_id(params.get("id")))

    @tool(
        "bookstack_attachments_update",
        "Update an attachment's name, target page, file or link",
        input_schema("attachment_update", id_field="id", id_description="Attachment ID to update"),
    )
    async def update_attachment(params):
        raw_id, body = split_id(params)
        attachment_id = validator.validate_id(raw_id)
        return await client.update_attachment(attachment_id, validator.validate_params(body, "attachment_update"))

    @tool(
        "bookstack_attachments_delete",
        "Delete an attachment",
        input_schema(id_field="id", id_description="Attachment ID to delete"),
    )
    async def delete_attachment(params):
        attachment_id = validator.validate_id(params.get("id"))
        await client.delete_attachment(attachment_id)
        return deleted("Attachment", attachment_id)


def register_image_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    """Register all image gallery tools with the dispatcher."""
    tool = tool_registrar(dispatcher, "images")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_images_list",
        "List images in the image gallery with pagination and filtering by name or type",
        input_schema("images_list"),
    )
    async def list_images(params):
        return await client.list_images(validator.validate_params(params, "images_list"))

    @tool(
        "bookstack_images_create",
        "Upload an image (base64 content) to the gallery",
        input_schema("image_create"),
    )
    async def create_image(params):
        ctx.logger.info("Uploading image %r", params.get("name"))
        return await client.create_image(validator.validate_params(params, "image_create"))

    @tool(
        "bookstack_images_read",
        "Get an image's details including its URL and thumbnails",
        input_schema(id_field="id", id_description="Image ID to retrieve"),
    )
    async def read_image(params):
        return await client.get_image(validator.validate_id(params.get("id")))

    @tool(
        "bookstack_images_update",
        "Rename an image or replace its content",
        input_schema("image_update", id_field="id", id_description="Image ID to update"),
    )
    async def update_image(params):
        raw_id, body = split_id(params)
        image_id = validator.validate_id(raw_id)
        return await client.update_image(image_id, validator.validate_params(body, "image_update"))

    @tool(
        "bookstack_images_delete",
        "Delete an image from the gallery",
        input_schema(id_field="id", id_description="Image ID to delete"),
    )
    async def delete_image(params):
        image_id = validator.validate_id(params.get("id"))
        await client.delete_image(image_id)
        return deleted("Image", image_id)
