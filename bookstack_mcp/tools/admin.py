"""Administration Tools.

- bookstack_recycle_bin_list: List deleted items
- bookstack_recycle_bin_restore: Restore a deleted item
- bookstack_recycle_bin_delete_permanently: Permanently delete a recycle bin item
- bookstack_permissions_read: Read content permission overrides
- bookstack_permissions_update: Replace content permission overrides
- bookstack_audit_log_list: List audit log entries
- bookstack_system_info: Read BookStack instance information
"""

from ..context import AppContext
from ..registry import Dispatcher
from .helpers import input_schema
from .helpers import tool_registrar


def register_recycle_bin_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    tool = tool_registrar(dispatcher, "recycle_bin")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_recycle_bin_list",
        "List deleted items in recycle bin",
        input_schema("recycle_bin_list"),
    )
    async def list_recycle_bin(params):
        return await client.list_recycle_bin(validator.validate_params(params, "recycle_bin_list"))

    @tool(
        "bookstack_recycle_bin_restore",
        "Restore an item from the recycle bin to its original location",
        input_schema("recycle_bin_operation"),
    )
    async def restore_item(params):
        deletion_id = validator.validate_id(params.get("deletion_id"), field="deletion_id")
        return await client.restore_from_recycle_bin(deletion_id)

    @tool(
        "bookstack_recycle_bin_delete_permanently",
        "Permanently delete an item from the recycle bin. This cannot be undone.",
        input_schema("recycle_bin_operation"),
    )
    async def delete_permanently(params):
        deletion_id = validator.validate_id(params.get("deletion_id"), field="deletion_id")
        return await client.permanently_delete(deletion_id)


def register_permission_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    tool = tool_registrar(dispatcher, "permissions")
    client = ctx.client
    validator = ctx.validator

    def content_target(params):
        target = validator.validate_params(params, "content_permissions")
        validator.validate_required(target, ["content_type"])
        return target.get("content_type"), validator.validate_id(target.get("content_id"), field="content_id")

    @tool(
        "bookstack_permissions_read",
        "Get permission settings for specific content (books, chapters, pages, or shelves)",
        input_schema("content_permissions"),
    )
    async def read_permissions(params):
        return await client.get_content_permissions(*content_target(params))

    @tool(
        "bookstack_permissions_update",
        "Update permission settings for specific content to control role access",
        input_schema(
            "content_permissions_update",
            extra_properties=input_schema("content_permissions")["properties"],
            required=("content_type", "content_id"),
        ),
    )
    async def update_permissions(params):
        body = dict(params)
        content_type, content_id = content_target(
            {"content_type": body.pop("content_type", None), "content_id": body.pop("content_id", None)}
        )
        return await client.update_content_permissions(
            content_type,
            content_id,
            validator.validate_params(body, "content_permissions_update"),
        )


def register_audit_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    tool = tool_registrar(dispatcher, "audit")

    @tool(
        "bookstack_audit_log_list",
        "List audit log entries with filtering by event type, user or entity",
        input_schema("audit_log_list"),
    )
    async def list_audit_log(params):
        return await ctx.client.list_audit_log(ctx.validator.validate_params(params, "audit_log_list"))


def register_system_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    tool = tool_registrar(dispatcher, "system")

    @tool(
        "bookstack_system_info",
        "Get BookStack instance information such as version, instance ID and application name",
        input_schema(),
    )
    async def system_info(params):
        return await ctx.client.get_system_info()
