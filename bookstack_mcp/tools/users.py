"""User and Role Management Tools.

- bookstack_users_list / _create / _read / _update / _delete
- bookstack_roles_list / _create / _read / _update / _delete

Deleting a user or role can hand ownership of their content to another
user through ``migrate_ownership_id``.
"""

from ..context import AppContext
from ..registry import Dispatcher
from .helpers import deleted
from .helpers import input_schema
from .helpers import split_id
from .helpers import tool_registrar

MIGRATE_OWNERSHIP_PROPERTY = {
    "migrate_ownership_id": {
        "type": "integer",
        "minimum": 1,
        "description": "User ID to transfer content ownership to (optional)",
    }
}


def register_user_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    """Register all user tools with the dispatcher."""
    tool = tool_registrar(dispatcher, "users")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_users_list",
        "List all users in the system with pagination and filtering options",
        input_schema("users_list"),
    )
    async def list_users(params):
        return await client.list_users(validator.validate_params(params, "users_list"))

    @tool(
        "bookstack_users_create",
        "Create a new user account with email, name, and role assignments",
        input_schema("user_create"),
    )
    async def create_user(params):
        ctx.logger.info("Creating user %r", params.get("email"))
        return await client.create_user(validator.validate_params(params, "user_create"))

    @tool(
        "bookstack_users_read",
        "Get details of a specific user including their roles",
        input_schema(id_field="id", id_description="User ID to retrieve"),
    )
    async def read_user(params):
        return await client.get_user(validator.validate_id(params.get("id")))

    @tool(
        "bookstack_users_update",
        "Update a user's details including name, email, password, active status and role assignments",
        input_schema("user_update", id_field="id", id_description="User ID to update"),
    )
    async def update_user(params):
        raw_id, body = split_id(params)
        user_id = validator.validate_id(raw_id)
        return await client.update_user(user_id, validator.validate_params(body, "user_update"))

    @tool(
        "bookstack_users_delete",
        "Delete a user account with option to migrate content ownership to another user",
        input_schema(id_field="id", id_description="User ID to delete", extra_properties=MIGRATE_OWNERSHIP_PROPERTY),
    )
    async def delete_user(params):
        user_id = validator.validate_id(params.get("id"))
        migrate_to = params.get("migrate_ownership_id")
        if migrate_to is not None:
            migrate_to = validator.validate_id(migrate_to, field="migrate_ownership_id")
        await client.delete_user(user_id, migrate_to)
        return deleted("User", user_id)


def register_role_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    """Register all role tools with the dispatcher."""
    tool = tool_registrar(dispatcher, "roles")
    client = ctx.client
    validator = ctx.validator

    @tool(
        "bookstack_roles_list",
        "List roles with pagination and sorting",
        input_schema("roles_list"),
    )
    async def list_roles(params):
        return await client.list_roles(validator.validate_params(params, "roles_list"))

    @tool(
        "bookstack_roles_create",
        "Create a role with a display name, description and system permissions",
        input_schema("role_create"),
    )
    async def create_role(params):
        ctx.logger.info("Creating role %r", params.get("display_name"))
        return await client.create_role(validator.validate_params(params, "role_create"))

    @tool(
        "bookstack_roles_read",
        "Get a role including its permissions and assigned users",
        input_schema(id_field="id", id_description="Role ID to retrieve"),
    )
    async def read_role(params):
        return await client.get_role(validator.validate_id(params.get("id")))

    @tool(
        "bookstack_roles_update",
        "Update a role's details and permissions",
        input_schema("role_update", id_field="id", id_description="Role ID to update"),
    )
    async def update_role(params):
        raw_id, body = split_id(params)
        role_id = validator.validate_id(raw_id)
        return await client.update_role(role_id, validator.validate_params(body, "role_update"))

    @tool(
        "bookstack_roles_delete",
        "Delete a role with option to migrate ownership of its content to a user",
        input_schema(id_field="id", id_description="Role ID to delete", extra_properties=MIGRATE_OWNERSHIP_PROPERTY),
    )
    async def delete_role(params):
        role_id = validator.validate_id(params.get("id"))
        migrate_to = params.get("migrate_ownership_id")
        if migrate_to is not None:
            migrate_to = validator.validate_id(migrate_to, field="migrate_ownership_id")
        await client.delete_role(role_id, migrate_to)
        return deleted("Role", role_id)
