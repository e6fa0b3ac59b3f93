"""Tool category modules for the BookStack MCP server.

Each module exposes ``register_*_tools(dispatcher, ctx)``:
- books, pages, chapters: CRUD plus export
- shelves: CRUD
- users: users and roles CRUD, with ownership migration on delete
- files: attachments and image gallery CRUD
- search: full text search
- admin: recycle bin, content permissions, audit log, system info
- server_info: self-description and error guides
"""

from ..context import AppContext
from ..registry import Dispatcher
from .admin import register_audit_tools
from .admin import register_permission_tools
from .admin import register_recycle_bin_tools
from .admin import register_system_tools
from .books import register_book_tools
from .chapters import register_chapter_tools
from .files import register_attachment_tools
from .files import register_image_tools
from .pages import register_page_tools
from .search import register_search_tools
from .server_info import register_server_info_tools
from .shelves import register_shelf_tools
from .users import register_role_tools
from .users import register_user_tools

TOOL_REGISTRARS = (
    register_book_tools,
    register_page_tools,
    register_chapter_tools,
    register_shelf_tools,
    register_user_tools,
    register_role_tools,
    register_attachment_tools,
    register_image_tools,
    register_search_tools,
    register_recycle_bin_tools,
    register_permission_tools,
    register_audit_tools,
    register_system_tools,
    register_server_info_tools,
)


def register_all_tools(dispatcher: Dispatcher, ctx: AppContext) -> None:
    for register in TOOL_REGISTRARS:
        register(dispatcher, ctx)


__all__ = [
    "register_all_tools",
    "register_book_tools",
    "register_page_tools",
    "register_chapter_tools",
    "register_shelf_tools",
    "register_user_tools",
    "register_role_tools",
    "register_attachment_tools",
    "register_image_tools",
    "register_search_tools",
    "register_recycle_bin_tools",
    "register_permission_tools",
    "register_audit_tools",
    "register_system_tools",
    "register_server_info_tools",
]
