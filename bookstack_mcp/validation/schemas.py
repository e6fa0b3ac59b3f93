"""Parameter schemas for BookStack tool calls.

Each schema is a pydantic model registered under a name in ``SCHEMAS``.
Validation coerces values, applies defaults and drops unknown keys. The
same models provide the JSON schemas advertised for tool inputs.
"""

from __future__ import annotations

from typing import Annotated
from typing import Literal

from pydantic import AfterValidator
from pydantic import AnyUrl
from pydantic import BaseModel
from pydantic import Field
from pydantic import PositiveInt
from pydantic import TypeAdapter
from pydantic import model_validator

_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    _url_adapter.validate_python(value)
    return value


Url = Annotated[str, AfterValidator(_check_url)]
Name = Annotated[str, Field(min_length=1, max_length=255)]
Description = Annotated[str, Field(max_length=1900)]
DescriptionHtml = Annotated[str, Field(max_length=2000)]
Email = Annotated[str, Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")]
Password = Annotated[str, Field(min_length=8)]

ExportFormat = Literal["html", "pdf", "plaintext", "markdown"]
ContentType = Literal["bookshelf", "book", "chapter", "page"]
ImageType = Literal["gallery", "drawio"]


class Tag(BaseModel):
    name: str = Field(description="Tag name")
    value: str = Field(description="Tag value")


# === Pagination ===


class Pagination(BaseModel):
    count: int = Field(default=20, ge=1, le=500, description="Number of items to return")
    offset: int = Field(default=0, ge=0, description="Number of items to skip")
    sort: str | None = Field(default=None, description="Sort field")


class _ListParams(BaseModel):
    count: int = Field(default=20, ge=1, le=500, description="Number of items to return")
    offset: int = Field(default=0, ge=0, description="Number of items to skip")


# === Books ===


class BookFilter(BaseModel):
    name: str | None = Field(default=None, description="Filter by book name (partial match)")
    created_by: int | None = Field(default=None, description="Filter by creator user ID")


class BooksList(_ListParams):
    sort: Literal["name", "created_at", "updated_at"] = Field(default="name", description="Sort field")
    filter: BookFilter | None = Field(default=None, description="Optional filters to apply")


class BookCreate(BaseModel):
    name: Name = Field(description="Book name")
    description: Description | None = Field(default=None, description="Book description in plain text")
    description_html: DescriptionHtml | None = Field(default=None, description="Book description in HTML")
    tags: list[Tag] | None = Field(default=None, description="Tags to assign to the book")
    default_template_id: int | None = Field(default=None, description="Default page template ID")


class BookUpdate(BaseModel):
    name: Name | None = None
    description: Description | None = None
    description_html: DescriptionHtml | None = None
    tags: list[Tag] | None = Field(default=None, description="Tags (replaces existing tags)")
    default_template_id: int | None = None


# === Pages ===


class PageFilter(BaseModel):
    book_id: int | None = None
    chapter_id: int | None = None
    name: str | None = None
    draft: bool | None = None
    template: bool | None = None


class PagesList(_ListParams):
    sort: Literal["name", "created_at", "updated_at", "priority"] = "name"
    filter: PageFilter | None = None


class PageCreate(BaseModel):
    book_id: int | None = Field(default=None, description="Parent book ID (required without chapter_id)")
    chapter_id: int | None = Field(default=None, description="Parent chapter ID (required without book_id)")
    name: Name = Field(description="Page name")
    html: str | None = Field(default=None, description="Page content as HTML")
    markdown: str | None = Field(default=None, description="Page content as Markdown")
    tags: list[Tag] | None = None
    priority: int | None = Field(default=None, description="Ordering priority within the parent")

    @model_validator(mode="after")
    def check_content_and_parent(self):
        problems = []
        if not (self.html or self.markdown):
            problems.append("Either html or markdown content is required")
        if not (self.book_id or self.chapter_id):
            problems.append("Either book_id or chapter_id is required")
        if problems:
            raise ValueError("; ".join(problems))
        return self


class PageUpdate(BaseModel):
    book_id: int | None = Field(default=None, description="Move the page to this book")
    chapter_id: int | None = Field(default=None, description="Move the page to this chapter")
    name: Name | None = None
    html: str | None = None
    markdown: str | None = None
    tags: list[Tag] | None = None
    priority: int | None = None


# === Chapters ===


class ChapterFilter(BaseModel):
    book_id: int | None = None
    name: str | None = None


class ChaptersList(_ListParams):
    sort: Literal["name", "created_at", "updated_at", "priority"] = "name"
    filter: ChapterFilter | None = None


class ChapterCreate(BaseModel):
    name: Name = Field(description="Chapter name")
    book_id: int = Field(description="Book that will contain the chapter")
    description: Description | None = None
    description_html: DescriptionHtml | None = None
    tags: list[Tag] | None = None
    priority: int | None = None


class ChapterUpdate(BaseModel):
    name: Name | None = None
    book_id: int | None = Field(default=None, description="Move the chapter to this book")
    description: Description | None = None
    description_html: DescriptionHtml | None = None
    tags: list[Tag] | None = None
    priority: int | None = None


# === Shelves ===


class ShelvesList(_ListParams):
    sort: Literal["name", "created_at", "updated_at"] = "name"
    filter: BookFilter | None = None


class ShelfCreate(BaseModel):
    name: Name = Field(description="Shelf name")
    description: Description | None = None
    description_html: DescriptionHtml | None = None
    tags: list[Tag] | None = None
    books: list[int] | None = Field(default=None, description="IDs of books on the shelf, in order")


class ShelfUpdate(BaseModel):
    name: Name | None = None
    description: Description | None = None
    description_html: DescriptionHtml | None = None
    tags: list[Tag] | None = None
    books: list[int] | None = Field(default=None, description="Book IDs (replaces the current list)")


# === Users ===


class UserFilter(BaseModel):
    name: str | None = None
    email: str | None = None
    active: bool | None = None


class UsersList(_ListParams):
    sort: Literal["name", "email", "created_at", "updated_at"] = "name"
    filter: UserFilter | None = None


class UserCreate(BaseModel):
    name: Name = Field(description="Display name")
    email: Email = Field(description="Email address")
    password: Password | None = Field(default=None, description="Password (min 8 characters)")
    roles: list[int] | None = Field(default=None, description="Role IDs to assign")
    send_invite: bool | None = Field(default=None, description="Email an invitation instead of setting a password")


class UserUpdate(BaseModel):
    name: Name | None = None
    email: Email | None = None
    password: Password | None = None
    roles: list[int] | None = None
    active: bool | None = None


# === Roles ===


class RolesList(_ListParams):
    sort: Literal["display_name", "created_at", "updated_at"] = "display_name"


class RoleCreate(BaseModel):
    display_name: Name = Field(description="Role name")
    description: Description | None = None
    permissions: list[str] | None = Field(default=None, description="System permission names")
    mfa_enforced: bool | None = None


class RoleUpdate(BaseModel):
    display_name: Name | None = None
    description: Description | None = None
    permissions: list[str] | None = None
    mfa_enforced: bool | None = None


# === Attachments ===


class AttachmentFilter(BaseModel):
    name: str | None = None
    uploaded_to: int | None = None
    extension: str | None = None


class AttachmentsList(_ListParams):
    sort: Literal["name", "extension", "uploaded_to", "created_at", "updated_at"] = "name"
    filter: AttachmentFilter | None = None


class AttachmentCreate(BaseModel):
    uploaded_to: int = Field(description="ID of the page to attach to")
    name: Name = Field(description="Attachment name")
    file: str | None = Field(default=None, description="Base64 encoded file content")
    link: Url | None = Field(default=None, description="External link URL")

    @model_validator(mode="after")
    def check_file_or_link(self):
        if not (self.file or self.link):
            raise ValueError("Either file or link is required")
        return self


class AttachmentUpdate(BaseModel):
    uploaded_to: int | None = None
    name: Name | None = None
    file: str | None = Field(default=None, description="Base64 encoded file content")
    link: Url | None = None


# === Images ===


class ImageFilter(BaseModel):
    name: str | None = None
    type: ImageType | None = None


class ImagesList(_ListParams):
    sort: Literal["name", "created_at", "updated_at"] = "name"
    filter: ImageFilter | None = None


class ImageCreate(BaseModel):
    name: Name = Field(description="Image name")
    image: str = Field(description="Base64 encoded image content")
    type: ImageType = Field(default="gallery", description="Image type")


class ImageUpdate(BaseModel):
    name: Name | None = None
    image: str | None = Field(default=None, description="Base64 encoded replacement image")


# === Search ===


class Search(BaseModel):
    query: str = Field(min_length=1, description="BookStack search query, supports tags and filters like {type:page}")
    page: int = Field(default=1, ge=1, description="Result page")
    count: int = Field(default=20, ge=1, le=100, description="Results per page")


# === Audit Log ===


class AuditLogFilter(BaseModel):
    type: str | None = None
    user_id: int | None = None
    entity_type: str | None = None
    entity_id: int | None = None


class AuditLogList(_ListParams):
    sort: Literal["created_at", "type", "user_id"] = "created_at"
    filter: AuditLogFilter | None = None


# === Content Permissions ===


class RolePermission(BaseModel):
    role_id: int
    view: bool
    create: bool
    update: bool
    delete: bool


class ContentPermissions(BaseModel):
    content_type: ContentType = Field(description="Kind of content item")
    content_id: PositiveInt = Field(description="ID of the content item")


class ContentPermissionsUpdate(BaseModel):
    permissions: list[RolePermission] = Field(description="Per-role permission overrides")


# === Generic ===


class Export(BaseModel):
    id: int = Field(description="ID of the item to export")
    format: ExportFormat = Field(description="Export format")


class IdParams(BaseModel):
    id: PositiveInt


class RecycleBinList(_ListParams):
    sort: Literal["deleted_at", "deletable_type", "deletable_id"] = "deleted_at"


class RecycleBinOperation(BaseModel):
    deletion_id: PositiveInt = Field(description="Recycle bin deletion ID")


SCHEMAS: dict[str, type[BaseModel]] = {
    "pagination": Pagination,
    "books_list": BooksList,
    "book_create": BookCreate,
    "book_update": BookUpdate,
    "pages_list": PagesList,
    "page_create": PageCreate,
    "page_update": PageUpdate,
    "chapters_list": ChaptersList,
    "chapter_create": ChapterCreate,
    "chapter_update": ChapterUpdate,
    "shelves_list": ShelvesList,
    "shelf_create": ShelfCreate,
    "shelf_update": ShelfUpdate,
    "users_list": UsersList,
    "user_create": UserCreate,
    "user_update": UserUpdate,
    "roles_list": RolesList,
    "role_create": RoleCreate,
    "role_update": RoleUpdate,
    "attachments_list": AttachmentsList,
    "attachment_create": AttachmentCreate,
    "attachment_update": AttachmentUpdate,
    "images_list": ImagesList,
    "image_create": ImageCreate,
    "image_update": ImageUpdate,
    "search": Search,
    "audit_log_list": AuditLogList,
    "content_permissions": ContentPermissions,
    "content_permissions_update": ContentPermissionsUpdate,
    "export": Export,
    "id": IdParams,
    "recycle_bin_list": RecycleBinList,
    "recycle_bin_operation": RecycleBinOperation,
}
