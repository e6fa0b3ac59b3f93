"""BookStack REST API client.

Every call goes through ``BookStackClient.request``:

1. take a token from the rate limiter
2. send the request on the shared connection pool
3. return the decoded body unchanged, or raise a classified ``BookStackError``

Retries are opt-in through ``RetryPolicy`` and only happen for failures the
error handler reports as retryable. Each retry takes a fresh limiter token.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import re
from dataclasses import dataclass
from typing import Any
from typing import Awaitable
from typing import Callable

import httpx

from ..config import Settings
from ..errors import ErrorHandler
from ..exceptions import RateLimitTimeoutError
from ..metrics_config import record_api_request
from ..rate_limit import RateLimiter
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

EXPORT_EXTENSIONS = {"html": "html", "pdf": "pdf", "plaintext": "txt", "markdown": "md"}
BINARY_EXPORT_FORMATS = frozenset({"pdf"})

_FILENAME_RE = re.compile(r'filename\*?=(?:UTF-8\'\')?"?([^";]+)"?', re.IGNORECASE)


@dataclass(frozen=True)
class EndpointDescriptor:
    """A single BookStack request: method, path relative to the API base, query and JSON body."""

    method: str
    url: str
    params: dict[str, Any] | None = None
    body: dict[str, Any] | None = None


def build_query(params: dict[str, Any] | None) -> dict[str, Any] | None:
    """Flatten list parameters into BookStack's query string form.

    Nested ``filter`` mappings become ``filter[name]=value`` pairs and unset
    values are dropped.
    """
    if not params:
        return None

    query: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                if sub_value is not None:
                    query[f"{key}[{sub_key}]"] = sub_value
        else:
            query[key] = value
    return query or None


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


class BookStackClient:
    """Async client for the BookStack API.

    Args:
        settings: Connection, pool and identity settings.
        error_handler: Translates failures into ``BookStackError``.
        rate_limiter: Token bucket shared by all requests; built from
            settings when omitted.
        retry_policy: Retry behaviour; built from settings when omitted.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
        sleep: Coroutine used for retry backoff.
    """

    def __init__(
        self,
        settings: Settings,
        error_handler: ErrorHandler,
        rate_limiter: RateLimiter | None = None,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings
        self.error_handler = error_handler
        self.rate_limiter = rate_limiter or RateLimiter(
            settings.rate_limit_requests_per_minute, settings.rate_limit_burst_limit
        )
        self.retry_policy = retry_policy or RetryPolicy.from_settings(settings)
        self._sleep = sleep
        self._http = httpx.AsyncClient(
            base_url=settings.bookstack_base_url,
            timeout=settings.bookstack_timeout,
            limits=httpx.Limits(
                max_connections=settings.pool_max_connections,
                max_keepalive_connections=settings.pool_max_connections,
            ),
            headers={
                "Authorization": f"Token {settings.bookstack_api_token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": settings.user_agent,
            },
            transport=transport,
        )

    async def __aenter__(self) -> BookStackClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # === Request execution ===

    async def _send(self, endpoint: EndpointDescriptor) -> httpx.Response:
        await self.rate_limiter.acquire(timeout=self.settings.rate_limit_max_wait)

        logger.debug("API Request: %s %s params=%s", endpoint.method.upper(), endpoint.url, endpoint.params)
        try:
            response = await self._http.request(
                endpoint.method.upper(),
                endpoint.url,
                params=build_query(endpoint.params),
                json=endpoint.body,
            )
        except httpx.HTTPError:
            record_api_request(endpoint.method.upper(), None)
            raise

        record_api_request(endpoint.method.upper(), response.status_code)
        logger.debug(
            "API Response: %s %s (%d bytes)", response.status_code, endpoint.url, len(response.content)
        )
        response.raise_for_status()
        return response

    async def _execute(self, endpoint: EndpointDescriptor) -> httpx.Response:
        attempt = 1
        while True:
            try:
                return await self._send(endpoint)
            except httpx.HTTPError as e:
                if attempt < self.retry_policy.max_attempts and self.error_handler.is_retryable(e):
                    delay = self.retry_policy.backoff_for(attempt)
                    logger.warning(
                        "Attempt %d/%d for %s %s failed (%s), retrying in %.1fs",
                        attempt,
                        self.retry_policy.max_attempts,
                        endpoint.method.upper(),
                        endpoint.url,
                        e,
                        delay,
                    )
                    await self._sleep(delay)
                    attempt += 1
                    continue
                raise self.error_handler.handle_error(e) from e
            except RateLimitTimeoutError as e:
                raise self.error_handler.handle_error(e) from e

    async def request(self, endpoint: EndpointDescriptor) -> Any:
        """Execute ``endpoint`` and return the decoded response body.

        Returns:
            Parsed JSON, text for non-JSON bodies, or None for an empty body.

        Raises:
            BookStackError: On any HTTP, transport or rate limit failure.
        """
        response = await self._execute(endpoint)
        return _decode_body(response)

    async def _export(self, entity: str, entity_id: int, export_format: str) -> Any:
        response = await self._execute(EndpointDescriptor("GET", f"/{entity}/{entity_id}/export/{export_format}"))
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            return response.json()

        match = _FILENAME_RE.search(response.headers.get("content-disposition", ""))
        extension = EXPORT_EXTENSIONS.get(export_format, export_format)
        filename = match.group(1) if match else f"{entity[:-1]}-{entity_id}.{extension}"
        if export_format in BINARY_EXPORT_FORMATS:
            content = base64.b64encode(response.content).decode("ascii")
        else:
            content = response.text
        return {
            "content": content,
            "filename": filename,
            "mime_type": content_type.split(";")[0].strip() or "application/octet-stream",
        }

    async def health_check(self) -> bool:
        """Check BookStack is reachable with the configured token."""
        try:
            await self.get_system_info()
            return True
        except Exception as e:
            logger.warning("BookStack health check failed: %s", e)
            return False

    # === Generic CRUD helpers ===

    async def _list(self, path: str, params: dict[str, Any] | None) -> Any:
        return await self.request(EndpointDescriptor("GET", path, params=params))

    async def _create(self, path: str, body: dict[str, Any]) -> Any:
        return await self.request(EndpointDescriptor("POST", path, body=body))

    async def _get(self, path: str, entity_id: int) -> Any:
        return await self.request(EndpointDescriptor("GET", f"{path}/{entity_id}"))

    async def _update(self, path: str, entity_id: int, body: dict[str, Any]) -> Any:
        return await self.request(EndpointDescriptor("PUT", f"{path}/{entity_id}", body=body))

    async def _delete(self, path: str, entity_id: int, body: dict[str, Any] | None = None) -> Any:
        return await self.request(EndpointDescriptor("DELETE", f"{path}/{entity_id}", body=body))

    # === Books ===

    async def list_books(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/books", params)

    async def create_book(self, params: dict[str, Any]) -> Any:
        return await self._create("/books", params)

    async def get_book(self, book_id: int) -> Any:
        return await self._get("/books", book_id)

    async def update_book(self, book_id: int, params: dict[str, Any]) -> Any:
        return await self._update("/books", book_id, params)

    async def delete_book(self, book_id: int) -> None:
        await self._delete("/books", book_id)

    async def export_book(self, book_id: int, export_format: str) -> Any:
        return await self._export("books", book_id, export_format)

    # === Pages ===

    async def list_pages(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/pages", params)

    async def create_page(self, params: dict[str, Any]) -> Any:
        return await self._create("/pages", params)

    async def get_page(self, page_id: int) -> Any:
        return await self._get("/pages", page_id)

    async def update_page(self, page_id: int, params: dict[str, Any]) -> Any:
        return await self._update("/pages", page_id, params)

    async def delete_page(self, page_id: int) -> None:
        await self._delete("/pages", page_id)

    async def export_page(self, page_id: int, export_format: str) -> Any:
        return await self._export("pages", page_id, export_format)

    # === Chapters ===

    async def list_chapters(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/chapters", params)

    async def create_chapter(self, params: dict[str, Any]) -> Any:
        return await self._create("/chapters", params)

    async def get_chapter(self, chapter_id: int) -> Any:
        return await self._get("/chapters", chapter_id)

    async def update_chapter(self, chapter_id: int, params: dict[str, Any]) -> Any:
        return await self._update("/chapters", chapter_id, params)

    async def delete_chapter(self, chapter_id: int) -> None:
        await self._delete("/chapters", chapter_id)

    async def export_chapter(self, chapter_id: int, export_format: str) -> Any:
        return await self._export("chapters", chapter_id, export_format)

    # === Shelves ===

    async def list_shelves(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/shelves", params)

    async def create_shelf(self, params: dict[str, Any]) -> Any:
        return await self._create("/shelves", params)

    async def get_shelf(self, shelf_id: int) -> Any:
        return await self._get("/shelves", shelf_id)

    async def update_shelf(self, shelf_id: int, params: dict[str, Any]) -> Any:
        return await self._update("/shelves", shelf_id, params)

    async def delete_shelf(self, shelf_id: int) -> None:
        await self._delete("/shelves", shelf_id)

    # === Users ===

    async def list_users(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/users", params)

    async def create_user(self, params: dict[str, Any]) -> Any:
        return await self._create("/users", params)

    async def get_user(self, user_id: int) -> Any:
        return await self._get("/users", user_id)

    async def update_user(self, user_id: int, params: dict[str, Any]) -> Any:
        return await self._update("/users", user_id, params)

    async def delete_user(self, user_id: int, migrate_ownership_id: int | None = None) -> None:
        """Delete a user, optionally handing their content to another user."""
        body = {"migrate_ownership_id": migrate_ownership_id} if migrate_ownership_id else None
        await self._delete("/users", user_id, body)

    # === Roles ===

    async def list_roles(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/roles", params)

    async def create_role(self, params: dict[str, Any]) -> Any:
        return await self._create("/roles", params)

    async def get_role(self, role_id: int) -> Any:
        return await self._get("/roles", role_id)

    async def update_role(self, role_id: int, params: dict[str, Any]) -> Any:
        return await self._update("/roles", role_id, params)

    async def delete_role(self, role_id: int, migrate_ownership_id: int | None = None) -> None:
        body = {"migrate_ownership_id": migrate_ownership_id} if migrate_ownership_id else None
        await self._delete("/roles", role_id, body)

    # === Attachments ===

    async def list_attachments(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/attachments", params)

    async def create_attachment(self, params: dict[str, Any]) -> Any:
        return await self._create("/attachments", params)

    async def get_attachment(self, attachment_id: int) -> Any:
        return await self._get("/attachments", attachment_id)

    async def update_attachment(self, attachment_id: int, params: dict[str, Any]) -> Any:
        return await self._update("/attachments", attachment_id, params)

    async def delete_attachment(self, attachment_id: int) -> None:
        await self._delete("/attachments", attachment_id)

    # === Image Gallery ===

    async def list_images(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/image-gallery", params)

    async def create_image(self, params: dict[str, Any]) -> Any:
        return await self._create("/image-gallery", params)

    async def get_image(self, image_id: int) -> Any:
        return await self._get("/image-gallery", image_id)

    async def update_image(self, image_id: int, params: dict[str, Any]) -> Any:
        return await self._update("/image-gallery", image_id, params)

    async def delete_image(self, image_id: int) -> None:
        await self._delete("/image-gallery", image_id)

    # === Search ===

    async def search(self, params: dict[str, Any]) -> Any:
        return await self._list("/search", params)

    # === Recycle Bin ===

    async def list_recycle_bin(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/recycle-bin", params)

    async def restore_from_recycle_bin(self, deletion_id: int) -> Any:
        return await self.request(EndpointDescriptor("PUT", f"/recycle-bin/{deletion_id}"))

    async def permanently_delete(self, deletion_id: int) -> Any:
        return await self.request(EndpointDescriptor("DELETE", f"/recycle-bin/{deletion_id}"))

    # === Content Permissions ===

    async def get_content_permissions(self, content_type: str, content_id: int) -> Any:
        return await self.request(EndpointDescriptor("GET", f"/content-permissions/{content_type}/{content_id}"))

    async def update_content_permissions(self, content_type: str, content_id: int, params: dict[str, Any]) -> Any:
        return await self.request(
            EndpointDescriptor("PUT", f"/content-permissions/{content_type}/{content_id}", body=params)
        )

    # === Audit Log & System ===

    async def list_audit_log(self, params: dict[str, Any] | None = None) -> Any:
        return await self._list("/audit-log", params)

    async def get_system_info(self) -> Any:
        return await self.request(EndpointDescriptor("GET", "/system"))
