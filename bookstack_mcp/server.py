"""MCP Server for BookStack.

Builds the application context and dispatcher, binds them to an MCP
low-level ``Server`` and runs it over stdio or HTTP SSE.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

import pydantic
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents

from .config import Settings
from .config import get_settings
from .context import AppContext
from .context import create_context
from .exceptions import BookStackError
from .exceptions import ConfigurationError
from .logger_config import configure_logging
from .metrics_config import ensure_metrics_initialized
from .metrics_config import get_metrics_export
from .metrics_config import shutdown_metrics
from .models import HealthCheck
from .models import HealthReport
from .registry import Dispatcher
from .resources import register_all_resources
from .tools import register_all_tools

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """Carries a translated error to the MCP runtime as the text of an error result."""

    def __init__(self, error: BookStackError):
        super().__init__(json.dumps(error.error.model_dump(exclude_none=True), default=str))
        self.error = error


def build_dispatcher(ctx: AppContext) -> Dispatcher:
    dispatcher = Dispatcher(ctx.error_handler)
    register_all_tools(dispatcher, ctx)
    register_all_resources(dispatcher, ctx)
    logger.info(
        "Registered %d tools and %d resources",
        len(dispatcher.list_tools()),
        len(dispatcher.list_resources()),
    )
    return dispatcher


def create_server(dispatcher: Dispatcher, settings: Settings) -> Server:
    """Expose the dispatcher through an MCP low-level server."""
    server = Server(settings.server_name, version=settings.server_version)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
            for tool in dispatcher.list_tools()
        ]

    # Arguments are checked by the validation gate, which knows strict and lenient modes.
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        try:
            result = await dispatcher.call_tool(name, arguments)
        except BookStackError as e:
            raise ToolCallError(e) from e
        return [types.TextContent(type="text", text=item["text"]) for item in result["content"]]

    @server.list_resources()
    async def handle_list_resources() -> list[types.Resource]:
        return [
            types.Resource(uri=r.uri, name=r.name, description=r.description, mimeType=r.mime_type)
            for r in dispatcher.list_resources()
            if not r.is_template
        ]

    @server.list_resource_templates()
    async def handle_list_resource_templates() -> list[types.ResourceTemplate]:
        return [
            types.ResourceTemplate(uriTemplate=r.uri, name=r.name, description=r.description, mimeType=r.mime_type)
            for r in dispatcher.list_resources()
            if r.is_template
        ]

    @server.read_resource()
    async def handle_read_resource(uri: pydantic.AnyUrl) -> list[ReadResourceContents]:
        result = await dispatcher.read_resource(str(uri).rstrip("/"))
        return [ReadResourceContents(content=item["text"], mime_type=item["mimeType"]) for item in result["contents"]]

    return server


async def get_health(ctx: AppContext, dispatcher: Dispatcher) -> HealthReport:
    """Check the BookStack connection and that tools and resources are loaded."""
    connected = await ctx.client.health_check()
    tool_count = len(dispatcher.list_tools())
    resource_count = len(dispatcher.list_resources())
    checks = [
        HealthCheck(
            name="bookstack_connection",
            healthy=connected,
            message=None if connected else f"Cannot reach {ctx.settings.bookstack_base_url}",
        ),
        HealthCheck(name="tools_loaded", healthy=tool_count > 0, message=f"{tool_count} tools"),
        HealthCheck(name="resources_loaded", healthy=resource_count > 0, message=f"{resource_count} resources"),
    ]
    status = "healthy" if all(check.healthy for check in checks) else "unhealthy"
    return HealthReport(status=status, checks=checks)


async def run_stdio(server: Server) -> None:
    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


async def run_sse(server: Server, ctx: AppContext, dispatcher: Dispatcher, host: str, port: int) -> None:
    import uvicorn
    from mcp.server.sse import SseServerTransport
    from starlette.applications import Starlette
    from starlette.requests import Request
    from starlette.responses import JSONResponse
    from starlette.responses import Response
    from starlette.routing import Mount
    from starlette.routing import Route

    sse = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> Response:
        async with sse.connect_sse(request.scope, request.receive, request._send) as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
        return Response()

    async def handle_health(request: Request) -> JSONResponse:
        report = await get_health(ctx, dispatcher)
        return JSONResponse(report.model_dump(), status_code=200 if report.status == "healthy" else 503)

    async def handle_metrics(request: Request) -> Response:
        body, content_type = get_metrics_export()
        return Response(body, media_type=content_type)

    app = Starlette(
        routes=[
            Route("/sse", endpoint=handle_sse, methods=["GET"]),
            Mount("/messages/", app=sse.handle_post_message),
            Route("/health", endpoint=handle_health, methods=["GET"]),
            Route("/metrics", endpoint=handle_metrics, methods=["GET"]),
        ]
    )
    config = uvicorn.Config(app, host=host, port=port, log_level=ctx.settings.log_level.lower())
    await uvicorn.Server(config).serve()


async def serve(settings: Settings, transport: str, host: str, port: int, health_only: bool = False) -> int:
    ctx = create_context(settings)
    try:
        dispatcher = build_dispatcher(ctx)

        if health_only:
            report = await get_health(ctx, dispatcher)
            print(json.dumps(report.model_dump(), indent=2))
            return 0 if report.status == "healthy" else 1

        server = create_server(dispatcher, settings)
        if transport == "stdio":
            logger.info("MCP server running with stdio transport. Waiting for client connection...")
            await run_stdio(server)
        else:
            logger.info("MCP server running with HTTP SSE transport on %s:%s", host, port)
            logger.info("SSE endpoint: http://%s:%s/sse", host, port)
            await run_sse(server, ctx, dispatcher, host, port)
        return 0
    finally:
        await ctx.aclose()
        shutdown_metrics()
        logger.info("BookStack MCP server stopped")


def main():
    """Run the main entry point for the server with argument parsing."""
    parser = argparse.ArgumentParser(description="BookStack MCP Server")
    parser.add_argument(
        "transport",
        choices=["sse", "stdio"],
        default="stdio",
        nargs="?",
        help="Transport: 'sse' for HTTP SSE or 'stdio' for standard I/O (default: stdio)",
    )
    parser.add_argument("--host", default=None, help="Host to bind to for SSE transport (default: SSE_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to for SSE transport (default: SSE_PORT)")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Check the BookStack connection, print a JSON report and exit",
    )
    args = parser.parse_args()

    try:
        settings = get_settings()
    except pydantic.ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    configure_logging(settings)
    ensure_metrics_initialized(settings.enable_metrics)
    logger.info("Starting %s v%s", settings.server_name, settings.server_version)
    logger.info("Configuration: %s", settings.summary())

    if settings.is_production:
        problems = settings.validate_for_production()
        if problems:
            logger.error("Production validation failed: %s", ", ".join(problems))
            sys.exit(2)

    try:
        exit_code = asyncio.run(
            serve(
                settings,
                args.transport,
                args.host or settings.sse_host,
                args.port or settings.sse_port,
                health_only=args.health_check,
            )
        )
    except ConfigurationError as e:
        logger.error(e.user_message)
        sys.exit(2)
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
