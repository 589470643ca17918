"""MCP stdio server forwarding GaaP tool calls as signed HTTP requests."""

import asyncio
import logging
import random
import string
import sys
import time
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import ValidationError

from gaap_mcp.client import AsyncGaapClient, build_tool_request
from gaap_mcp.config import Settings, load_settings
from gaap_mcp.errors import MissingConfigurationError, ToolCallError, UnknownToolError
from gaap_mcp.formatting import format_error, format_result
from gaap_mcp.observability.logging import configure_logging
from gaap_mcp.tools import TOOL_CATALOG, get_tool, missing_required_params

logger = logging.getLogger("gaap.server")

SOURCE_WORKFLOW = "claude-desktop-mcp"
_BASE36 = string.digits + string.ascii_lowercase


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def new_correlation_id() -> str:
    suffix = "".join(random.choices(_BASE36, k=6))
    return f"mcp-{_now_ms()}-{suffix}"


def list_tools() -> list[Tool]:
    return [
        Tool(
            name=tool["name"],
            description=tool["description"],
            inputSchema=tool["input_schema"],
        )
        for tool in TOOL_CATALOG.values()
    ]


async def call_tool(
    client: AsyncGaapClient, name: str, arguments: dict[str, Any] | None
) -> list[TextContent]:
    try:
        get_tool(name)
    except UnknownToolError as exc:
        raise ToolCallError(f"Error: {exc}") from exc

    params = dict(arguments or {})
    missing = missing_required_params(name, params)
    if missing:
        raise ToolCallError(
            f"Error: Missing required parameter(s) for '{name}': {', '.join(missing)}"
        )

    correlation_id = params.get("correlation_id") or new_correlation_id()
    request = build_tool_request(
        tool=name,
        tenant_id=client.credentials.tenant_id,
        params=params,
        correlation_id=correlation_id,
        meta={"source_workflow": SOURCE_WORKFLOW, "request_id": f"mcp-{_now_ms()}"},
    )

    response = await client.invoke_tool(request)
    if not response.get("success"):
        raise ToolCallError(f"Error: {format_error(response)}")

    return [TextContent(type="text", text=format_result(name, response, correlation_id))]


def create_server(settings: Settings, client: AsyncGaapClient | None = None) -> Server:
    server = Server(settings.server_name, version=settings.server_version)
    client = client or AsyncGaapClient(
        credentials=settings.credentials,
        endpoint_url=settings.mcp_url,
        timeout=settings.timeout_seconds,
    )

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        return list_tools()

    # Arguments are forwarded as given; only required fields are checked locally.
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        try:
            return await call_tool(client, name, arguments)
        except ToolCallError:
            raise
        except Exception as exc:
            logger.error(
                "tool_call_failed",
                extra={"event_name": "tool_call_failed", "tool": name},
                exc_info=True,
            )
            raise ToolCallError(f"Error: {type(exc).__name__}: {exc}") from exc

    return server


async def run_server(settings: Settings) -> None:
    server = create_server(settings)
    async with stdio_server() as (read_stream, write_stream):
        logger.info(
            "server_started",
            extra={
                "event_name": "server_started",
                "tenant_id": settings.tenant_id,
                "endpoint": settings.mcp_url,
            },
        )
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    try:
        settings = load_settings()
    except MissingConfigurationError as exc:
        configure_logging()
        logger.error(
            str(exc),
            extra={"event_name": "missing_configuration", "missing": exc.missing},
        )
        sys.exit(1)
    except ValidationError as exc:
        configure_logging()
        logger.error(
            "invalid_configuration",
            extra={"event_name": "invalid_configuration"},
            exc_info=exc,
        )
        sys.exit(1)

    configure_logging(settings.log_level)
    try:
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.error(
            "server_failed", extra={"event_name": "server_failed"}, exc_info=True
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
