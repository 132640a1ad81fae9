from __future__ import annotations

import asyncio
import logging
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from devassist_common.errors import ConfigError
from devassist_config.settings import init_runtime, load_credentials
from devassist_mcp.registry import ToolError, ToolRegistry
from devassist_mcp.tools import build_registry, build_services

logger = logging.getLogger(__name__)

SERVER_NAME = "Developer Assistant MCP"


def create_server(registry: ToolRegistry) -> Server:
    """
    MCP server over a prebuilt registry.

    Tool failures (bad parameters, upstream errors) come back as tool results
    with isError set and a JSON error envelope as text; the server keeps
    serving.
    """
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=d.name, description=d.description, inputSchema=d.input_schema())
            for d in registry.descriptors()
        ]

    # arguments are validated by the registry so failures carry the invalid_params envelope
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        try:
            text = registry.call(name, arguments or {})
        except ToolError as e:
            logger.warning("Tool %s failed: %s (%s)", name, e.code, e.message)
            # the SDK turns a raised exception into an isError result carrying str(exc)
            raise RuntimeError(e.to_text()) from e
        return [types.TextContent(type="text", text=text)]

    return server


async def serve(registry: ToolRegistry) -> None:
    server = create_server(registry)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Listening on stdio (%d tools)", len(registry.names()))
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("Input stream closed; shutting down")


def main() -> None:
    # Entry points (console_scripts) call main() directly, so we must perform
    # runtime initialization here (dotenv + logging).
    init_runtime()

    try:
        services = build_services(load_credentials())
    except ConfigError as e:
        logger.error("Startup aborted: %s", e)
        raise SystemExit(2) from e

    logger.info("Registering tools")
    registry = build_registry(services)

    try:
        asyncio.run(serve(registry))
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")


if __name__ == "__main__":
    main()
