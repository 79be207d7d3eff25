#!/usr/bin/env python3
"""
IBEX 35 MCP Server - stdio transport

MCP protocol wrapper for stdio clients.
Business logic delegated to handlers.py.

Run with: python -m mcp_ibex35.server

Configuration:
- IBEX35_API_URL, IBEX35_API_KEY, IBEX35_TIMEOUT: remote API
- IBEX35_LOG_LEVEL, IBEX35_LOG_FILE: logging (stderr only; stdout carries the protocol)
"""

import asyncio
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .handlers import call_tool as handle_tool
from .logging_config import get_logger, setup_async_logging, shutdown_async_logging
from .tools import get_mcp_tools

logger = get_logger(__name__)

app = Server("ibex35-mcp")


@app.list_tools()  # type: ignore[misc,no-untyped-call]
async def list_tools() -> list[Tool]:
    """List available MCP tools - imported from tools.py (single source of truth)"""
    return get_mcp_tools()


@app.call_tool()  # type: ignore[misc]
async def call_tool(name: str, arguments: Any) -> list[TextContent]:  # noqa: ANN401
    """Handle tool execution - delegates to handlers.py

    Exceptions propagate to the MCP server, which returns them to the
    client as an error-flagged text result.
    """
    result = await handle_tool(name, arguments or {})
    return [TextContent(type="text", text=result)]


async def main() -> None:
    """Run the MCP server"""
    setup_async_logging()
    logger.info("Starting IBEX 35 MCP server (stdio)")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options()
            )
    finally:
        shutdown_async_logging()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
