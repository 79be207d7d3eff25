#!/usr/bin/env python3
"""
IBEX 35 MCP Server - HTTP/SSE transport

Network server for multi-client access.
Same MCP protocol as stdio server, different transport.
Business logic delegated to handlers.py.

Run with: python -m mcp_ibex35.server_http

Configuration:
- PORT: Server port (default: 5001)
- HOST: Bind address (default: 127.0.0.1)
- IBEX35_API_URL, IBEX35_API_KEY, IBEX35_TIMEOUT: remote API
- IBEX35_LOG_LEVEL, IBEX35_LOG_FILE: logging
"""

import os
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.types import TextContent, Tool
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from .handlers import call_tool as handle_tool
from .logging_config import get_logger, setup_async_logging, shutdown_async_logging
from .tools import get_mcp_tools

logger = get_logger(__name__)

# Configuration
DEFAULT_PORT = 5001


def get_port() -> int:
    """Get server port from environment or use default"""
    port_str = os.environ.get("PORT", str(DEFAULT_PORT))
    try:
        return int(port_str)
    except ValueError:
        msg = f"Invalid PORT value: {port_str}"
        raise ValueError(msg) from None


# MCP Server instance (reuses same logic as stdio server)
mcp_server = Server("ibex35-mcp")

# SSE transport for multi-client support
sse_transport = SseServerTransport("/messages/")


@mcp_server.list_tools()  # type: ignore[misc,no-untyped-call]
async def list_tools() -> list[Tool]:
    """List available MCP tools - imported from tools.py (single source of truth)"""
    return get_mcp_tools()


@mcp_server.call_tool()  # type: ignore[misc]
async def call_tool(name: str, arguments: Any) -> list[TextContent]:  # noqa: ANN401
    """Handle tool execution - delegates to handlers.py"""
    result = await handle_tool(name, arguments or {})
    return [TextContent(type="text", text=result)]


# Starlette endpoint handlers

async def handle_ping(_request: Request) -> JSONResponse:
    """Health check endpoint"""
    return JSONResponse({"status": "ok"})


async def handle_shutdown(_request: Request) -> JSONResponse:
    """Graceful shutdown endpoint"""
    # Send SIGTERM to self for graceful shutdown
    os.kill(os.getpid(), signal.SIGTERM)
    return JSONResponse({"status": "shutting down"})


async def handle_sse(request: Request) -> Response:
    """
    SSE endpoint for MCP protocol.

    Creates a new SSE connection for each client, runs the MCP server
    with the connection streams, and returns when client disconnects.
    """
    client_addr = request.client.host if request.client else "unknown"
    logger.info("New SSE connection from %s", client_addr)

    async with sse_transport.connect_sse(
        request.scope, request.receive, request._send
    ) as streams:
        logger.info("SSE connected, running MCP server loop")
        await mcp_server.run(
            streams[0], streams[1], mcp_server.create_initialization_options()
        )
        logger.info("SSE disconnected from %s", client_addr)

    # Return empty response to avoid NoneType error (per MCP docs)
    return Response(
        headers={
            "Cache-Control": "no-store",
            "X-Content-Type-Options": "nosniff",
        }
    )


@asynccontextmanager
async def lifespan(_app: Starlette) -> AsyncIterator[None]:
    setup_async_logging()
    logger.info("Starting IBEX 35 MCP server (HTTP/SSE)")
    try:
        yield
    finally:
        shutdown_async_logging()


# Starlette application
app = Starlette(
    routes=[
        Route("/ping", endpoint=handle_ping, methods=["GET"]),
        Route("/shutdown", endpoint=handle_shutdown, methods=["POST"]),
        Route("/sse", endpoint=handle_sse, methods=["GET"]),
        Mount("/messages/", app=sse_transport.handle_post_message),
    ],
    lifespan=lifespan,
)


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=os.environ.get("HOST", "127.0.0.1"), port=get_port())


if __name__ == "__main__":
    main()
