"""
Standard MCP transports from the MCP Python SDK, serving the same tools as the
SSE bridge.

GET  /sse            SDK SSE transport; messages are posted to /sse/message/
POST /mcp            streamable HTTP transport

Every tool forwards to the ToolRegistry, so argument validation, retries and
error strings behave exactly as they do on the bridge.
"""

import logging
from typing import Annotated, Callable

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from app.core.config import SERVER_NAME
from app.mcp.registry import ToolRegistry
from app.mcp.tools import (
    BROWSE_DESCRIPTION,
    MULTI_BROWSE_DESCRIPTION,
    MULTI_SEARCH_DESCRIPTION,
    SEARCH_DESCRIPTION,
)

logger = logging.getLogger(__name__)


def build_sdk_server(registry_provider: Callable[[], ToolRegistry]) -> FastMCP:
    """FastMCP server whose tools resolve the registry lazily on each call."""
    server = FastMCP(
        SERVER_NAME,
        host="0.0.0.0",
        sse_path="/sse",
        message_path="/sse/message/",
        streamable_http_path="/mcp",
    )

    async def forward(name: str, arguments: dict) -> str:
        logger.info("[sdk:%s] IN", name)
        return await registry_provider().call(name, arguments)

    @server.tool(description=SEARCH_DESCRIPTION, structured_output=False)
    async def search(query: Annotated[str, Field(description="Search query")]) -> str:
        return await forward("search", {"query": query})

    @server.tool(description=BROWSE_DESCRIPTION, structured_output=False)
    async def browse(
        url: Annotated[str, Field(description="The URL to browse")],
        query: Annotated[str, Field(description="Specific question or summary request")] = "",
    ) -> str:
        return await forward("browse", {"url": url, "query": query})

    @server.tool(description=MULTI_SEARCH_DESCRIPTION, structured_output=False)
    async def multi_search(queries: Annotated[list[str], Field(description="A list of search queries")]) -> str:
        return await forward("multi_search", {"queries": queries})

    @server.tool(description=MULTI_BROWSE_DESCRIPTION, structured_output=False)
    async def multi_browse(
        urls: Annotated[list[str], Field(description="A list of URLs to browse")],
        query: Annotated[str, Field(description="Specific question or summary request")] = "",
    ) -> str:
        return await forward("multi_browse", {"urls": urls, "query": query})

    return server
