"""
MCP tools: search, browse, multi_search, multi_browse.

Single-item tools already turn provider failures into readable strings, so the
multi-* tools only need to run them concurrently and join the answers in input
order. An unexpected exception from one item is still contained to its own slot.
"""

import asyncio
import logging

from app.mcp.registry import ToolDescriptor, ToolRegistry
from app.schemas.tools import BrowseInput, MultiBrowseInput, MultiSearchInput, SearchInput
from app.services.search_service import SearchService

logger = logging.getLogger(__name__)

ITEM_ERROR_MESSAGE = "Unexpected error. Please try again."

SEARCH_DESCRIPTION = "Search Google for a query and return brief snippets."
BROWSE_DESCRIPTION = "Browse a webpage and answer a specific query based on its content."
MULTI_SEARCH_DESCRIPTION = "Perform multiple searches in parallel."
MULTI_BROWSE_DESCRIPTION = "Browse multiple webpages in parallel and answer a query."


def _search_block(query: str, result: str) -> str:
    return f"--- search result for [{query}] ---\n{result}\n--- end of search result ---"


def _browse_block(url: str, result: str) -> str:
    return f"--- answer based on [{url}] ---\n{result}\n--- end of answer ---"


def _settled(results: list) -> list[str]:
    out = []
    for r in results:
        if isinstance(r, BaseException):
            logger.error("[tools] batch item failed: %s", r)
            out.append(ITEM_ERROR_MESSAGE)
        else:
            out.append(r)
    return out


def build_registry(service: SearchService) -> ToolRegistry:
    """Registry with the four search/browse tools bound to service."""

    async def search(params: SearchInput) -> str:
        return await service.get_search_results(params.query)

    async def browse(params: BrowseInput) -> str:
        return await service.get_browse_results(params.url, params.query)

    async def multi_search(params: MultiSearchInput) -> str:
        results = await asyncio.gather(
            *(service.get_search_results(q) for q in params.queries), return_exceptions=True
        )
        return "\n\n".join(_search_block(q, r) for q, r in zip(params.queries, _settled(results)))

    async def multi_browse(params: MultiBrowseInput) -> str:
        results = await asyncio.gather(
            *(service.get_browse_results(url, params.query) for url in params.urls), return_exceptions=True
        )
        return "\n\n".join(_browse_block(url, r) for url, r in zip(params.urls, _settled(results)))

    registry = ToolRegistry()
    registry.register(ToolDescriptor(
        name="search",
        description=SEARCH_DESCRIPTION,
        input_model=SearchInput,
        handler=search,
    ))
    registry.register(ToolDescriptor(
        name="browse",
        description=BROWSE_DESCRIPTION,
        input_model=BrowseInput,
        handler=browse,
    ))
    registry.register(ToolDescriptor(
        name="multi_search",
        description=MULTI_SEARCH_DESCRIPTION,
        input_model=MultiSearchInput,
        handler=multi_search,
    ))
    registry.register(ToolDescriptor(
        name="multi_browse",
        description=MULTI_BROWSE_DESCRIPTION,
        input_model=MultiBrowseInput,
        handler=multi_browse,
    ))
    return registry
