"""
API route aggregator: system endpoints; the MCP bridge lives in app.mcp.server.
"""

import logging

from fastapi import APIRouter, Depends

from app.core.session_store import SessionRegistry
from app.mcp.protocol import Dispatcher
from app.mcp.server import get_dispatcher, get_sessions

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Search MCP server running", "sse": "/mcp/sse"}


@router.get("/health", tags=["system"])
def health(
    registry: SessionRegistry = Depends(get_sessions),
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> dict:
    """Liveness plus active session count and registered tools."""
    return {"ok": True, "sessions": len(registry), "tools": dispatcher.registry.names()}
