"""
MCP bridge over SSE: stateful JSON-RPC for pure MCP clients.

GET  /mcp/sse       opens an event stream. The first event is `endpoint`, whose
                    data is the URL to POST JSON-RPC messages to for this session.
POST /mcp/messages  accepts one JSON-RPC message for ?sessionId=<id> and answers
                    202 right away; the JSON-RPC reply arrives on the stream.
"""

import json
import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import ValidationError

from app.agent.llm import CompletionClient
from app.core.config import HEARTBEAT_INTERVAL, MINIMAX_API_KEY, SERPER_API_KEY
from app.core.errors import MissingSessionError, SessionNotFoundError, TransportError
from app.core.session_store import SessionRegistry
from app.mcp.protocol import Dispatcher
from app.mcp.stream import SSE_HEADERS, event_stream
from app.mcp.tools import build_registry
from app.schemas.rpc import RPCRequest, rpc_error
from app.services.answerer import Answerer
from app.services.search_service import SearchService
from app.services.web_client import WebClient

logger = logging.getLogger(__name__)

mcp_router = APIRouter(tags=["mcp"])

# session_id -> Session, shared by every request in this process
sessions = SessionRegistry()


def get_sessions() -> SessionRegistry:
    return sessions


@lru_cache
def get_dispatcher() -> Dispatcher:
    """Dispatcher wired to the live search, reader and completion providers."""
    if not MINIMAX_API_KEY or not SERPER_API_KEY:
        logger.error(
            "[mcp] Missing credentials. MINIMAX_API_KEY: %s, SERPER_API_KEY: %s",
            "SET" if MINIMAX_API_KEY else "MISSING",
            "SET" if SERPER_API_KEY else "MISSING",
        )
    service = SearchService(web=WebClient(), answerer=Answerer(CompletionClient()))
    return Dispatcher(build_registry(service))


@mcp_router.get(
    "/sse",
    summary="MCP: open event stream",
    description="Server-Sent Events stream. Emits `endpoint` with the message URL, then `message` events and keep-alive comments.",
)
async def mcp_sse(request: Request, registry: SessionRegistry = Depends(get_sessions)) -> StreamingResponse:
    session = registry.open()
    endpoint = str(request.url_for("mcp_messages").include_query_params(sessionId=session.id))
    logger.info("[mcp:sse] session=%s opened", session.id[:8])
    return StreamingResponse(
        event_stream(session, registry, endpoint, HEARTBEAT_INTERVAL, request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@mcp_router.post(
    "/messages",
    name="mcp_messages",
    status_code=202,
    summary="MCP: submit JSON-RPC message",
    description="Routes a JSON-RPC message to the session's dispatcher. 202 when accepted; the reply is delivered on the stream.",
)
async def mcp_messages(
    request: Request,
    sessionId: str = "",
    registry: SessionRegistry = Depends(get_sessions),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    try:
        if not sessionId:
            raise MissingSessionError()
        session = registry.get(sessionId)
        if session is None:
            raise SessionNotFoundError(sessionId)
    except TransportError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.info("[mcp:messages] unparseable body for session=%s: %s", sessionId[:8], e)
        return JSONResponse(rpc_error(None, -32700, "Parse error"), status_code=400)
    try:
        message = RPCRequest.model_validate(body)
    except ValidationError as e:
        logger.info("[mcp:messages] invalid request for session=%s: %s", sessionId[:8], e)
        return JSONResponse(rpc_error(None, -32600, "Invalid Request"), status_code=400)

    try:
        dispatcher.dispatch(session, message)
    except TransportError as e:
        logger.info("[mcp:messages] session=%s rejected method=%s", sessionId[:8], message.method)
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return PlainTextResponse("Accepted", status_code=202)
