"""
Server-Sent Events framing and the per-session event stream.
"""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable

from app.core.session_store import Session, SessionRegistry

logger = logging.getLogger(__name__)

KEEP_ALIVE = ": keep-alive\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


def format_message(payload: dict[str, Any]) -> str:
    """A JSON-RPC payload framed as a `message` event."""
    return format_event("message", json.dumps(payload))


async def event_stream(
    session: Session,
    registry: SessionRegistry,
    endpoint_url: str,
    heartbeat_interval: float,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
) -> AsyncIterator[str]:
    """
    Yield the endpoint event, then queued messages, with a keep-alive comment
    every heartbeat_interval seconds whether or not messages are flowing. Each
    heartbeat also checks the client connection. The session is removed from
    the registry when the stream ends for any reason.
    """
    loop = asyncio.get_running_loop()
    try:
        yield format_event("endpoint", endpoint_url)
        next_beat = loop.time() + heartbeat_interval
        while not session.closed:
            frame = await session.next_frame(max(0.0, next_beat - loop.time()))
            if frame is not None:
                yield frame
                if loop.time() < next_beat:
                    continue
            if is_disconnected is not None and await is_disconnected():
                logger.info("[stream] session=%s client gone at heartbeat", session.id[:8])
                break
            yield KEEP_ALIVE
            next_beat = loop.time() + heartbeat_interval
    finally:
        registry.close(session.id)
