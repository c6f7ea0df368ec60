"""
JSON-RPC dispatcher for the MCP bridge.

Replies are never returned to the HTTP caller: they are written onto the
session's event stream as `message` events. initialize and tools/list are
answered before dispatch returns; tools/call runs its handler as a task owned
by the session and writes the result whenever it finishes, so callers must
correlate by request id.

Requests are accepted in any order. In particular tools/call does not require
a prior initialize.
"""

import asyncio
import logging
from typing import Any

from app.core.config import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION
from app.core.errors import ProtocolError, ToolNotFoundError, UnsupportedMethodError
from app.core.session_store import Session
from app.mcp.registry import ToolRegistry
from app.mcp.stream import format_message
from app.schemas.rpc import RPCRequest, rpc_error, rpc_result

logger = logging.getLogger(__name__)

HANDLER_ERROR_CODE = -32000


class Dispatcher:
    SUPPORTED_METHODS = frozenset({"initialize", "notifications/initialized", "tools/list", "tools/call"})

    def __init__(
        self,
        registry: ToolRegistry,
        server_name: str = SERVER_NAME,
        server_version: str = SERVER_VERSION,
        protocol_version: str = PROTOCOL_VERSION,
    ) -> None:
        self.registry = registry
        self.server_info = {"name": server_name, "version": server_version}
        self.protocol_version = protocol_version

    def supports(self, method: str) -> bool:
        return method in self.SUPPORTED_METHODS

    def dispatch(self, session: Session, request: RPCRequest) -> asyncio.Task | None:
        """
        Handle one request for session. Returns the tool task for tools/call on a
        known tool, else None. Raises UnsupportedMethodError for unknown methods.
        """
        logger.info("[protocol:dispatch] session=%s method=%s id=%r", session.id[:8], request.method, request.id)
        if request.method == "initialize":
            self._reply(session, rpc_result(request.id, self.initialize_result()))
        elif request.method == "notifications/initialized":
            pass
        elif request.method == "tools/list":
            self._reply(session, rpc_result(request.id, {"tools": self.registry.list_tools()}))
        elif request.method == "tools/call":
            return self._call_tool(session, request)
        else:
            raise UnsupportedMethodError(request.method)
        return None

    def initialize_result(self) -> dict[str, Any]:
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": dict(self.server_info),
        }

    def _call_tool(self, session: Session, request: RPCRequest) -> asyncio.Task | None:
        name = request.params.get("name")
        if not isinstance(name, str) or self.registry.get(name) is None:
            error = ToolNotFoundError(str(name))
            self._reply(session, rpc_error(request.id, error.code, error.message))
            return None
        return session.spawn(self._run_tool(session, request.id, name, request.params.get("arguments")))

    async def _run_tool(self, session: Session, request_id: Any, name: str, arguments: Any) -> None:
        try:
            text = await self.registry.call(name, arguments)
        except ProtocolError as e:
            self._reply(session, rpc_error(request_id, e.code, e.message))
        except Exception as e:
            logger.exception("[protocol:_run_tool] tool=%s failed", name)
            self._reply(session, rpc_error(request_id, HANDLER_ERROR_CODE, str(e)))
        else:
            self._reply(session, rpc_result(request_id, {"content": [{"type": "text", "text": text}]}))

    @staticmethod
    def _reply(session: Session, payload: dict[str, Any]) -> None:
        session.send(format_message(payload))
