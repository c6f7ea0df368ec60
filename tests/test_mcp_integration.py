"""
Integration tests for the MCP SSE bridge endpoints.

Dependencies are overridden with a fresh session registry and a dispatcher over
fake tools, so tests do not need Serper, Jina or MiniMax.
"""

import json
import time

import pytest
from fastapi.testclient import TestClient

from app.core.session_store import Session, SessionRegistry
from app.main import app
from app.mcp.protocol import Dispatcher
from app.mcp.registry import ToolDescriptor, ToolRegistry
from app.mcp.server import get_dispatcher, get_sessions
from app.mcp.stream import format_event
from app.schemas.tools import SearchInput


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def client(registry: SessionRegistry):
    async def search(params: SearchInput) -> str:
        return f"results for {params.query}"

    tools = ToolRegistry()
    tools.register(ToolDescriptor("search", "Search Google for a query and return brief snippets.", SearchInput, search))
    dispatcher = Dispatcher(tools)

    app.dependency_overrides[get_sessions] = lambda: registry
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def session(registry: SessionRegistry) -> Session:
    return registry.open()


def replies(session: Session) -> list[dict]:
    return [json.loads(frame.split("data: ", 1)[1]) for frame in session.pending()]


def post(client: TestClient, session_id: str | None, body):
    params = {"sessionId": session_id} if session_id is not None else {}
    content = body if isinstance(body, (str, bytes)) else json.dumps(body)
    return client.post("/mcp/messages", params=params, content=content, headers={"Content-Type": "application/json"})


def test_missing_session_id_returns_400(client: TestClient) -> None:
    response = post(client, None, {"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    assert response.status_code == 400


@pytest.mark.parametrize(
    "body",
    [
        {"jsonrpc": "2.0", "id": 1, "method": "tools/list"},
        {"jsonrpc": "2.0", "id": 1, "method": "no/such/method"},
        "not json at all",
    ],
)
def test_unknown_session_returns_404_regardless_of_payload(client: TestClient, body) -> None:
    response = post(client, "00000000-0000-0000-0000-000000000000", body)
    assert response.status_code == 404


def test_closed_session_returns_404(client: TestClient, registry: SessionRegistry, session: Session) -> None:
    registry.close(session.id)
    response = post(client, session.id, {"jsonrpc": "2.0", "id": 1, "method": "initialize"})
    assert response.status_code == 404


def test_initialize_is_accepted_and_replied_on_stream(client: TestClient, session: Session) -> None:
    response = post(client, session.id, {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}})
    assert response.status_code == 202
    assert response.text == "Accepted"
    [reply] = replies(session)
    assert reply["id"] == 1
    assert reply["result"]["protocolVersion"] == "2024-11-05"
    assert reply["result"]["serverInfo"]["name"] == "MiniMax Search MCP Server"


def test_initialized_notification_is_accepted_silently(client: TestClient, session: Session) -> None:
    response = post(client, session.id, {"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert response.status_code == 202
    assert replies(session) == []


def test_tools_list_is_delivered_on_stream(client: TestClient, session: Session) -> None:
    response = post(client, session.id, {"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
    assert response.status_code == 202
    [reply] = replies(session)
    assert reply["result"]["tools"] == [
        {
            "name": "search",
            "description": "Search Google for a query and return brief snippets.",
            "inputSchema": {
                "type": "object",
                "properties": {"query": {"type": "string", "description": "Search query"}},
                "required": ["query"],
            },
        }
    ]


def test_unknown_tool_is_accepted_with_rpc_error(client: TestClient, session: Session) -> None:
    body = {"jsonrpc": "2.0", "id": 5, "method": "tools/call", "params": {"name": "teleport", "arguments": {}}}
    response = post(client, session.id, body)
    assert response.status_code == 202
    assert replies(session) == [
        {"jsonrpc": "2.0", "id": 5, "error": {"code": -32601, "message": "Tool not found"}}
    ]


def test_unsupported_method_returns_501(client: TestClient, session: Session) -> None:
    response = post(client, session.id, {"jsonrpc": "2.0", "id": 3, "method": "resources/list"})
    assert response.status_code == 501
    assert replies(session) == []


def test_unparseable_body_returns_400(client: TestClient, session: Session) -> None:
    response = post(client, session.id, "{broken")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == -32700


@pytest.mark.parametrize(
    "body",
    [
        {"jsonrpc": "2.0", "id": 1, "method": "tools/list", "params": ["not", "an", "object"]},
        {"jsonrpc": "2.0", "id": 1},
        ["batch", "not", "supported"],
    ],
)
def test_well_formed_json_that_is_not_a_request_returns_invalid_request(
    client: TestClient, session: Session, body
) -> None:
    response = post(client, session.id, body)
    assert response.status_code == 400
    assert response.json() == {"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "Invalid Request"}}
    assert replies(session) == []


def test_health_reports_sessions_and_tools(client: TestClient, session: Session) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "sessions": 1, "tools": ["search"]}


def test_sse_open_emits_endpoint_with_session_url(
    client: TestClient, registry: SessionRegistry, monkeypatch: pytest.MonkeyPatch
) -> None:
    """The endpoint event carries an absolute submission URL for the new session."""
    async def one_frame(session, registry, endpoint, heartbeat_interval, is_disconnected=None):
        yield format_event("endpoint", endpoint)

    monkeypatch.setattr("app.mcp.server.event_stream", one_frame)
    response = client.get("/mcp/sse")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    prefix = "event: endpoint\ndata: http://testserver/mcp/messages?sessionId="
    assert response.text.startswith(prefix)
    assert response.text.endswith("\n\n")
    session_id = response.text[len(prefix):-2]
    assert len(registry) == 1
    assert session_id in registry


def test_tools_call_result_arrives_on_stream_after_202(client: TestClient, session: Session) -> None:
    """The tool runs after the 202, so the client is kept open for its event loop."""
    body = {"jsonrpc": "2.0", "id": 9, "method": "tools/call", "params": {"name": "search", "arguments": {"query": "x"}}}
    with client:
        response = post(client, session.id, body)
        assert response.status_code == 202
        frames: list[dict] = []
        deadline = time.monotonic() + 2
        while not frames and time.monotonic() < deadline:
            time.sleep(0.01)
            frames = replies(session)
    assert frames == [
        {"jsonrpc": "2.0", "id": 9, "result": {"content": [{"type": "text", "text": "results for x"}]}}
    ]
