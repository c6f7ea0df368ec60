"""
Tests for the session registry and the per-session SSE stream.
"""

import asyncio

from app.core.session_store import Session, SessionRegistry
from app.mcp.stream import KEEP_ALIVE, event_stream, format_event, format_message

ENDPOINT = "http://testserver/mcp/messages?sessionId=abc"


def test_open_registers_unique_sessions() -> None:
    registry = SessionRegistry()
    ids = {registry.open().id for _ in range(50)}
    assert len(ids) == 50
    assert len(registry) == 50
    assert all(session_id in registry for session_id in ids)


def test_close_removes_and_closes_session() -> None:
    registry = SessionRegistry()
    session = registry.open()
    registry.close(session.id)
    assert session.id not in registry
    assert registry.get(session.id) is None
    assert session.closed
    # idempotent, and unknown ids are ignored
    registry.close(session.id)
    registry.close("never-existed")


def test_close_all() -> None:
    registry = SessionRegistry()
    sessions = [registry.open() for _ in range(3)]
    registry.close_all()
    assert len(registry) == 0
    assert all(s.closed for s in sessions)


def test_send_after_close_is_dropped() -> None:
    session = Session("s1")
    assert session.send("event: message\ndata: {}\n\n")
    session.close()
    assert not session.send("event: message\ndata: {}\n\n")
    assert session.pending() == ["event: message\ndata: {}\n\n"]


def test_format_helpers() -> None:
    assert format_event("endpoint", "/x") == "event: endpoint\ndata: /x\n\n"
    assert format_message({"jsonrpc": "2.0", "id": 1, "result": {}}) == (
        'event: message\ndata: {"jsonrpc": "2.0", "id": 1, "result": {}}\n\n'
    )


def test_stream_sends_endpoint_before_first_heartbeat() -> None:
    async def run() -> tuple[list[str], bool]:
        registry = SessionRegistry()
        session = registry.open()
        stream = event_stream(session, registry, ENDPOINT, heartbeat_interval=0.01)
        frames = [await stream.__anext__(), await stream.__anext__()]
        still_open = session.id in registry
        await stream.aclose()
        return frames, still_open and session.id not in registry

    frames, removed_on_close = asyncio.run(run())
    assert frames == [f"event: endpoint\ndata: {ENDPOINT}\n\n", KEEP_ALIVE]
    assert removed_on_close


def test_stream_delivers_queued_messages() -> None:
    async def run() -> list[str]:
        registry = SessionRegistry()
        session = registry.open()
        stream = event_stream(session, registry, ENDPOINT, heartbeat_interval=5)
        frames = [await stream.__anext__()]
        session.send(format_message({"jsonrpc": "2.0", "id": 1, "result": {}}))
        frames.append(await stream.__anext__())
        await stream.aclose()
        return frames

    frames = asyncio.run(run())
    assert frames[0].startswith("event: endpoint\n")
    assert frames[1].startswith("event: message\n")


def test_stream_ends_and_unregisters_when_client_gone() -> None:
    async def gone() -> bool:
        return True

    async def run() -> tuple[list[str], Session, SessionRegistry]:
        registry = SessionRegistry()
        session = registry.open()
        frames = [f async for f in event_stream(session, registry, ENDPOINT, 0.01, is_disconnected=gone)]
        return frames, session, registry

    frames, session, registry = asyncio.run(run())
    assert frames == [f"event: endpoint\ndata: {ENDPOINT}\n\n"]
    assert session.id not in registry
    assert session.closed


def test_heartbeat_keeps_schedule_while_messages_flow() -> None:
    """A busy session still gets keep-alives, not only an idle one."""
    async def run() -> list[str]:
        registry = SessionRegistry()
        session = registry.open()
        stream = event_stream(session, registry, ENDPOINT, heartbeat_interval=0.05)
        await stream.__anext__()

        async def produce() -> None:
            for i in range(40):
                session.send(format_message({"jsonrpc": "2.0", "id": i, "result": {}}))
                await asyncio.sleep(0.01)

        producer = asyncio.create_task(produce())
        frames: list[str] = []
        while sum(f.startswith("event: message") for f in frames) < 20:
            frames.append(await stream.__anext__())
        producer.cancel()
        await stream.aclose()
        return frames

    frames = asyncio.run(run())
    assert KEEP_ALIVE in frames
