"""
In-memory SSE session store. Keyed by session_id; nothing survives a restart.

A Session owns the outbound queue its event stream drains and the tool tasks
started on its behalf. Closing a session cancels those tasks and makes further
writes no-ops, so late results for a gone client are dropped.
"""

import asyncio
import logging
import uuid
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class Session:
    def __init__(self, session_id: str) -> None:
        self.id = session_id
        self.closed = False
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._tasks: set[asyncio.Task] = set()

    def send(self, frame: str) -> bool:
        """Queue a pre-framed SSE chunk. Returns False if the session is already closed."""
        if self.closed:
            logger.info("[session:send] dropped frame for closed session=%s", self.id[:8])
            return False
        self._queue.put_nowait(frame)
        return True

    async def next_frame(self, timeout: float) -> str | None:
        """Next queued frame, or None if nothing arrived within timeout."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

    def pending(self) -> list[str]:
        """Drain whatever is queued right now without waiting."""
        frames = []
        while not self._queue.empty():
            frames.append(self._queue.get_nowait())
        return frames

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run coro as a task owned by this session; it is cancelled when the session closes."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def tasks(self) -> set[asyncio.Task]:
        return set(self._tasks)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for task in list(self._tasks):
            task.cancel()
        logger.info("[session:close] session=%s cancelled_tasks=%d", self.id[:8], len(self._tasks))


class SessionRegistry:
    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def open(self) -> Session:
        session_id = str(uuid.uuid4())
        while session_id in self._sessions:
            session_id = str(uuid.uuid4())
        session = Session(session_id)
        self._sessions[session_id] = session
        logger.info("[session_store:open] session=%s active=%d", session_id[:8], len(self._sessions))
        return session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> None:
        """Remove the session, then close it. Unknown ids are ignored."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.close()
        logger.info("[session_store:close] session=%s active=%d", session_id[:8], len(self._sessions))

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
