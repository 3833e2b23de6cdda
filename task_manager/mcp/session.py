"""
MCP Session Management

One Session per connected client. Each session walks the state machine

    Connecting -> Active -> Closing -> Closed

(Connecting -> Closing is allowed for clients that leave before the
handshake). Sessions only track protocol state; every session talks to the
same process-wide task store.
"""

import asyncio
import time
import uuid
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set, Union
import logging

from task_manager.mcp.errors import InvalidRequest, ProtocolError
from task_manager.mcp.protocol import Negotiation
from task_manager.utils.logger import get_logger
from task_manager.utils.metrics import MetricsCollector

logger = logging.getLogger(__name__)
session_logger = get_logger("task_manager.sessions")

RequestId = Union[int, str]

TASKS_CHANGED_NOTIFICATION = "notifications/tasks/changed"


class SessionState(str, Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


_TRANSITIONS = {
    SessionState.CONNECTING: {SessionState.ACTIVE, SessionState.CLOSING},
    SessionState.ACTIVE: {SessionState.CLOSING},
    SessionState.CLOSING: {SessionState.CLOSED},
    SessionState.CLOSED: set(),
}


class UnknownSession(ProtocolError):
    """Session id that the manager does not know (or no longer knows)"""


class Session:
    """Server-side state of one client connection."""

    def __init__(self, transport: str = "http", session_id: Optional[str] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.session_id = session_id or uuid.uuid4().hex
        self.transport = transport
        self.state = SessionState.CONNECTING
        self.protocol_version: Optional[str] = None
        self.negotiated_capabilities: FrozenSet[str] = frozenset()
        self.client_info: Dict[str, Any] = {}
        self.client_capabilities: Dict[str, Any] = {}

        self._clock = clock
        self.created_at = clock()
        self.last_activity = self.created_at

        self.in_flight: Set[RequestId] = set()
        self._drained = asyncio.Event()
        self._drained.set()

        self.outbox: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue()
        self.stream_attached = False

    def __repr__(self) -> str:
        return f"<Session {self.session_id} {self.transport} {self.state.value}>"

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def touch(self) -> None:
        self.last_activity = self._clock()

    def transition(self, new_state: SessionState) -> None:
        """Move to new_state, rejecting moves the state machine does not allow."""
        if new_state not in _TRANSITIONS[self.state]:
            raise ProtocolError(
                f"Invalid session transition {self.state.value} -> {new_state.value}",
                details={"session_id": self.session_id}
            )
        logger.debug(f"Session {self.session_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def activate(self, negotiation: Negotiation) -> None:
        """Record the handshake outcome and start accepting operations."""
        self.transition(SessionState.ACTIVE)
        self.protocol_version = negotiation.protocol_version
        self.negotiated_capabilities = negotiation.capabilities
        self.client_info = dict(negotiation.client_info)
        self.client_capabilities = dict(negotiation.client_capabilities)
        self.touch()

    def begin_request(self, request_id: RequestId) -> None:
        """
        Register an incoming request by its correlation token.

        Raises:
            ProtocolError: the session no longer accepts requests
            InvalidRequest: the token is already in flight in this session
        """
        if self.state in (SessionState.CLOSING, SessionState.CLOSED):
            raise ProtocolError(
                "Session is closing",
                details={"session_id": self.session_id, "state": self.state.value}
            )
        if request_id in self.in_flight:
            raise InvalidRequest(
                f"Request id {request_id!r} is already in flight",
                details={"id": request_id}
            )
        self.in_flight.add(request_id)
        self._drained.clear()
        self.touch()

    def end_request(self, request_id: RequestId) -> None:
        self.in_flight.discard(request_id)
        if not self.in_flight:
            self._drained.set()
        self.touch()

    async def wait_drained(self) -> None:
        """Wait until every in-flight request has finished."""
        await self._drained.wait()

    def is_idle(self, now: float, timeout: float) -> bool:
        if self.in_flight or self.stream_attached:
            return False
        return now - self.last_activity >= timeout

    def attach_stream(self) -> None:
        self.stream_attached = True

    def detach_stream(self) -> None:
        self.stream_attached = False
        self.touch()

    def deliver(self, message: Dict[str, Any]) -> bool:
        """
        Queue a message for the session's stream.

        Returns False (and drops the message) when nothing is listening,
        e.g. the client disconnected while the request was running.
        """
        if self.state is SessionState.CLOSED or not self.stream_attached:
            logger.debug(f"Session {self.session_id}: dropping undeliverable message")
            return False
        self.outbox.put_nowait(message)
        return True

    async def next_outbound(self) -> Optional[Dict[str, Any]]:
        """Next queued message, or None once the session is closed."""
        return await self.outbox.get()


class SessionManager:
    """
    Tracks every live session.

    Sessions are independent: closing one never affects another, and the
    task store outlives all of them.
    """

    def __init__(self, idle_timeout: float = 300.0, metrics: Optional[MetricsCollector] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.idle_timeout = idle_timeout
        self.metrics = metrics or MetricsCollector()
        self._clock = clock
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def active_count(self) -> int:
        return sum(1 for session in self._sessions.values() if session.is_active)

    def create_session(self, transport: str = "http") -> Session:
        """Create a session in the Connecting state."""
        session = Session(transport=transport, clock=self._clock)
        self._sessions[session.session_id] = session
        self.metrics.session_opened()
        session_logger.info(
            "session_created",
            session_id=session.session_id,
            transport=transport,
            open_sessions=len(self._sessions)
        )
        return session

    def get_session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSession("Unknown session", details={"session_id": session_id})
        return session

    def activate(self, session: Session, negotiation: Negotiation) -> None:
        session.activate(negotiation)
        session_logger.info(
            "session_activated",
            session_id=session.session_id,
            protocol_version=negotiation.protocol_version,
            client=negotiation.client_info.get("name")
        )

    async def close_session(self, session_id: str, reason: str = "client") -> bool:
        """
        Close a session: stop accepting requests, let in-flight requests
        finish, then release it.

        Returns:
            False if the session was not known
        """
        session = self._sessions.get(session_id)
        if session is None:
            return False

        if session.state in (SessionState.CONNECTING, SessionState.ACTIVE):
            session.transition(SessionState.CLOSING)

        await session.wait_drained()

        # A concurrent close may already have finished the job.
        if session.state is SessionState.CLOSED:
            return True

        session.transition(SessionState.CLOSED)
        session.detach_stream()
        session.outbox.put_nowait(None)
        self._sessions.pop(session_id, None)
        self.metrics.session_closed()
        session_logger.info(
            "session_closed",
            session_id=session_id,
            reason=reason,
            open_sessions=len(self._sessions)
        )
        return True

    def discard(self, session: Session) -> None:
        """Drop a session that never completed its handshake."""
        if session.state is SessionState.CONNECTING:
            session.transition(SessionState.CLOSING)
        if session.state is SessionState.CLOSING and not session.in_flight:
            session.transition(SessionState.CLOSED)
        if self._sessions.pop(session.session_id, None) is not None:
            self.metrics.session_closed()
            session_logger.info("session_closed", session_id=session.session_id, reason="handshake_failed")

    async def reap_idle(self, now: Optional[float] = None) -> List[str]:
        """
        Close HTTP sessions idle longer than the timeout. A session with an
        open event stream is never idle.

        WebSocket sessions enforce the timeout on their own receive loop.
        """
        now = self._clock() if now is None else now
        expired = [
            session
            for session in self._sessions.values()
            if session.transport == "http" and session.is_idle(now, self.idle_timeout)
        ]
        for session in expired:
            session_logger.warning(
                "session_expired",
                session_id=session.session_id,
                idle_seconds=round(now - session.last_activity, 1)
            )
            await self.close_session(session.session_id, reason="idle_timeout")
        return [session.session_id for session in expired]

    async def run_reaper(self, interval: float) -> None:
        """Background loop reclaiming abandoned sessions."""
        while True:
            await asyncio.sleep(interval)
            try:
                reaped = await self.reap_idle()
            except Exception:
                logger.exception("Idle session sweep failed")
                continue
            if reaped:
                logger.info(f"Reaped {len(reaped)} idle sessions")

    def broadcast(self, method: str, params: Dict[str, Any]) -> int:
        """Send a notification to every active session with an open stream."""
        notification = {"jsonrpc": "2.0", "method": method, "params": params}
        delivered = 0
        for session in list(self._sessions.values()):
            if session.is_active and session.deliver(dict(notification)):
                delivered += 1
        return delivered

    def handle_task_event(self, event: Dict[str, Any]) -> None:
        """TaskEventPublisher subscriber relaying changes to clients."""
        self.broadcast(
            TASKS_CHANGED_NOTIFICATION,
            {"event": event["type"], "task": event["data"]}
        )

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close_session(session_id, reason="shutdown")
