"""
MCP Request Dispatcher

Routes JSON-RPC messages of one session to their method handlers while
enforcing the session state machine. Every failure is turned into a
JSON-RPC error response for the request that caused it; nothing raised
while serving a request escapes to the transport.
"""

from typing import Any, Awaitable, Callable, Dict, Optional
import logging

from pydantic import ValidationError

from task_manager.mcp.errors import (
    InternalError,
    InvalidParams,
    InvalidRequest,
    McpError,
    MethodNotFound,
    ParseError,
    ProtocolError,
    create_error_response,
    create_result_response,
)
from task_manager.mcp.protocol import ServerIdentity, negotiate
from task_manager.mcp.server import MCPServer
from task_manager.mcp.session import Session, SessionManager, SessionState
from task_manager.schemas.jsonrpc import CallToolParams, JsonRpcRequest

logger = logging.getLogger(__name__)

INITIALIZE = "initialize"
PING = "ping"

# Methods a session may call before the handshake completes
PRE_INITIALIZE_METHODS = frozenset({INITIALIZE, PING})

MethodHandler = Callable[[Session, Dict[str, Any]], Awaitable[Dict[str, Any]]]


def parse_message(raw: Any) -> JsonRpcRequest:
    """
    Validate a decoded JSON document as a JSON-RPC message.

    Raises:
        InvalidRequest: not a single JSON-RPC 2.0 request or notification
    """
    if not isinstance(raw, dict):
        raise InvalidRequest("Expected a single JSON-RPC message object")
    try:
        return JsonRpcRequest.model_validate(raw)
    except ValidationError as e:
        raise InvalidRequest(
            "Invalid JSON-RPC message",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)}
        )


def parse_error_response(error: Exception) -> Dict[str, Any]:
    """Response for a body that is not valid JSON"""
    return create_error_response(None, ParseError(f"Parse error: {error}"))


class RequestDispatcher:
    """Per-session JSON-RPC routing over a fixed method table."""

    def __init__(self, registry: MCPServer, sessions: SessionManager, identity: ServerIdentity):
        self.registry = registry
        self.sessions = sessions
        self.identity = identity
        self.methods: Dict[str, MethodHandler] = {
            INITIALIZE: self._initialize,
            PING: self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    async def handle(self, session: Session, message: JsonRpcRequest) -> Optional[Dict[str, Any]]:
        """
        Serve one message for a session.

        Returns:
            The JSON-RPC response, or None for notifications
        """
        session.touch()

        if message.is_notification:
            self._handle_notification(session, message)
            return None

        request_id = message.id
        try:
            session.begin_request(request_id)
        except McpError as e:
            return create_error_response(request_id, e)

        try:
            self._check_state(session, message.method)
            handler = self.methods.get(message.method)
            if handler is None:
                raise MethodNotFound(
                    f"Method not found: {message.method}",
                    details={"method": message.method}
                )
            result = await handler(session, message.params or {})
            return create_result_response(request_id, result)
        except McpError as e:
            logger.info(f"Session {session.session_id}: {message.method} failed ({e.kind}): {e.message}")
            return create_error_response(request_id, e)
        except Exception as e:
            logger.exception(f"Session {session.session_id}: unhandled error in {message.method}")
            return create_error_response(request_id, InternalError(f"Internal error: {str(e)}"))
        finally:
            session.end_request(request_id)

    def _check_state(self, session: Session, method: str) -> None:
        if session.state is SessionState.CONNECTING and method not in PRE_INITIALIZE_METHODS:
            raise ProtocolError(
                "Session not initialized",
                details={"session_id": session.session_id, "method": method}
            )
        if session.state is SessionState.ACTIVE and method == INITIALIZE:
            raise ProtocolError(
                "Session already initialized",
                details={"session_id": session.session_id}
            )

    def _handle_notification(self, session: Session, message: JsonRpcRequest) -> None:
        if message.method == "notifications/initialized":
            logger.debug(f"Session {session.session_id}: client reported initialized")
        elif message.method == "notifications/cancelled":
            # Store operations cannot be aborted mid-mutation; the result is
            # still produced and the client ignores it.
            logger.info(f"Session {session.session_id}: cancellation requested for {message.params}")
        else:
            logger.debug(f"Session {session.session_id}: ignoring notification {message.method}")

    async def _initialize(self, session: Session, params: Dict[str, Any]) -> Dict[str, Any]:
        negotiation = negotiate(params, self.identity)
        self.sessions.activate(session, negotiation)
        return negotiation.result

    async def _ping(self, session: Session, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def _list_tools(self, session: Session, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": self.registry.get_tool_schemas()}

    async def _call_tool(self, session: Session, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            call = CallToolParams.model_validate(params)
        except ValidationError as e:
            raise InvalidParams(
                "Invalid tools/call parameters",
                details={"errors": e.errors(include_url=False, include_context=False, include_input=False)}
            )
        logger.info(f"Session {session.session_id}: invoking tool {call.name}")
        return await self.registry.invoke_tool(call.name, call.arguments)
