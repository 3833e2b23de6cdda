"""MCP transport router: streamable HTTP at /mcp and WebSocket at /mcp/ws."""
import asyncio
import contextlib
import json
import logging
from typing import Union

from fastapi import APIRouter, Request, Response, WebSocket, WebSocketDisconnect, status
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.websockets import WebSocketState

from task_manager.mcp.dispatcher import RequestDispatcher, parse_error_response, parse_message
from task_manager.mcp.errors import McpError, ProtocolError, create_error_response
from task_manager.mcp.session import Session, SessionManager, SessionState, UnknownSession

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"

router = APIRouter(tags=["MCP"])


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_dispatcher(request: Request) -> RequestDispatcher:
    return request.app.state.dispatcher


def _error(status_code: int, error: McpError, request_id=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=create_error_response(request_id, error))


@router.post("")
async def post_message(request: Request):
    """Receive one JSON-RPC message for a session."""
    sessions = get_session_manager(request)
    dispatcher = get_dispatcher(request)

    try:
        raw = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=parse_error_response(e))

    try:
        message = parse_message(raw)
    except McpError as e:
        request_id = raw.get("id") if isinstance(raw, dict) else None
        return _error(status.HTTP_400_BAD_REQUEST, e, request_id)

    session_id = request.headers.get(SESSION_HEADER)
    created = False
    if session_id:
        try:
            session = sessions.get_session(session_id)
        except UnknownSession as e:
            return _error(status.HTTP_404_NOT_FOUND, e, message.id)
    elif message.method == "initialize" and not message.is_notification:
        session = sessions.create_session(transport="http")
        created = True
    else:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            ProtocolError("Session not initialized: missing Mcp-Session-Id header"),
            message.id,
        )

    response = await dispatcher.handle(session, message)
    headers = {SESSION_HEADER: session.session_id}

    if created and (response is None or "error" in response):
        # A failed handshake leaves nothing behind to reconnect to.
        sessions.discard(session)
        headers = {}

    if response is None:
        return Response(status_code=status.HTTP_202_ACCEPTED, headers=headers)
    return JSONResponse(content=response, headers=headers)


@router.get("")
async def open_stream(request: Request):
    """Server-Sent Events stream carrying the session's notifications."""
    sessions = get_session_manager(request)

    if "text/event-stream" not in request.headers.get("accept", ""):
        return Response(status_code=status.HTTP_406_NOT_ACCEPTABLE)

    session_id = request.headers.get(SESSION_HEADER)
    if not session_id:
        return _error(status.HTTP_400_BAD_REQUEST, ProtocolError("Missing Mcp-Session-Id header"))
    try:
        session = sessions.get_session(session_id)
    except UnknownSession as e:
        return _error(status.HTTP_404_NOT_FOUND, e)
    if not session.is_active:
        return _error(status.HTTP_400_BAD_REQUEST, ProtocolError("Session not initialized"))

    session.attach_stream()
    return StreamingResponse(
        _event_stream(session),
        media_type="text/event-stream",
        headers={SESSION_HEADER: session.session_id, "Cache-Control": "no-cache"},
    )


async def _event_stream(session: Session):
    try:
        while True:
            message = await session.next_outbound()
            if message is None:
                break
            yield f"event: message\ndata: {json.dumps(message)}\n\n"
    finally:
        session.detach_stream()


@router.delete("")
async def terminate_session(request: Request):
    """Explicit session termination by the client."""
    sessions = get_session_manager(request)

    session_id = request.headers.get(SESSION_HEADER)
    if not session_id:
        return _error(status.HTTP_400_BAD_REQUEST, ProtocolError("Missing Mcp-Session-Id header"))

    if not await sessions.close_session(session_id, reason="client"):
        return _error(status.HTTP_404_NOT_FOUND, UnknownSession("Unknown session"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """One WebSocket connection is one session."""
    sessions: SessionManager = websocket.app.state.session_manager
    dispatcher: RequestDispatcher = websocket.app.state.dispatcher

    await websocket.accept()
    session = sessions.create_session(transport="websocket")
    session.attach_stream()

    sender = asyncio.create_task(_send_outbound(websocket, session))
    pending = set()

    try:
        while session.state in (SessionState.CONNECTING, SessionState.ACTIVE):
            try:
                frame = await asyncio.wait_for(websocket.receive(), timeout=sessions.idle_timeout)
            except asyncio.TimeoutError:
                logger.info(f"Session {session.session_id}: idle timeout")
                break

            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", status.WS_1000_NORMAL_CLOSURE))
            data = frame.get("text")
            if data is None:
                data = frame.get("bytes") or b""

            task = asyncio.create_task(_serve_frame(dispatcher, session, data))
            pending.add(task)
            task.add_done_callback(pending.discard)
    except WebSocketDisconnect:
        logger.info(f"Session {session.session_id}: client disconnected")
    finally:
        # In-flight requests run to completion; their results are dropped.
        session.detach_stream()
        await sessions.close_session(session.session_id, reason="disconnect")
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
        if websocket.client_state != WebSocketState.DISCONNECTED:
            await websocket.close()


async def _serve_frame(dispatcher: RequestDispatcher, session: Session, data: Union[str, bytes]) -> None:
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            session.deliver(parse_error_response(e))
            return

    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        session.deliver(parse_error_response(e))
        return

    try:
        message = parse_message(raw)
    except McpError as e:
        session.deliver(create_error_response(raw.get("id") if isinstance(raw, dict) else None, e))
        return

    response = await dispatcher.handle(session, message)
    if response is not None:
        session.deliver(response)


async def _send_outbound(websocket: WebSocket, session: Session) -> None:
    try:
        while True:
            message = await session.next_outbound()
            if message is None:
                break
            await websocket.send_json(message)
    except (WebSocketDisconnect, RuntimeError) as e:
        # RuntimeError: send after the socket was closed
        logger.info(f"Session {session.session_id}: outbound stream ended ({type(e).__name__})")
        session.detach_stream()
