"""Test helpers shared across modules."""

from __future__ import annotations

from task_manager.mcp.protocol import LATEST_PROTOCOL_VERSION, ServerIdentity
from task_manager.schemas.jsonrpc import JsonRpcRequest

IDENTITY = ServerIdentity(name="task-manager", version="0.1.0", instructions="test server")


class FakeClock:
    """Manually advanced monotonic clock for idle-timeout tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def rpc(method: str, params=None, request_id=1) -> JsonRpcRequest:
    """Build a JSON-RPC request (request_id=None builds a notification)."""
    message = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    if request_id is not None:
        message["id"] = request_id
    return JsonRpcRequest.model_validate(message)


def initialize_params(version: str = LATEST_PROTOCOL_VERSION) -> dict:
    return {
        "protocolVersion": version,
        "capabilities": {},
        "clientInfo": {"name": "pytest-client", "version": "1.0"},
    }
