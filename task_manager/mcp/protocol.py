"""
MCP Protocol Handler

Answers the initialize handshake. negotiate() has no state: the same
request always produces the same answer.
"""

from typing import Any, Dict, FrozenSet, Optional, Tuple
from dataclasses import dataclass, field

from pydantic import ValidationError

from task_manager.mcp.errors import InvalidParams, UnsupportedVersion
from task_manager.schemas.jsonrpc import InitializeParams

LATEST_PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS: Tuple[str, ...] = (
    LATEST_PROTOCOL_VERSION,
    "2025-03-26",
    "2024-11-05",
)

# Tool invocation is the only server capability
SERVER_CAPABILITIES: FrozenSet[str] = frozenset({"tools"})


@dataclass(frozen=True)
class ServerIdentity:
    """Server metadata advertised to clients"""
    name: str
    version: str
    instructions: Optional[str] = None


@dataclass(frozen=True)
class Negotiation:
    """Outcome of a successful handshake"""
    protocol_version: str
    capabilities: FrozenSet[str]
    client_info: Dict[str, Any] = field(default_factory=dict)
    client_capabilities: Dict[str, Any] = field(default_factory=dict)
    result: Dict[str, Any] = field(default_factory=dict)


def negotiate(params: Optional[Dict[str, Any]], identity: ServerIdentity) -> Negotiation:
    """
    Answer an initialize request.

    Args:
        params: Raw initialize params from the client
        identity: Server name, version and instructions

    Returns:
        Negotiation carrying the agreed version, capability set and the
        initialize result to send back

    Raises:
        InvalidParams: protocolVersion missing or malformed
        UnsupportedVersion: requested version is not implemented
    """
    try:
        request = InitializeParams.model_validate(params or {})
    except ValidationError as e:
        raise InvalidParams(
            "Invalid initialize parameters",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)}
        )

    if request.protocolVersion not in SUPPORTED_PROTOCOL_VERSIONS:
        raise UnsupportedVersion(
            f"Unsupported protocol version: {request.protocolVersion}",
            details={
                "requested": request.protocolVersion,
                "supported": list(SUPPORTED_PROTOCOL_VERSIONS)
            }
        )

    server_info = {"name": identity.name, "version": identity.version}
    result: Dict[str, Any] = {
        "protocolVersion": request.protocolVersion,
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": server_info,
    }
    if identity.instructions:
        result["instructions"] = identity.instructions

    return Negotiation(
        protocol_version=request.protocolVersion,
        capabilities=SERVER_CAPABILITIES,
        client_info=request.clientInfo.model_dump() if request.clientInfo else {},
        client_capabilities=request.capabilities,
        result=result,
    )
