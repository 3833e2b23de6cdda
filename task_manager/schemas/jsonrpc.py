"""JSON-RPC 2.0 message schemas used on the MCP transport."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Literal, Optional, Union


class JsonRpcRequest(BaseModel):
    """
    Incoming JSON-RPC message.

    A message without an ``id`` is a notification and never gets a response.
    """
    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"]
    method: str = Field(..., min_length=1)
    id: Optional[Union[int, str]] = None
    params: Optional[Dict[str, Any]] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class ClientInfo(BaseModel):
    """Client identity sent with the initialize request."""
    model_config = ConfigDict(extra="allow")

    name: str
    version: Optional[str] = None


class InitializeParams(BaseModel):
    """Schema for the initialize handshake parameters."""
    model_config = ConfigDict(extra="allow")

    protocolVersion: str = Field(..., min_length=1)
    capabilities: Dict[str, Any] = Field(default_factory=dict)
    clientInfo: Optional[ClientInfo] = None


class CallToolParams(BaseModel):
    """Schema for tools/call parameters."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    arguments: Optional[Dict[str, Any]] = None
