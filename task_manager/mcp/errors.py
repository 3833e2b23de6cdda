"""
MCP Error Taxonomy

Every failure that reaches a client is an McpError subclass carrying a
stable machine-readable kind, a JSON-RPC error code and a human-readable
reason.
"""

from typing import Any, Dict, Optional, Union

# JSON-RPC 2.0 reserved codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Server-defined codes
PROTOCOL_ERROR = -32000
UNSUPPORTED_VERSION = -32001
NOT_FOUND = -32002
INVALID_ARGUMENT = -32003


class McpError(Exception):
    """Base exception for errors reported to MCP clients"""

    kind = "InternalError"
    code = INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_error(self) -> Dict[str, Any]:
        """JSON-RPC error object for this failure."""
        return {
            "code": self.code,
            "message": self.message,
            "data": {
                "kind": self.kind,
                "reason": self.message,
                "details": self.details
            }
        }


class ParseError(McpError):
    kind = "ParseError"
    code = PARSE_ERROR


class InvalidRequest(McpError):
    kind = "InvalidRequest"
    code = INVALID_REQUEST


class MethodNotFound(McpError):
    kind = "MethodNotFound"
    code = METHOD_NOT_FOUND


class InvalidParams(McpError):
    """Malformed or missing parameters"""
    kind = "InvalidParams"
    code = INVALID_PARAMS


class InvalidArgument(McpError):
    """Well-formed parameter with a semantically invalid value"""
    kind = "InvalidArgument"
    code = INVALID_ARGUMENT


class NotFound(McpError):
    kind = "NotFound"
    code = NOT_FOUND


class InternalError(McpError):
    kind = "InternalError"
    code = INTERNAL_ERROR


class ProtocolError(McpError):
    """Message not allowed in the current session state"""
    kind = "ProtocolError"
    code = PROTOCOL_ERROR


class UnsupportedVersion(ProtocolError):
    kind = "UnsupportedVersion"
    code = UNSUPPORTED_VERSION


def create_error_response(request_id: Optional[Union[int, str]], error: McpError) -> Dict[str, Any]:
    """
    Create a JSON-RPC error response

    Args:
        request_id: Correlation token of the failed request (None if unknown)
        error: The McpError to convert

    Returns:
        JSON-RPC error response dictionary
    """
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": error.to_error()
    }


def create_result_response(request_id: Union[int, str], result: Dict[str, Any]) -> Dict[str, Any]:
    """Create a JSON-RPC success response"""
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "result": result
    }
