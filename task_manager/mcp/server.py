"""
MCP Tool Registry

Maps tool names to their parameter schema and handler. Dispatch is a
table lookup: adding a tool means registering one more MCPTool, never
touching invoke_tool.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Type
from dataclasses import dataclass
import json
import logging

from pydantic import BaseModel, ValidationError

from task_manager.mcp.errors import InvalidArgument, InvalidParams, NotFound
from task_manager.services.task_store import InvalidTaskArgumentError, TaskNotFoundError
from task_manager.utils.metrics import MetricsCollector

logger = logging.getLogger(__name__)


@dataclass
class MCPTool:
    """MCP Tool definition"""
    name: str
    description: str
    params_model: Type[BaseModel]
    handler: Callable[[BaseModel], Awaitable[Dict[str, Any]]]

    def validate(self, arguments: Optional[Dict[str, Any]]) -> BaseModel:
        """Validate raw arguments against the tool's parameter schema"""
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParams(
                f"Arguments for tool {self.name} must be an object",
                details={"tool": self.name}
            )
        try:
            return self.params_model.model_validate(arguments)
        except ValidationError as e:
            raise InvalidParams(
                f"Invalid arguments for tool {self.name}",
                details={
                    "tool": self.name,
                    "errors": e.errors(include_url=False, include_context=False, include_input=False)
                }
            )

    def input_schema(self) -> Dict[str, Any]:
        return self.params_model.model_json_schema()


def create_tool_result(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a tool payload into an MCP CallToolResult"""
    return {
        "content": [
            {"type": "text", "text": json.dumps(payload, indent=2)}
        ],
        "structuredContent": payload,
        "isError": False
    }


class MCPServer:
    """
    MCP tool registry for task management

    Validates arguments, invokes handlers and translates task store
    errors into protocol errors.
    """

    def __init__(self, name: str = "task-manager", metrics: Optional[MetricsCollector] = None):
        self.tools: Dict[str, MCPTool] = {}
        self.name = name
        self.metrics = metrics or MetricsCollector()
        logger.info(f"Initializing MCP Server: {self.name}")

    def register_tool(self, tool: MCPTool):
        """Register a tool with the MCP server"""
        if tool.name in self.tools:
            logger.warning(f"Tool {tool.name} already registered, overwriting")

        self.tools[tool.name] = tool
        logger.info(f"Registered MCP tool: {tool.name}")

    def get_tool(self, name: str) -> MCPTool:
        """Get a registered tool by name"""
        if name not in self.tools:
            raise InvalidParams(
                f"Unknown tool: {name}",
                details={"tool": name, "available_tools": self.list_tools()}
            )
        return self.tools[name]

    def list_tools(self) -> List[str]:
        """List all registered tool names"""
        return list(self.tools.keys())

    async def invoke_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Invoke a tool with parameters

        Args:
            tool_name: Name of the tool to invoke
            arguments: Loosely-typed tool arguments

        Returns:
            MCP CallToolResult dictionary

        Raises:
            InvalidParams: Unknown tool or malformed arguments (handler not invoked)
            NotFound: Referenced task does not exist
            InvalidArgument: Semantically invalid argument value
        """
        tool = self.get_tool(tool_name)
        self.metrics.tool_called(tool_name)

        try:
            params = tool.validate(arguments)
        except InvalidParams:
            self.metrics.tool_failed(tool_name)
            raise

        try:
            payload = await tool.handler(params)
        except TaskNotFoundError as e:
            self.metrics.tool_failed(tool_name)
            logger.info(f"Tool {tool_name} failed: {e.message}")
            raise NotFound(e.message, details={"id": e.task_id})
        except InvalidTaskArgumentError as e:
            self.metrics.tool_failed(tool_name)
            logger.info(f"Tool {tool_name} failed: {e.message}")
            raise InvalidArgument(e.message, details={"field": e.field})

        logger.info(f"Tool {tool_name} executed successfully")
        return create_tool_result(payload)

    def get_tool_schemas(self) -> List[Dict[str, Any]]:
        """Get tool descriptors for tools/list"""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.input_schema()
            }
            for tool in self.tools.values()
        ]
