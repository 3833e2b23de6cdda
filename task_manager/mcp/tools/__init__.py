"""Task tools exposed through the MCP tool registry."""

from typing import Optional

from task_manager.mcp.server import MCPServer
from task_manager.services.task_events import TaskEventPublisher
from task_manager.services.task_store import TaskStore
from task_manager.utils.metrics import MetricsCollector

from .add_task import register_add_task_tool
from .complete_task import register_complete_task_tool
from .get_task import register_get_task_tool
from .list_tasks import register_list_tasks_tool


def build_tool_registry(
    store: TaskStore,
    events: Optional[TaskEventPublisher] = None,
    metrics: Optional[MetricsCollector] = None,
    name: str = "task-manager",
) -> MCPServer:
    """Create an MCPServer with every task tool registered"""
    mcp_server = MCPServer(name=name, metrics=metrics)

    register_add_task_tool(mcp_server, store, events)
    register_complete_task_tool(mcp_server, store, events)
    register_list_tasks_tool(mcp_server, store, events)
    register_get_task_tool(mcp_server, store, events)

    return mcp_server


__all__ = ["build_tool_registry"]
