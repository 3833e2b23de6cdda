"""
Get Task MCP Tool

Retrieves a single task by id.
"""

from typing import Dict, Any, Optional

from task_manager.mcp.base_tool import BaseMCPTool, create_success_response, serialize_task
from task_manager.mcp.server import MCPServer, MCPTool
from task_manager.schemas.task import GetTaskParams
from task_manager.services.task_events import TaskEventPublisher
from task_manager.services.task_store import TaskStore


class GetTaskTool(BaseMCPTool):
    """MCP Tool for viewing a task"""

    async def execute(self, params: GetTaskParams) -> Dict[str, Any]:
        self.log_tool_invocation("get_task", {"id": params.id})

        task = self.store.get(params.id)

        return create_success_response(
            data={"task": serialize_task(task)},
            message=f"Here are the details for task {task.id}"
        )


def register_get_task_tool(mcp_server: MCPServer, store: TaskStore,
                           events: Optional[TaskEventPublisher] = None):
    """Register get_task tool with MCP server"""
    tool = MCPTool(
        name="get_task",
        description="Get a specific task by ID",
        params_model=GetTaskParams,
        handler=lambda params: GetTaskTool(store, events).execute(params)
    )

    mcp_server.register_tool(tool)
