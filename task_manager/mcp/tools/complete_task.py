"""
Complete Task MCP Tool

Marks a task as completed. Completing an already-completed task succeeds
and reports the same state.
"""

from typing import Dict, Any, Optional

from task_manager.mcp.base_tool import BaseMCPTool, create_success_response, serialize_task
from task_manager.mcp.server import MCPServer, MCPTool
from task_manager.schemas.task import CompleteTaskParams
from task_manager.services.task_events import TaskEventPublisher
from task_manager.services.task_store import TaskStore


class CompleteTaskTool(BaseMCPTool):
    """MCP Tool for completing tasks"""

    async def execute(self, params: CompleteTaskParams) -> Dict[str, Any]:
        """
        Mark a task as completed

        Args:
            params: Validated task id

        Returns:
            Updated task and confirmation message
        """
        self.log_tool_invocation("complete_task", {"id": params.id})

        task = self.store.complete(params.id)
        task_data = serialize_task(task)

        if self.events:
            self.events.publish_task_completed(task_data)

        return create_success_response(
            data={"task": task_data},
            message=f"Task '{task.title}' marked as completed"
        )


def register_complete_task_tool(mcp_server: MCPServer, store: TaskStore,
                                events: Optional[TaskEventPublisher] = None):
    """Register complete_task tool with MCP server"""
    tool = MCPTool(
        name="complete_task",
        description="Mark a task as completed",
        params_model=CompleteTaskParams,
        handler=lambda params: CompleteTaskTool(store, events).execute(params)
    )

    mcp_server.register_tool(tool)
