"""
List Tasks MCP Tool

Returns a snapshot of the task collection in insertion order, optionally
filtered by completion status.
"""

from typing import Dict, Any, Optional

from task_manager.mcp.base_tool import BaseMCPTool, create_success_response, serialize_task
from task_manager.mcp.server import MCPServer, MCPTool
from task_manager.schemas.task import ListTasksParams
from task_manager.services.task_events import TaskEventPublisher
from task_manager.services.task_store import TaskStore


class ListTasksTool(BaseMCPTool):
    """MCP Tool for listing tasks"""

    async def execute(self, params: ListTasksParams) -> Dict[str, Any]:
        """
        List tasks

        Args:
            params: Optional status filter ("all", "pending", "completed")

        Returns:
            Total count, task array and summary message
        """
        self.log_tool_invocation("list_tasks", {"filter_type": params.filter_type})

        tasks = self.store.list()

        if params.filter_type == "pending":
            tasks = [task for task in tasks if not task.completed]
        elif params.filter_type == "completed":
            tasks = [task for task in tasks if task.completed]

        tasks_data = [serialize_task(task) for task in tasks]

        return create_success_response(
            data={"total": len(tasks_data), "tasks": tasks_data},
            message=self._generate_message(len(tasks_data), params.filter_type)
        )

    def _generate_message(self, count: int, filter_type: str) -> str:
        """Generate user-friendly message based on results"""
        if count == 0:
            if filter_type == "pending":
                return "You have no pending tasks."
            elif filter_type == "completed":
                return "You have no completed tasks."
            return "You have no tasks yet."

        plural = 's' if count != 1 else ''
        if filter_type == "pending":
            return f"You have {count} pending task{plural}."
        elif filter_type == "completed":
            return f"You have {count} completed task{plural}."
        return f"You have {count} total task{plural}."


def register_list_tasks_tool(mcp_server: MCPServer, store: TaskStore,
                             events: Optional[TaskEventPublisher] = None):
    """Register list_tasks tool with MCP server"""
    tool = MCPTool(
        name="list_tasks",
        description="List all tasks in the task manager",
        params_model=ListTasksParams,
        handler=lambda params: ListTasksTool(store, events).execute(params)
    )

    mcp_server.register_tool(tool)
