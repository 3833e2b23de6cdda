"""
Add Task MCP Tool

Creates a new task in the shared task store.
"""

from typing import Dict, Any, Optional

from task_manager.mcp.base_tool import BaseMCPTool, create_success_response, serialize_task
from task_manager.mcp.server import MCPServer, MCPTool
from task_manager.schemas.task import AddTaskParams
from task_manager.services.task_events import TaskEventPublisher
from task_manager.services.task_store import TaskStore


class AddTaskTool(BaseMCPTool):
    """MCP Tool for adding tasks"""

    async def execute(self, params: AddTaskParams) -> Dict[str, Any]:
        """
        Add a new task

        Args:
            params: Validated title and description

        Returns:
            Created task and confirmation message
        """
        self.log_tool_invocation("add_task", {"title": params.title})

        task = self.store.add(params.title, params.description)
        task_data = serialize_task(task)

        if self.events:
            self.events.publish_task_created(task_data)

        return create_success_response(
            data={"task": task_data},
            message=f"Task '{task.title}' added successfully with ID {task.id}"
        )


def register_add_task_tool(mcp_server: MCPServer, store: TaskStore,
                           events: Optional[TaskEventPublisher] = None):
    """Register add_task tool with MCP server"""
    tool = MCPTool(
        name="add_task",
        description="Add a new task to the task manager",
        params_model=AddTaskParams,
        handler=lambda params: AddTaskTool(store, events).execute(params)
    )

    mcp_server.register_tool(tool)
