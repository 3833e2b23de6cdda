"""
MCP Base Tool Interface

Provides base functionality for all task tools:
- Access to the shared task store and event publisher
- Audit logging of invocations
- Standardized success payloads
"""

from typing import Any, Dict, Optional
from abc import ABC, abstractmethod
import logging

from pydantic import BaseModel

from task_manager.models.task import Task
from task_manager.services.task_events import TaskEventPublisher
from task_manager.services.task_store import TaskStore

logger = logging.getLogger(__name__)


class BaseMCPTool(ABC):
    """
    Base class for all MCP tools

    Tools receive already-validated parameters and talk to the task store.
    Store errors propagate unchanged; the tool registry translates them.
    """

    def __init__(self, store: TaskStore, events: Optional[TaskEventPublisher] = None):
        self.store = store
        self.events = events

    def log_tool_invocation(self, tool_name: str, params: Dict[str, Any]) -> None:
        """
        Log MCP tool invocation for audit trail

        Args:
            tool_name: Name of the tool being invoked
            params: Validated tool parameters
        """
        logger.info(f"MCP Tool Invocation: {tool_name} | Params: {params}")

    @abstractmethod
    async def execute(self, params: BaseModel) -> Dict[str, Any]:
        """
        Execute the tool logic

        Args:
            params: Validated parameter model for this tool

        Returns:
            Success payload built with create_success_response
        """


def serialize_task(task: Task) -> Dict[str, Any]:
    """Wire representation of a task"""
    return task.model_dump()


def create_success_response(data: Dict[str, Any], message: Optional[str] = None) -> Dict[str, Any]:
    """
    Create a standardized success payload

    Args:
        data: Structured result fields
        message: Human-readable summary

    Returns:
        Payload dictionary with success flag, data fields and message
    """
    response = {"success": True}
    response.update(data)

    if message:
        response["message"] = message

    return response
