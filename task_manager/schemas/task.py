"""Parameter schemas for the task tools."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal


class AddTaskParams(BaseModel):
    """Schema for the add_task tool."""
    model_config = ConfigDict(extra="forbid", strict=True)

    title: str = Field(..., min_length=1, description="The title of the task")
    description: str = Field("", description="A detailed description of the task")


class CompleteTaskParams(BaseModel):
    """Schema for the complete_task tool."""
    model_config = ConfigDict(extra="forbid", strict=True)

    id: int = Field(..., ge=0, description="The ID of the task to mark as completed")


class GetTaskParams(BaseModel):
    """Schema for the get_task tool."""
    model_config = ConfigDict(extra="forbid", strict=True)

    id: int = Field(..., ge=0, description="The ID of the task to retrieve")


class ListTasksParams(BaseModel):
    """Schema for the list_tasks tool."""
    model_config = ConfigDict(extra="forbid", strict=True)

    filter_type: Literal["all", "pending", "completed"] = Field(
        "all", description="Filter by status: 'all', 'pending', or 'completed'"
    )
