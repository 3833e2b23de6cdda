"""Task model for the in-memory task store."""
from pydantic import BaseModel, Field


class Task(BaseModel):
    """Task entity representing a todo item."""

    id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    completed: bool = False
