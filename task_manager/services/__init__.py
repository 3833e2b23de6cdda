"""Task store and task event services."""

from .task_store import TaskStore, TaskStoreError, TaskNotFoundError, InvalidTaskArgumentError
from .task_events import TaskEventPublisher

__all__ = [
    "TaskStore",
    "TaskStoreError",
    "TaskNotFoundError",
    "InvalidTaskArgumentError",
    "TaskEventPublisher",
]
