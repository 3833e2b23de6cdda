"""In-memory task store shared by every MCP session."""
from typing import List
import logging
import threading

from task_manager.models.task import Task

logger = logging.getLogger(__name__)


class TaskStoreError(Exception):
    """Base exception for task store failures"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class TaskNotFoundError(TaskStoreError):
    """Raised when a task id does not exist in the store"""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class InvalidTaskArgumentError(TaskStoreError):
    """Raised when a value is semantically invalid for a task"""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class TaskStore:
    """
    Authoritative, process-wide task collection.

    The task list and the id counter are guarded by one lock so that
    assigning an id and appending the task happen as a single step.
    Every task handed out is a copy; callers never hold a reference into
    the collection.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tasks: List[Task] = []
        self._next_id = 1

    @property
    def next_id(self) -> int:
        """Id the next successfully added task will receive."""
        with self._lock:
            return self._next_id

    def add(self, title: str, description: str = "") -> Task:
        """Create a task and return a copy of it."""
        if not title or not title.strip():
            raise InvalidTaskArgumentError("title", "Task title cannot be empty")

        with self._lock:
            task = Task(id=self._next_id, title=title, description=description or "")
            self._next_id += 1
            self._tasks.append(task)
            self._check_consistency()
            created = task.model_copy()

        logger.debug(f"Added task {created.id}: {created.title!r}")
        return created

    def complete(self, task_id: int) -> Task:
        """Mark a task as completed. Completing twice is not an error."""
        with self._lock:
            task = self._find(task_id)
            task.completed = True
            self._check_consistency()
            updated = task.model_copy()

        logger.debug(f"Completed task {task_id}")
        return updated

    def get(self, task_id: int) -> Task:
        with self._lock:
            return self._find(task_id).model_copy()

    def list(self) -> List[Task]:
        """Point-in-time snapshot of all tasks in insertion order."""
        with self._lock:
            return [task.model_copy() for task in self._tasks]

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)

    def _find(self, task_id: int) -> Task:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    def _check_consistency(self) -> None:
        # Counter and collection must never drift apart.
        assert self._next_id == len(self._tasks) + 1, (
            f"id counter {self._next_id} out of sync with {len(self._tasks)} tasks"
        )
        assert not self._tasks or self._tasks[-1].id == self._next_id - 1, (
            "last task id does not precede the id counter"
        )
