"""Domain models for the Task Manager server."""

from .task import Task

__all__ = ["Task"]
