"""Task Manager MCP Server - in-memory task management over the Model Context Protocol."""

__version__ = "0.1.0"
