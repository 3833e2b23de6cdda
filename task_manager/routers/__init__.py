"""Routers package for the Task Manager MCP Server."""

from .mcp import router as mcp_router

__all__ = ["mcp_router"]
