"""
MCP (Model Context Protocol) Server Package

Implements the task-management MCP server: the tool registry, the
initialize handshake, per-client sessions and JSON-RPC dispatch.
"""
