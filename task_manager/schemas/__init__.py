"""Pydantic schemas for tool parameters and JSON-RPC messages."""
