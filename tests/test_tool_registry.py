"""Tests for the MCP tool registry and the task tools."""

from __future__ import annotations

import json

import pytest
from pydantic import BaseModel

from task_manager.mcp.errors import InvalidArgument, InvalidParams, NotFound
from task_manager.mcp.server import MCPServer, MCPTool


class TestToolTable:
    def test_registers_the_four_task_tools(self, registry: MCPServer):
        assert registry.list_tools() == ["add_task", "complete_task", "list_tasks", "get_task"]

    def test_schemas_describe_required_fields(self, registry: MCPServer):
        schemas = {schema["name"]: schema for schema in registry.get_tool_schemas()}

        assert schemas["add_task"]["inputSchema"]["required"] == ["title"]
        assert schemas["complete_task"]["inputSchema"]["required"] == ["id"]
        assert schemas["get_task"]["inputSchema"]["properties"]["id"]["type"] == "integer"
        assert "required" not in schemas["list_tasks"]["inputSchema"]
        assert all(schema["description"] for schema in schemas.values())

    @pytest.mark.asyncio
    async def test_new_tool_needs_only_registration(self, registry: MCPServer):
        class EchoParams(BaseModel):
            text: str

        async def echo(params: EchoParams):
            return {"success": True, "echo": params.text}

        registry.register_tool(MCPTool("echo", "Echo text", EchoParams, echo))

        result = await registry.invoke_tool("echo", {"text": "hi"})
        assert result["structuredContent"] == {"success": True, "echo": "hi"}


class TestValidation:
    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry: MCPServer):
        with pytest.raises(InvalidParams) as exc_info:
            await registry.invoke_tool("delete_task", {"id": 1})

        assert "delete_task" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name,arguments",
        [
            ("add_task", {}),
            ("add_task", {"title": 42}),
            ("add_task", {"title": "ok", "priority": "high"}),
            ("complete_task", {}),
            ("complete_task", {"id": "not-a-number"}),
            ("complete_task", {"id": -1}),
            ("complete_task", {"id": "1"}),
            ("complete_task", {"id": True}),
            ("complete_task", {"id": 1.0}),
            ("get_task", {"id": "1"}),
            ("add_task", {"title": b"bytes"}),
            ("add_task", {"title": "ok", "description": 5}),
            ("get_task", {"id": None}),
            ("list_tasks", {"filter_type": "archived"}),
        ],
    )
    async def test_malformed_arguments(self, registry: MCPServer, name, arguments):
        with pytest.raises(InvalidParams) as exc_info:
            await registry.invoke_tool(name, arguments)

        assert exc_info.value.details["tool"] == name
        assert exc_info.value.details["errors"]

    @pytest.mark.asyncio
    async def test_handler_not_invoked_on_invalid_params(self, registry: MCPServer):
        calls = []

        class Params(BaseModel):
            id: int

        async def handler(params):
            calls.append(params)
            return {"success": True}

        registry.register_tool(MCPTool("recorder", "Records calls", Params, handler))

        with pytest.raises(InvalidParams):
            await registry.invoke_tool("recorder", {"id": "abc"})
        with pytest.raises(InvalidParams):
            await registry.invoke_tool("recorder", ["not", "an", "object"])

        assert calls == []

    @pytest.mark.asyncio
    async def test_empty_title_rejected_before_store(self, registry: MCPServer, store):
        with pytest.raises(InvalidParams):
            await registry.invoke_tool("add_task", {"title": "", "description": "x"})

        assert store.next_id == 1

    @pytest.mark.asyncio
    async def test_blank_title_is_invalid_argument(self, registry: MCPServer, store):
        with pytest.raises(InvalidArgument) as exc_info:
            await registry.invoke_tool("add_task", {"title": "   "})

        assert exc_info.value.details == {"field": "title"}
        assert store.next_id == 1
        result = await registry.invoke_tool("add_task", {"title": "real"})
        assert result["structuredContent"]["task"]["id"] == 1


class TestTaskTools:
    @pytest.mark.asyncio
    async def test_add_task_envelope(self, registry: MCPServer):
        result = await registry.invoke_tool("add_task", {"title": "Write spec", "description": "draft v1"})

        payload = result["structuredContent"]
        assert result["isError"] is False
        assert payload["success"] is True
        assert payload["task"] == {"id": 1, "title": "Write spec", "description": "draft v1", "completed": False}
        assert payload["message"] == "Task 'Write spec' added successfully with ID 1"
        assert json.loads(result["content"][0]["text"]) == payload

    @pytest.mark.asyncio
    async def test_complete_missing_task_is_not_found(self, registry: MCPServer, store):
        store.add("a")

        with pytest.raises(NotFound) as exc_info:
            await registry.invoke_tool("complete_task", {"id": 7})

        assert exc_info.value.message == "Task with ID 7 not found"
        assert [task.completed for task in store.list()] == [False]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["complete_task", "get_task"])
    async def test_id_zero_is_not_found(self, registry: MCPServer, store, name):
        store.add("a")

        with pytest.raises(NotFound) as exc_info:
            await registry.invoke_tool(name, {"id": 0})

        assert exc_info.value.details == {"id": 0}
        assert [task.completed for task in store.list()] == [False]

    @pytest.mark.asyncio
    async def test_complete_twice_succeeds(self, registry: MCPServer, store):
        store.add("a")

        first = await registry.invoke_tool("complete_task", {"id": 1})
        second = await registry.invoke_tool("complete_task", {"id": 1})

        assert first["structuredContent"]["task"]["completed"] is True
        assert second["structuredContent"]["task"]["completed"] is True
        assert second["structuredContent"]["message"] == "Task 'a' marked as completed"

    @pytest.mark.asyncio
    async def test_list_tasks_filters(self, registry: MCPServer, store):
        store.add("a")
        store.add("b")
        store.complete(2)

        everything = (await registry.invoke_tool("list_tasks", None))["structuredContent"]
        pending = (await registry.invoke_tool("list_tasks", {"filter_type": "pending"}))["structuredContent"]
        done = (await registry.invoke_tool("list_tasks", {"filter_type": "completed"}))["structuredContent"]

        assert everything["total"] == 2
        assert everything["message"] == "You have 2 total tasks."
        assert [task["id"] for task in pending["tasks"]] == [1]
        assert [task["id"] for task in done["tasks"]] == [2]
        assert done["message"] == "You have 1 completed task."

    @pytest.mark.asyncio
    async def test_list_tasks_empty(self, registry: MCPServer):
        payload = (await registry.invoke_tool("list_tasks", {}))["structuredContent"]

        assert payload["total"] == 0
        assert payload["tasks"] == []
        assert payload["message"] == "You have no tasks yet."

    @pytest.mark.asyncio
    async def test_get_task(self, registry: MCPServer, store):
        store.add("a", "details")

        payload = (await registry.invoke_tool("get_task", {"id": 1}))["structuredContent"]

        assert payload["task"]["description"] == "details"
        with pytest.raises(NotFound):
            await registry.invoke_tool("get_task", {"id": 2})

    @pytest.mark.asyncio
    async def test_mutations_publish_events(self, registry: MCPServer, events):
        received = []
        events.subscribe(received.append)

        await registry.invoke_tool("add_task", {"title": "a"})
        await registry.invoke_tool("complete_task", {"id": 1})
        await registry.invoke_tool("get_task", {"id": 1})

        assert [event["type"] for event in received] == ["task.created", "task.completed"]
        assert received[1]["data"]["completed"] is True

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_fail_the_tool(self, registry: MCPServer, events):
        def broken(event):
            raise RuntimeError("subscriber down")

        events.subscribe(broken)

        result = await registry.invoke_tool("add_task", {"title": "a"})
        assert result["structuredContent"]["task"]["id"] == 1

    @pytest.mark.asyncio
    async def test_metrics_count_calls_and_failures(self, registry: MCPServer, metrics):
        await registry.invoke_tool("add_task", {"title": "a"})
        with pytest.raises(NotFound):
            await registry.invoke_tool("get_task", {"id": 5})

        counters = metrics.get_metrics()["counters"]
        assert counters["tool_calls_total"] == 2
        assert counters["tool_errors_total"] == 1
        assert counters["tool_errors.get_task"] == 1
