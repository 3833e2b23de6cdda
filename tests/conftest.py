"""Shared fixtures for the task manager tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from task_manager.main import create_app
from task_manager.mcp.dispatcher import RequestDispatcher
from task_manager.mcp.session import SessionManager
from task_manager.mcp.tools import build_tool_registry
from task_manager.services.task_events import TaskEventPublisher
from task_manager.services.task_store import TaskStore
from task_manager.utils.metrics import MetricsCollector

from .helpers import IDENTITY, FakeClock


@pytest.fixture()
def store() -> TaskStore:
    return TaskStore()


@pytest.fixture()
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture()
def events() -> TaskEventPublisher:
    return TaskEventPublisher()


@pytest.fixture()
def registry(store, events, metrics):
    return build_tool_registry(store, events, metrics=metrics)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def session_manager(metrics, clock) -> SessionManager:
    return SessionManager(idle_timeout=60.0, metrics=metrics, clock=clock)


@pytest.fixture()
def dispatcher(registry, session_manager, events) -> RequestDispatcher:
    events.subscribe(session_manager.handle_task_event)
    return RequestDispatcher(registry, session_manager, IDENTITY)


@pytest.fixture()
def app(store):
    return create_app(store=store, idle_timeout=30.0, reap_interval=3600.0)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
