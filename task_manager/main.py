"""Main FastAPI application for the Task Manager MCP Server."""
import asyncio
import contextlib
import logging

from fastapi import FastAPI, Request

from task_manager import config
from task_manager.mcp.dispatcher import RequestDispatcher
from task_manager.mcp.protocol import ServerIdentity
from task_manager.mcp.session import SessionManager
from task_manager.mcp.tools import build_tool_registry
from task_manager.middleware.cors import add_cors_middleware
from task_manager.routers import mcp_router
from task_manager.services.task_events import TaskEventPublisher
from task_manager.services.task_store import TaskStore
from task_manager.utils.logger import configure_logging
from task_manager.utils.metrics import MetricsCollector

logger = logging.getLogger(__name__)


def create_app(
    store: TaskStore = None,
    idle_timeout: float = None,
    reap_interval: float = None,
) -> FastAPI:
    """
    Build the application.

    The task store is created once per application and shared by every
    session; pass one in to observe it from tests.
    """
    store = store if store is not None else TaskStore()
    idle_timeout = config.SESSION_IDLE_TIMEOUT if idle_timeout is None else idle_timeout
    reap_interval = config.SESSION_REAP_INTERVAL if reap_interval is None else reap_interval

    metrics = MetricsCollector()
    events = TaskEventPublisher(source=config.MCP_SERVER_NAME)
    registry = build_tool_registry(store, events, metrics=metrics, name=config.MCP_SERVER_NAME)
    session_manager = SessionManager(idle_timeout=idle_timeout, metrics=metrics)
    events.subscribe(session_manager.handle_task_event)

    identity = ServerIdentity(
        name=config.MCP_SERVER_NAME,
        version=config.MCP_SERVER_VERSION,
        instructions=config.MCP_INSTRUCTIONS,
    )
    dispatcher = RequestDispatcher(registry, session_manager, identity)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {identity.name} {identity.version} with tools: {registry.list_tools()}")
        reaper = asyncio.create_task(session_manager.run_reaper(reap_interval))
        try:
            yield
        finally:
            reaper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reaper
            await session_manager.close_all()
            logger.info("Task Manager MCP Server stopped")

    app = FastAPI(
        title="Task Manager MCP Server",
        description="In-memory task management exposed over the Model Context Protocol",
        version=config.MCP_SERVER_VERSION,
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.metrics = metrics
    app.state.events = events
    app.state.registry = registry
    app.state.session_manager = session_manager
    app.state.dispatcher = dispatcher
    app.state.identity = identity

    add_cors_middleware(app)
    app.include_router(mcp_router, prefix=config.MCP_PATH)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": config.MCP_SERVER_VERSION,
            "sessions": len(request.app.state.session_manager),
            "tasks": request.app.state.store.count(),
        }

    @app.get("/")
    async def root():
        """Root endpoint - server identity."""
        return {
            "name": identity.name,
            "version": identity.version,
            "mcp": config.MCP_PATH,
            "websocket": f"{config.MCP_PATH}/ws",
            "health": "/health",
        }

    @app.get("/metrics")
    async def get_metrics(request: Request):
        """Counters snapshot."""
        return request.app.state.metrics.get_metrics()

    return app


configure_logging(config.LOG_LEVEL)
app = create_app()


def run():
    """Console entry point."""
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
