"""Configuration for the Task Manager MCP Server."""
import os
from dotenv import load_dotenv

# Load environment variables from a local .env file when present
load_dotenv()

# Server identity advertised during the initialize handshake
MCP_SERVER_NAME = os.environ.get("MCP_SERVER_NAME", "task-manager")
MCP_SERVER_VERSION = os.environ.get("MCP_SERVER_VERSION", "0.1.0")
MCP_INSTRUCTIONS = os.environ.get(
    "MCP_INSTRUCTIONS",
    "A task manager MCP server that allows you to add, complete, list, "
    "and retrieve tasks with real-time updates.",
)

# Streamable HTTP endpoint; the WebSocket endpoint lives at f"{MCP_PATH}/ws"
MCP_PATH = os.environ.get("MCP_PATH", "/mcp")

# Seconds without activity before a session is reclaimed
SESSION_IDLE_TIMEOUT = float(os.environ.get("SESSION_IDLE_TIMEOUT", "300"))
# Seconds between idle-session sweeps
SESSION_REAP_INTERVAL = float(os.environ.get("SESSION_REAP_INTERVAL", "30"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
