"""CORS configuration for browser-based MCP clients."""
from fastapi.middleware.cors import CORSMiddleware
import logging

from task_manager.config import ENVIRONMENT, FRONTEND_URL

logger = logging.getLogger(__name__)

# Base allowed origins for development
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# Add production frontend URL if provided
if FRONTEND_URL and FRONTEND_URL not in ALLOWED_ORIGINS:
    ALLOWED_ORIGINS.append(FRONTEND_URL)

# Browser clients must be able to read the session id assigned on initialize
EXPOSED_HEADERS = ["Mcp-Session-Id"]


def add_cors_middleware(app):
    """Add CORS middleware to the FastAPI application."""
    if ENVIRONMENT == "production":
        logger.info(f"[PROD] Using production CORS with origin: {FRONTEND_URL}")
        origins = [FRONTEND_URL] if FRONTEND_URL else []
    else:
        logger.info(f"[DEV] Using development CORS with origins: {ALLOWED_ORIGINS}")
        origins = ALLOWED_ORIGINS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=EXPOSED_HEADERS,
    )
