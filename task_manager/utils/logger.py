"""
Logging Utility for the Task Manager server.

Configures the root handler and provides a structured logger for
session lifecycle events.
"""

import logging
import sys
from datetime import datetime, timezone
import json

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO") -> None:
    """
    Install a stdout handler on the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, ...)
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Prevent adding handlers multiple times (uvicorn reload, tests)
    if any(getattr(handler, "_task_manager", False) for handler in root.handlers):
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler._task_manager = True
    root.addHandler(console_handler)


class StructuredLogger:
    """Structured logger emitting one JSON document per event."""

    def __init__(self, name: str, level: int = logging.INFO):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            level: Logging level
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

    def _log_structured(self, level: int, message: str, **kwargs):
        """
        Log a structured message.

        Args:
            level: Logging level
            message: Log message
            **kwargs: Additional structured data
        """
        if self.logger.isEnabledFor(level):
            log_data = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": logging.getLevelName(level),
                "message": message,
                "service": self.logger.name
            }
            log_data.update(kwargs)

            self.logger.log(level, json.dumps(log_data, default=str))

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log_structured(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._log_structured(logging.WARNING, message, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger for the specified component.

    Args:
        name: Component name

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)
