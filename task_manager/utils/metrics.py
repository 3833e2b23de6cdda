"""
Metrics Collection for the Task Manager server.

Counts tool invocations, tool failures and session lifecycle events.
"""

from typing import Dict, Any
from collections import defaultdict
from datetime import datetime, timezone
import threading


class MetricsCollector:
    """Collects and manages counters for the MCP server."""

    def __init__(self):
        """Initialize metrics collector."""
        self.metrics = defaultdict(int)
        self.lock = threading.Lock()

        # Initialize counters
        self.metrics["tool_calls_total"] = 0
        self.metrics["tool_errors_total"] = 0
        self.metrics["sessions_opened_total"] = 0
        self.metrics["sessions_closed_total"] = 0

    def increment_counter(self, metric_name: str, value: int = 1):
        """Increment a counter metric."""
        with self.lock:
            self.metrics[metric_name] += value

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics values."""
        with self.lock:
            return {
                "counters": dict(self.metrics),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

    def tool_called(self, tool_name: str):
        """Record a tool invocation."""
        with self.lock:
            self.metrics["tool_calls_total"] += 1
            self.metrics[f"tool_calls.{tool_name}"] += 1

    def tool_failed(self, tool_name: str):
        """Record a failed tool invocation."""
        with self.lock:
            self.metrics["tool_errors_total"] += 1
            self.metrics[f"tool_errors.{tool_name}"] += 1

    def session_opened(self):
        """Record that a session was created."""
        self.increment_counter("sessions_opened_total")

    def session_closed(self):
        """Record that a session reached the Closed state."""
        self.increment_counter("sessions_closed_total")
