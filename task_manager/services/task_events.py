"""Task change events fanned out to in-process subscribers."""
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List
import logging

logger = logging.getLogger(__name__)

TASK_CREATED = "task.created"
TASK_COMPLETED = "task.completed"

EventHandler = Callable[[Dict[str, Any]], None]


class TaskEventPublisher:
    """Publishes task change events to registered subscribers."""

    def __init__(self, source: str = "task-manager"):
        self.source = source
        self._subscribers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        """Register a callback invoked with every event envelope."""
        self._subscribers.append(handler)

    def publish_event(self, event_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Publish an event to every subscriber.

        A failing subscriber is logged and skipped; publishing never fails
        the operation that produced the event.
        """
        event_envelope = {
            "event_id": str(uuid.uuid4()),
            "type": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": self.source,
            "data": data
        }

        for handler in list(self._subscribers):
            try:
                handler(event_envelope)
            except Exception as e:
                logger.error(f"Subscriber failed for event {event_type}: {str(e)}")

        logger.debug(f"Published event {event_type} to {len(self._subscribers)} subscribers")
        return event_envelope

    def publish_task_created(self, task_data: Dict[str, Any]):
        """Publish task.created event."""
        return self.publish_event(TASK_CREATED, task_data)

    def publish_task_completed(self, task_data: Dict[str, Any]):
        """Publish task.completed event."""
        return self.publish_event(TASK_COMPLETED, task_data)
