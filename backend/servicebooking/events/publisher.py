# backend/servicebooking/events/publisher.py
"""Event publisher - queues events for background processing."""
from datetime import datetime
from typing import Any, Dict, Protocol

from ..repositories.job_repository import JobRepository


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


class EventPublisher:
    """Publishes domain events to the job queue for async processing."""

    def __init__(self, job_repository: JobRepository):
        self.job_repo = job_repository

    def publish(self, event: Event) -> str:
        """
        Queue an event for background processing; does NOT commit.

        The job type is ``event:<EventClassName>`` so the worker can route it.
        """
        event_type = type(event).__name__
        payload = event.to_dict()

        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        return self.job_repo.enqueue(type=f"event:{event_type}", payload=payload)
