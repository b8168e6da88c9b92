"""
Event system interfaces for dependency abstraction.
Defines contracts for the in-process event bus so services can publish
without knowing who listens.
"""

from typing import Any, Dict, Protocol, runtime_checkable, Callable, Awaitable
from datetime import datetime
from abc import ABC, abstractmethod


class IEvent(ABC):
    """Base interface for all events."""

    correlation_id: str
    timestamp: datetime

    @property
    @abstractmethod
    def event_type(self) -> str:
        """Event type identifier."""
        ...

    @property
    @abstractmethod
    def data(self) -> Dict[str, Any]:
        """Event data payload."""
        ...


EventHandler = Callable[[IEvent], Awaitable[None]]


@runtime_checkable
class IEventBus(Protocol):
    """Protocol for event bus operations."""

    async def publish(self, event: IEvent) -> bool:
        """
        Publish an event to every subscribed handler.

        Args:
            event: Event to publish

        Returns:
            True if published successfully, False otherwise
        """
        ...

    async def subscribe(self, event_type: str, handler: EventHandler) -> bool:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Type of events to subscribe to
            handler: Async function to handle events

        Returns:
            True if subscription successful, False otherwise
        """
        ...

    async def subscribe_to_all(self, handler: EventHandler) -> bool:
        """Subscribe a handler to every event type."""
        ...
