"""
In-process event bus.
Handlers run concurrently per event; a failing handler is logged and never
reaches the publisher.
"""

import asyncio
from collections import defaultdict
from typing import Dict, List
import structlog

from ..interfaces.event_interface import IEvent, IEventBus, EventHandler

logger = structlog.get_logger()


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", repr(handler))


class InMemoryEventBus(IEventBus):
    """Event bus for a single-process deployment."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._global_handlers: List[EventHandler] = []
        self._lock = asyncio.Lock()

    async def publish(self, event: IEvent) -> bool:
        """
        Publish an event to all registered handlers.

        Returns:
            True once every handler has run, whether or not it succeeded
        """
        event_type = event.event_type
        handlers = list(self._handlers.get(event_type, [])) + list(self._global_handlers)

        if not handlers:
            logger.debug("No handlers registered for event", event_type=event_type)
            return True

        results = await asyncio.gather(
            *(handler(event) for handler in handlers),
            return_exceptions=True
        )

        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(
                    "Event handler failed",
                    event_type=event_type,
                    handler=_handler_name(handler),
                    error=str(result)
                )

        logger.debug(
            "Event published",
            event_type=event_type,
            handler_count=len(handlers),
            correlation_id=event.correlation_id
        )
        return True

    async def subscribe(self, event_type: str, handler: EventHandler) -> bool:
        async with self._lock:
            if handler not in self._handlers[event_type]:
                self._handlers[event_type].append(handler)

        logger.debug("Handler subscribed", event_type=event_type, handler=_handler_name(handler))
        return True

    async def subscribe_to_all(self, handler: EventHandler) -> bool:
        async with self._lock:
            if handler not in self._global_handlers:
                self._global_handlers.append(handler)

        logger.debug("Global handler subscribed", handler=_handler_name(handler))
        return True

    async def clear(self) -> None:
        async with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()
