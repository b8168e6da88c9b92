"""
Interface definitions for dependency abstractions.
These Protocol classes define contracts for services to enable dependency injection
and improve testability.
"""

from .event_interface import IEventBus, IEvent, EventHandler
from .repository_interface import IUserRepository

__all__ = [
    "IEventBus",
    "IEvent",
    "EventHandler",
    "IUserRepository"
]
