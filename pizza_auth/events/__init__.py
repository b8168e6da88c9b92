"""
Domain events published by the auth services.
"""

from .base_event import BaseEvent
from .event_bus import InMemoryEventBus
from .auth_events import (
    UserCreatedEvent,
    EmailVerificationRequestedEvent,
    EmailVerifiedEvent,
    PasswordResetInitiatedEvent,
    PasswordResetCompletedEvent,
    LoginSucceededEvent,
    LoginFailedEvent,
    AccountLockedEvent,
)
from .handlers import NotificationEventHandler, AuditEventHandler

__all__ = [
    "BaseEvent",
    "InMemoryEventBus",
    "UserCreatedEvent",
    "EmailVerificationRequestedEvent",
    "EmailVerifiedEvent",
    "PasswordResetInitiatedEvent",
    "PasswordResetCompletedEvent",
    "LoginSucceededEvent",
    "LoginFailedEvent",
    "AccountLockedEvent",
    "NotificationEventHandler",
    "AuditEventHandler",
]
