"""
Authentication-related events for notifications and audit logging.
These events decouple the credential services from email delivery and audit concerns.
"""

from typing import Optional
from dataclasses import dataclass
from datetime import datetime

from .base_event import BaseEvent


@dataclass
class UserCreatedEvent(BaseEvent):
    """Event published when a new user signs up."""

    user_id: str
    email: str


@dataclass
class EmailVerificationRequestedEvent(BaseEvent):
    """Event published when a verification link must be sent."""

    user_id: str
    email: str
    verification_token: str
    is_resend: bool = False


@dataclass
class EmailVerifiedEvent(BaseEvent):
    """Event published when email is successfully verified."""

    user_id: str
    email: str


@dataclass
class PasswordResetInitiatedEvent(BaseEvent):
    """Event published when a reset token was issued for a known email."""

    user_id: str
    email: str
    reset_token: str
    expires_at: datetime


@dataclass
class PasswordResetCompletedEvent(BaseEvent):
    user_id: str


@dataclass
class LoginSucceededEvent(BaseEvent):
    user_id: str
    ip_address: Optional[str] = None


@dataclass
class LoginFailedEvent(BaseEvent):
    """Event published when a sign-in attempt fails."""

    email: str
    reason: str
    ip_address: Optional[str] = None


@dataclass
class AccountLockedEvent(BaseEvent):
    """Event published when an identity reaches the failed-attempt threshold."""

    email: str
    failed_attempts: int
    lockout_seconds: int
