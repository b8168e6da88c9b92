"""
Event handlers for outgoing email and audit logging.

Email delivery is simulated: the handler logs the link a user would receive.
"""

from typing import Optional
from urllib.parse import urlencode
import structlog

from ..interfaces.event_interface import IEvent
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

logger = structlog.get_logger()


def mask_email(email: str) -> str:
    """a***@example.com"""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


class NotificationEventHandler:
    """Turns verification and reset events into (logged) emails."""

    def __init__(self, frontend_base_url: str):
        self.frontend_base_url = frontend_base_url.rstrip("/")

    def verification_link(self, token: str) -> str:
        return f"{self.frontend_base_url}/auth/verify-email?{urlencode({'token': token})}"

    def reset_link(self, token: str) -> str:
        return f"{self.frontend_base_url}/auth/reset-password?{urlencode({'token': token})}"

    async def handle_verification_requested(self, event: IEvent) -> Optional[str]:
        if not isinstance(event, EmailVerificationRequestedEvent):
            return None
        link = self.verification_link(event.verification_token)
        logger.info(
            "Verification email sent",
            email=event.email,
            link=link,
            is_resend=event.is_resend
        )
        return link

    async def handle_password_reset_initiated(self, event: IEvent) -> Optional[str]:
        if not isinstance(event, PasswordResetInitiatedEvent):
            return None
        link = self.reset_link(event.reset_token)
        logger.info(
            "Password reset email sent",
            email=event.email,
            link=link,
            expires_at=event.expires_at.isoformat()
        )
        return link


class AuditEventHandler:
    """Writes a structured audit line for every security-relevant event."""

    async def handle_event(self, event: IEvent) -> None:
        if isinstance(event, UserCreatedEvent):
            logger.info("audit.user_created", user_id=event.user_id, email=mask_email(event.email))
        elif isinstance(event, EmailVerifiedEvent):
            logger.info("audit.email_verified", user_id=event.user_id)
        elif isinstance(event, PasswordResetCompletedEvent):
            logger.info("audit.password_reset_completed", user_id=event.user_id)
        elif isinstance(event, LoginSucceededEvent):
            logger.info("audit.login_succeeded", user_id=event.user_id, ip_address=event.ip_address)
        elif isinstance(event, LoginFailedEvent):
            logger.warning(
                "audit.login_failed",
                email=mask_email(event.email),
                reason=event.reason,
                ip_address=event.ip_address
            )
        elif isinstance(event, AccountLockedEvent):
            logger.warning(
                "audit.account_locked",
                email=mask_email(event.email),
                failed_attempts=event.failed_attempts,
                lockout_seconds=event.lockout_seconds
            )
        else:
            # Token-bearing events are logged without their payload
            logger.debug("audit.event", event_type=event.event_type, correlation_id=event.correlation_id)
