"""
Verification and password-reset token lifecycle.

Verification tokens never expire and are single-use. Reset tokens are
single-use and expire a fixed time after issuance. Issuing a new token of
either kind invalidates the previous one.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional
import structlog

from ...core.exceptions import InvalidOrExpiredTokenError, NotFoundError
from ...core.security import SecurityService, utcnow
from ...interfaces.event_interface import IEventBus
from ...interfaces.repository_interface import IUserRepository
from ...models.user import UserRecord
from .credential_service import CredentialService, normalize_email

logger = structlog.get_logger()


class TokenLifecycleService:
    """Issues and redeems email verification and password reset tokens."""

    def __init__(
        self,
        user_repository: IUserRepository,
        credential_service: CredentialService,
        event_bus: IEventBus,
        reset_token_ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = utcnow
    ):
        self.user_repository = user_repository
        self.credential_service = credential_service
        self.event_bus = event_bus
        self.reset_token_ttl = timedelta(seconds=reset_token_ttl_seconds)
        self.clock = clock

    async def issue_verification_token(self, user: UserRecord) -> str:
        """
        Replace the user's pending verification token with a fresh one.

        Raises:
            NotFoundError: If the user no longer exists
            AlreadyVerifiedError: If the email is already verified
        """
        token = SecurityService.generate_token()
        if await self.user_repository.set_verification_token(user.id, token) is None:
            raise NotFoundError()

        logger.info("Verification token issued", user_id=user.id)
        return token

    async def resend_verification_email(self, email: str) -> str:
        """
        Issue a new verification token for ``email`` and request delivery.

        Raises:
            NotFoundError: If no user has this email
            AlreadyVerifiedError: If the email is already verified
        """
        user = await self.user_repository.get_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError()

        token = await self.issue_verification_token(user)

        from ...events.auth_events import EmailVerificationRequestedEvent
        await self.event_bus.publish(EmailVerificationRequestedEvent(
            user_id=user.id,
            email=user.email,
            verification_token=token,
            is_resend=True
        ))
        return token

    async def consume_verification_token(self, token: str) -> UserRecord:
        """
        Redeem a verification token.

        Returns:
            The user, now verified and without a pending token

        Raises:
            InvalidOrExpiredTokenError: If no user holds this token
        """
        if not token:
            raise InvalidOrExpiredTokenError()

        user = await self.user_repository.consume_verification_token(token)
        if user is None:
            raise InvalidOrExpiredTokenError()

        from ...events.auth_events import EmailVerifiedEvent
        await self.event_bus.publish(EmailVerifiedEvent(user_id=user.id, email=user.email))

        logger.info("Email verified successfully", user_id=user.id)
        return user

    async def issue_reset_token(self, email: str) -> Optional[str]:
        """
        Issue a reset token valid for the configured lifetime.

        Returns:
            The token, or None if the email is unknown. Callers must respond
            identically in both cases.
        """
        token = SecurityService.generate_token()
        expires_at = self.clock() + self.reset_token_ttl

        user = await self.user_repository.set_reset_token(normalize_email(email), token, expires_at)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None

        from ...events.auth_events import PasswordResetInitiatedEvent
        await self.event_bus.publish(PasswordResetInitiatedEvent(
            user_id=user.id,
            email=user.email,
            reset_token=token,
            expires_at=expires_at
        ))

        logger.info("Password reset initiated", user_id=user.id)
        return token

    async def consume_reset_token(self, token: str, new_password: str) -> bool:
        """
        Set a new password using a reset token.

        The new hash is computed first, then the token check, expiry check,
        hash swap and token clear happen in one repository step.

        Returns:
            True on success; False for unknown, used or expired tokens alike
        """
        if not token:
            return False

        new_hash = await self.credential_service.hash_password(new_password)
        user = await self.user_repository.consume_reset_token(token, self.clock(), new_hash)
        if user is None:
            logger.info("Password reset rejected")
            return False

        from ...events.auth_events import PasswordResetCompletedEvent
        await self.event_bus.publish(PasswordResetCompletedEvent(user_id=user.id))

        logger.info("Password reset completed successfully", user_id=user.id)
        return True
