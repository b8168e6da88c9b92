"""
Authentication service focused solely on sign-in and session tokens.
"""

from typing import Optional, Tuple
import structlog

from ...core.exceptions import EmailNotVerifiedError, InvalidCredentialsError
from ...core.security import SecurityService
from ...interfaces.event_interface import IEventBus
from ...models.user import UserRecord
from .credential_service import CredentialService

logger = structlog.get_logger()


class AuthenticationService:
    """Service responsible for user authentication operations."""

    def __init__(
        self,
        credential_service: CredentialService,
        event_bus: IEventBus
    ):
        self.credential_service = credential_service
        self.event_bus = event_bus

    async def authenticate_user(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None
    ) -> Tuple[UserRecord, str]:
        """
        Authenticate user and issue a session token.

        Args:
            email: User email
            password: User password
            ip_address: Client IP address

        Returns:
            Tuple of (user, access_token)

        Raises:
            TooManyAttemptsError: If the email is locked out
            InvalidCredentialsError: If the email or password is wrong
            EmailNotVerifiedError: If the password is right but the email is unverified
        """
        user = await self.credential_service.verify_password(email, password, ip_address=ip_address)
        if user is None:
            raise InvalidCredentialsError()

        if not user.email_verified:
            raise EmailNotVerifiedError()

        access_token = SecurityService.create_access_token(
            {"sub": user.id, "email": user.email, "name": user.name}
        )

        from ...events.auth_events import LoginSucceededEvent
        await self.event_bus.publish(LoginSucceededEvent(user_id=user.id, ip_address=ip_address))

        logger.info("User authenticated successfully", user_id=user.id, ip_address=ip_address)
        return user, access_token

    async def validate_token(self, token: str) -> Optional[UserRecord]:
        """
        Validate access token and return user.

        Returns:
            User if the token is valid and the user still exists
        """
        payload = SecurityService.decode_token(token)
        if not payload:
            return None

        user_id = payload.get("sub")
        if not user_id:
            return None

        return await self.credential_service.find_by_id(user_id)
