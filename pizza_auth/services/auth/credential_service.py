"""
Credential service: user creation, lookup, update and password verification.
Hashing runs off the event loop; storage invariants are enforced by the repository.
"""

from typing import Optional
import structlog

from ...core.exceptions import DuplicateEmailError, TooManyAttemptsError
from ...core.security import SecurityService
from ...interfaces.event_interface import IEventBus
from ...interfaces.repository_interface import IUserRepository
from ...models.user import UserRecord, UserUpdate
from .rate_limiter import LoginRateLimiter

logger = structlog.get_logger()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialService:
    """Service responsible for user identity and credential state."""

    def __init__(
        self,
        user_repository: IUserRepository,
        rate_limiter: LoginRateLimiter,
        event_bus: IEventBus
    ):
        self.user_repository = user_repository
        self.rate_limiter = rate_limiter
        self.event_bus = event_bus

    async def hash_password(self, password: str) -> str:
        return await SecurityService.hash_password_async(password)

    async def create_user(self, email: str, password: str, name: str) -> UserRecord:
        """
        Register a new, unverified user with a pending verification token.

        Args:
            email: User email (unique)
            password: Plaintext password, hashed before storage
            name: Display name

        Returns:
            Created user

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        email = normalize_email(email)

        # Cheap early exit; the repository re-checks atomically on insert
        if await self.user_repository.exists_by_email(email):
            raise DuplicateEmailError()

        user = UserRecord(
            id=SecurityService.generate_user_id(),
            email=email,
            name=name.strip(),
            password_hash=await self.hash_password(password),
            email_verified=False,
            verification_token=SecurityService.generate_token(),
        )
        user = await self.user_repository.add(user)

        from ...events.auth_events import UserCreatedEvent, EmailVerificationRequestedEvent
        await self.event_bus.publish(UserCreatedEvent(user_id=user.id, email=user.email))
        await self.event_bus.publish(EmailVerificationRequestedEvent(
            user_id=user.id,
            email=user.email,
            verification_token=user.verification_token,
            is_resend=False
        ))

        logger.info("User created successfully", user_id=user.id)
        return user

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return await self.user_repository.get_by_email(normalize_email(email))

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return await self.user_repository.get_by_id(user_id)

    async def update_user(self, user_id: str, update: UserUpdate) -> Optional[UserRecord]:
        """
        Apply a typed update. Returns None if the user does not exist.

        Raises:
            DuplicateEmailError: If the new email belongs to another user
        """
        if isinstance(update.email, str):
            update.email = normalize_email(update.email)
        return await self.user_repository.update(user_id, update)

    async def verify_password(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None
    ) -> Optional[UserRecord]:
        """
        Check a sign-in attempt.

        The lockout is consulted, and the attempt counted, before any hash
        comparison. Unknown email and wrong password both return None and both
        count as a failure.

        Returns:
            The user on success, otherwise None

        Raises:
            TooManyAttemptsError: While the email is locked out
        """
        email = normalize_email(email)

        try:
            attempts = await self.rate_limiter.acquire_attempt(email)
        except TooManyAttemptsError:
            await self._publish_login_failed(email, "locked_out", ip_address)
            raise

        user = await self.user_repository.get_by_email(email)
        stored_hash = user.password_hash if user else None
        is_valid = await SecurityService.verify_password_async(password, stored_hash)

        if user is None or not is_valid:
            await self._publish_login_failed(
                email,
                "user_not_found" if user is None else "invalid_password",
                ip_address
            )
            if self.rate_limiter.is_threshold_reached(attempts):
                from ...events.auth_events import AccountLockedEvent
                await self.event_bus.publish(AccountLockedEvent(
                    email=email,
                    failed_attempts=attempts.count,
                    lockout_seconds=self.rate_limiter.policy.lockout_seconds
                ))
            return None

        await self.rate_limiter.record_success(email)
        return user

    async def _publish_login_failed(
        self,
        email: str,
        reason: str,
        ip_address: Optional[str]
    ) -> None:
        from ...events.auth_events import LoginFailedEvent
        await self.event_bus.publish(LoginFailedEvent(
            email=email,
            reason=reason,
            ip_address=ip_address
        ))
