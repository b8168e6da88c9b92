"""
Service container.
Constructs every stateful component explicitly and disposes of it on shutdown,
so no storage outlives the container that created it.
"""

from datetime import datetime
from typing import Callable, Optional
import structlog

from ..core.config import Settings, settings as default_settings
from ..core.security import utcnow
from ..events.auth_events import EmailVerificationRequestedEvent, PasswordResetInitiatedEvent
from ..events.event_bus import InMemoryEventBus
from ..events.handlers import AuditEventHandler, NotificationEventHandler
from ..models.user import UserUpdate
from ..repositories.user_repository import InMemoryUserRepository
from ..services.auth.authentication_service import AuthenticationService
from ..services.auth.credential_service import CredentialService
from ..services.auth.rate_limiter import LockoutPolicy, LoginRateLimiter
from ..services.auth.token_service import TokenLifecycleService

logger = structlog.get_logger()

DEMO_USER_EMAIL = "demo@example.com"
DEMO_USER_PASSWORD = "Demo123!"
DEMO_USER_NAME = "Demo User"


class Container:
    """Holds the service graph for one application instance."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
        event_bus: Optional[InMemoryEventBus] = None
    ):
        self.settings = settings or default_settings
        self.clock = clock
        self._initialized = False

        self.event_bus = event_bus or InMemoryEventBus()
        self.user_repository = InMemoryUserRepository()
        self.rate_limiter = LoginRateLimiter(
            policy=LockoutPolicy(
                max_attempts=self.settings.LOGIN_MAX_ATTEMPTS,
                lockout_seconds=self.settings.LOGIN_LOCKOUT_SECONDS
            ),
            clock=clock
        )
        self.credential_service = CredentialService(
            user_repository=self.user_repository,
            rate_limiter=self.rate_limiter,
            event_bus=self.event_bus
        )
        self.token_service = TokenLifecycleService(
            user_repository=self.user_repository,
            credential_service=self.credential_service,
            event_bus=self.event_bus,
            reset_token_ttl_seconds=self.settings.RESET_TOKEN_EXPIRE_SECONDS,
            clock=clock
        )
        self.authentication_service = AuthenticationService(
            credential_service=self.credential_service,
            event_bus=self.event_bus
        )
        self.notification_handler = NotificationEventHandler(self.settings.FRONTEND_BASE_URL)
        self.audit_handler = AuditEventHandler()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Subscribe event handlers and seed demo data."""
        if self._initialized:
            return

        await self.event_bus.subscribe(
            EmailVerificationRequestedEvent.__name__,
            self.notification_handler.handle_verification_requested
        )
        await self.event_bus.subscribe(
            PasswordResetInitiatedEvent.__name__,
            self.notification_handler.handle_password_reset_initiated
        )
        await self.event_bus.subscribe_to_all(self.audit_handler.handle_event)

        if self.settings.SEED_DEMO_USER:
            await self.seed_demo_user()

        self._initialized = True
        logger.info("Service container initialized successfully")

    async def seed_demo_user(self) -> None:
        """Create the verified demo account unless it already exists."""
        if await self.credential_service.find_by_email(DEMO_USER_EMAIL):
            return

        user = await self.credential_service.create_user(
            DEMO_USER_EMAIL, DEMO_USER_PASSWORD, DEMO_USER_NAME
        )
        await self.credential_service.update_user(user.id, UserUpdate(email_verified=True))
        logger.info("Demo user created", email=DEMO_USER_EMAIL)

    async def cleanup(self) -> None:
        """Drop all in-memory state."""
        await self.user_repository.clear()
        await self.rate_limiter.reset()
        await self.event_bus.clear()
        self._initialized = False
        logger.info("Container cleanup completed")


# Application container
_container: Optional[Container] = None


def get_container() -> Container:
    """Get the application container, creating it on first use."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Optional[Container]) -> None:
    global _container
    _container = container


async def initialize_container() -> Container:
    container = get_container()
    await container.initialize()
    return container


async def cleanup_container() -> None:
    global _container
    if _container:
        await _container.cleanup()
        _container = None
