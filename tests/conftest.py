"""
Pytest configuration and fixtures for auth service testing.
Provides a controllable clock, fresh in-memory services and an app client per test.
"""
import os

# Settings are read once at import time; keep hashing cheap in tests
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SEED_DEMO_USER", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from pizza_auth.container.container import Container, set_container
from pizza_auth.events.auth_events import EmailVerificationRequestedEvent, PasswordResetInitiatedEvent
from pizza_auth.events.event_bus import InMemoryEventBus
from pizza_auth.main import app
from pizza_auth.repositories.user_repository import InMemoryUserRepository
from pizza_auth.services.auth.credential_service import CredentialService
from pizza_auth.services.auth.rate_limiter import LockoutPolicy, LoginRateLimiter
from pizza_auth.services.auth.token_service import TokenLifecycleService


class FakeClock:
    """Deterministic clock; call it for the current time, advance it by seconds."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class RecordingEventBus(InMemoryEventBus):
    """Event bus that also keeps every published event for assertions."""

    def __init__(self):
        super().__init__()
        self.published = []

    async def publish(self, event):
        self.published.append(event)
        return await super().publish(event)

    def of_type(self, event_cls):
        return [e for e in self.published if isinstance(e, event_cls)]

    def last_verification_token(self, email):
        """Token from the most recent verification email sent to ``email``."""
        events = [e for e in self.of_type(EmailVerificationRequestedEvent) if e.email == email]
        return events[-1].verification_token

    def last_reset_token(self, email):
        """Token from the most recent password reset email sent to ``email``."""
        events = [e for e in self.of_type(PasswordResetInitiatedEvent) if e.email == email]
        return events[-1].reset_token


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def event_bus():
    return RecordingEventBus()


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def rate_limiter(clock):
    return LoginRateLimiter(policy=LockoutPolicy(max_attempts=5, lockout_seconds=900), clock=clock)


@pytest.fixture
def credential_service(user_repository, rate_limiter, event_bus):
    return CredentialService(
        user_repository=user_repository,
        rate_limiter=rate_limiter,
        event_bus=event_bus
    )


@pytest.fixture
def token_service(user_repository, credential_service, event_bus, clock):
    return TokenLifecycleService(
        user_repository=user_repository,
        credential_service=credential_service,
        event_bus=event_bus,
        reset_token_ttl_seconds=3600,
        clock=clock
    )


@pytest.fixture
def container(clock, event_bus):
    return Container(clock=clock, event_bus=event_bus)


@pytest.fixture
def client(container):
    """FastAPI test client wired to a fresh container."""
    set_container(container)
    with TestClient(app) as test_client:
        yield test_client
    set_container(None)
