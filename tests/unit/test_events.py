"""
Unit tests for the event bus and event handlers.
"""
from datetime import datetime, timezone

import pytest

from pizza_auth.events.auth_events import (
    EmailVerificationRequestedEvent,
    LoginFailedEvent,
    PasswordResetInitiatedEvent,
    UserCreatedEvent,
)
from pizza_auth.events.event_bus import InMemoryEventBus
from pizza_auth.events.handlers import AuditEventHandler, NotificationEventHandler, mask_email


@pytest.mark.unit
class TestBaseEvent:

    def test_event_type_and_data(self):
        event = UserCreatedEvent(user_id="u1", email="a@x.com")

        assert event.event_type == "UserCreatedEvent"
        assert event.data == {"user_id": "u1", "email": "a@x.com"}
        assert event.correlation_id
        assert event.timestamp.tzinfo is not None

    def test_to_dict_includes_system_fields(self):
        event = LoginFailedEvent(email="a@x.com", reason="invalid_password")

        payload = event.to_dict()

        assert payload["event_type"] == "LoginFailedEvent"
        assert payload["correlation_id"] == event.correlation_id
        assert payload["data"]["reason"] == "invalid_password"


@pytest.mark.unit
class TestInMemoryEventBus:

    @pytest.mark.asyncio
    async def test_publish_reaches_typed_and_global_handlers(self):
        bus = InMemoryEventBus()
        typed, everything = [], []

        async def on_created(event):
            typed.append(event)

        async def on_any(event):
            everything.append(event)

        await bus.subscribe("UserCreatedEvent", on_created)
        await bus.subscribe_to_all(on_any)

        await bus.publish(UserCreatedEvent(user_id="u1", email="a@x.com"))
        await bus.publish(LoginFailedEvent(email="a@x.com", reason="invalid_password"))

        assert len(typed) == 1
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_reach_publisher(self):
        bus = InMemoryEventBus()
        received = []

        async def broken(event):
            raise RuntimeError("smtp down")

        async def working(event):
            received.append(event)

        await bus.subscribe("UserCreatedEvent", broken)
        await bus.subscribe("UserCreatedEvent", working)

        assert await bus.publish(UserCreatedEvent(user_id="u1", email="a@x.com")) is True
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_duplicate_subscription_and_clear(self):
        bus = InMemoryEventBus()
        received = []

        async def handler(event):
            received.append(event)

        await bus.subscribe("UserCreatedEvent", handler)
        await bus.subscribe("UserCreatedEvent", handler)

        await bus.publish(UserCreatedEvent(user_id="u1", email="a@x.com"))
        assert len(received) == 1

        await bus.clear()
        await bus.publish(UserCreatedEvent(user_id="u2", email="b@x.com"))
        assert len(received) == 1


@pytest.mark.unit
class TestHandlers:

    def test_mask_email(self):
        assert mask_email("alice@example.com") == "a***@example.com"
        assert mask_email("not-an-email") == "***"

    def test_links_use_frontend_base_url(self):
        handler = NotificationEventHandler("http://localhost:3002/")

        assert handler.verification_link("abc") == "http://localhost:3002/auth/verify-email?token=abc"
        assert handler.reset_link("abc") == "http://localhost:3002/auth/reset-password?token=abc"

    @pytest.mark.asyncio
    async def test_notification_handler_builds_mail_links(self):
        handler = NotificationEventHandler("http://localhost:3002")

        verify_link = await handler.handle_verification_requested(EmailVerificationRequestedEvent(
            user_id="u1", email="a@x.com", verification_token="vt"
        ))
        reset_link = await handler.handle_password_reset_initiated(PasswordResetInitiatedEvent(
            user_id="u1",
            email="a@x.com",
            reset_token="rt",
            expires_at=datetime(2024, 6, 1, 13, 0, tzinfo=timezone.utc)
        ))

        assert verify_link == "http://localhost:3002/auth/verify-email?token=vt"
        assert reset_link == "http://localhost:3002/auth/reset-password?token=rt"

    @pytest.mark.asyncio
    async def test_notification_handler_keeps_no_tokens(self):
        handler = NotificationEventHandler("http://localhost:3002")

        for i in range(50):
            await handler.handle_verification_requested(EmailVerificationRequestedEvent(
                user_id="u1", email="a@x.com", verification_token=f"vt{i}"
            ))

        assert vars(handler) == {"frontend_base_url": "http://localhost:3002"}

    @pytest.mark.asyncio
    async def test_notification_handler_ignores_other_events(self):
        handler = NotificationEventHandler("http://localhost:3002")

        assert await handler.handle_verification_requested(UserCreatedEvent(user_id="u1", email="a@x.com")) is None
        assert await handler.handle_password_reset_initiated(UserCreatedEvent(user_id="u1", email="a@x.com")) is None

    @pytest.mark.asyncio
    async def test_audit_handler_accepts_every_event(self):
        handler = AuditEventHandler()

        await handler.handle_event(UserCreatedEvent(user_id="u1", email="a@x.com"))
        await handler.handle_event(EmailVerificationRequestedEvent(
            user_id="u1", email="a@x.com", verification_token="vt"
        ))
