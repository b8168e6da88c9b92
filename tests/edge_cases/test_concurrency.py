"""
Race-condition tests.
Concurrent requests against the same account must leave state consistent.
"""
import asyncio

import pytest

from pizza_auth.core.exceptions import (
    DuplicateEmailError,
    InvalidOrExpiredTokenError,
    TooManyAttemptsError,
)
from pizza_auth.events.auth_events import AccountLockedEvent


@pytest.mark.edge_case
class TestConcurrentAccess:

    @pytest.mark.asyncio
    async def test_concurrent_signup_same_email(self, credential_service, user_repository):
        results = await asyncio.gather(
            *(credential_service.create_user("race@x.com", "Secret123!", "Racer") for _ in range(10)),
            return_exceptions=True
        )

        created = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, DuplicateEmailError)]
        assert len(created) == 1
        assert len(rejected) == 9
        assert await user_repository.count() == 1

    @pytest.mark.asyncio
    async def test_concurrent_verification_consume(self, credential_service, token_service):
        user = await credential_service.create_user("a@x.com", "Secret123!", "A")

        results = await asyncio.gather(
            *(token_service.consume_verification_token(user.verification_token) for _ in range(5)),
            return_exceptions=True
        )

        assert sum(1 for r in results if not isinstance(r, Exception)) == 1
        assert sum(1 for r in results if isinstance(r, InvalidOrExpiredTokenError)) == 4

    @pytest.mark.asyncio
    async def test_concurrent_reset_consume(self, credential_service, token_service):
        await credential_service.create_user("a@x.com", "Secret123!", "A")
        token = await token_service.issue_reset_token("a@x.com")
        passwords = [f"NewSecret{i}00!" for i in range(5)]

        results = await asyncio.gather(
            *(token_service.consume_reset_token(token, password) for password in passwords)
        )

        assert results.count(True) == 1
        winner = passwords[results.index(True)]
        assert await credential_service.verify_password("a@x.com", winner) is not None

    @pytest.mark.asyncio
    async def test_concurrent_failures_counted_exactly(self, credential_service, rate_limiter, event_bus):
        await credential_service.create_user("a@x.com", "Secret123!", "A")

        await asyncio.gather(
            *(credential_service.verify_password("a@x.com", "Wrong123!") for _ in range(4))
        )

        assert rate_limiter.get_attempts("a@x.com").count == 4
        assert event_bus.of_type(AccountLockedEvent) == []

    @pytest.mark.asyncio
    async def test_concurrent_guesses_cannot_bypass_lockout(self, credential_service, event_bus):
        await credential_service.create_user("a@x.com", "Secret123!", "A")
        guesses = [f"Guess{i:02d}!x" for i in range(30)] + ["Secret123!"]

        results = await asyncio.gather(
            *(credential_service.verify_password("a@x.com", guess) for guess in guesses),
            return_exceptions=True
        )

        blocked = [r for r in results if isinstance(r, TooManyAttemptsError)]
        evaluated = [r for r in results if not isinstance(r, Exception)]
        assert len(evaluated) <= 5
        assert len(blocked) >= len(guesses) - 5
        assert len(event_bus.of_type(AccountLockedEvent)) <= 1

    @pytest.mark.asyncio
    async def test_concurrent_wrong_guesses_lock_the_account(self, credential_service, rate_limiter):
        await credential_service.create_user("a@x.com", "Secret123!", "A")

        results = await asyncio.gather(
            *(credential_service.verify_password("a@x.com", "Wrong123!") for _ in range(10)),
            return_exceptions=True
        )

        assert sum(1 for r in results if isinstance(r, TooManyAttemptsError)) == 5
        assert rate_limiter.get_attempts("a@x.com").count == 5
        with pytest.raises(TooManyAttemptsError):
            await credential_service.verify_password("a@x.com", "Secret123!")

    @pytest.mark.asyncio
    async def test_concurrent_email_change_to_same_address(self, credential_service):
        from pizza_auth.models.user import UserUpdate

        first = await credential_service.create_user("one@x.com", "Secret123!", "A")
        second = await credential_service.create_user("two@x.com", "Secret123!", "B")

        results = await asyncio.gather(
            credential_service.update_user(first.id, UserUpdate(email="shared@x.com")),
            credential_service.update_user(second.id, UserUpdate(email="shared@x.com")),
            return_exceptions=True
        )

        assert sum(1 for r in results if isinstance(r, DuplicateEmailError)) == 1
        owner = await credential_service.find_by_email("shared@x.com")
        assert owner.id in (first.id, second.id)
