"""
Unit tests for LoginRateLimiter.
Tests threshold, lockout window and reset behaviour against a fake clock.
"""
import pytest

from pizza_auth.core.exceptions import TooManyAttemptsError
from pizza_auth.services.auth.rate_limiter import LockoutPolicy, LoginRateLimiter

IDENTITY = "a@x.com"


@pytest.mark.unit
class TestLockoutPolicy:

    def test_defaults(self):
        policy = LockoutPolicy()

        assert policy.max_attempts == 5
        assert policy.lockout_seconds == 900


@pytest.mark.unit
class TestLoginRateLimiter:
    """Test LoginRateLimiter functionality."""

    @pytest.mark.asyncio
    async def test_unknown_identity_allowed(self, rate_limiter):
        await rate_limiter.check_allowed(IDENTITY)

        assert rate_limiter.get_attempts(IDENTITY) is None

    @pytest.mark.asyncio
    async def test_record_failure_creates_then_increments(self, rate_limiter, clock):
        first = await rate_limiter.record_failure(IDENTITY)
        clock.advance(10)
        second = await rate_limiter.record_failure(IDENTITY)

        assert first.count == 1
        assert second.count == 2
        assert second.last_attempt == clock()

    @pytest.mark.asyncio
    async def test_below_threshold_allowed(self, rate_limiter):
        for _ in range(4):
            await rate_limiter.record_failure(IDENTITY)

        await rate_limiter.check_allowed(IDENTITY)

    @pytest.mark.asyncio
    async def test_threshold_blocks_within_window(self, rate_limiter, clock):
        for _ in range(5):
            await rate_limiter.record_failure(IDENTITY)

        clock.advance(899)
        with pytest.raises(TooManyAttemptsError) as exc_info:
            await rate_limiter.check_allowed(IDENTITY)

        assert exc_info.value.retry_after == 1

    @pytest.mark.asyncio
    async def test_window_elapsed_purges_record(self, rate_limiter, clock):
        for _ in range(5):
            await rate_limiter.record_failure(IDENTITY)

        clock.advance(900)
        await rate_limiter.check_allowed(IDENTITY)

        assert rate_limiter.get_attempts(IDENTITY) is None

    @pytest.mark.asyncio
    async def test_window_measured_from_last_failure(self, rate_limiter, clock):
        for _ in range(5):
            await rate_limiter.record_failure(IDENTITY)
            clock.advance(300)

        # 300s since the fifth failure
        with pytest.raises(TooManyAttemptsError):
            await rate_limiter.check_allowed(IDENTITY)

    @pytest.mark.asyncio
    async def test_record_success_clears_unconditionally(self, rate_limiter):
        for _ in range(5):
            await rate_limiter.record_failure(IDENTITY)

        await rate_limiter.record_success(IDENTITY)
        await rate_limiter.record_success("never-seen@example.com")

        await rate_limiter.check_allowed(IDENTITY)
        assert rate_limiter.get_attempts(IDENTITY) is None

    @pytest.mark.asyncio
    async def test_identities_are_independent(self, rate_limiter):
        for _ in range(5):
            await rate_limiter.record_failure(IDENTITY)

        await rate_limiter.check_allowed("other@x.com")

    @pytest.mark.asyncio
    async def test_custom_policy(self, clock):
        limiter = LoginRateLimiter(policy=LockoutPolicy(max_attempts=2, lockout_seconds=60), clock=clock)
        await limiter.record_failure(IDENTITY)
        await limiter.record_failure(IDENTITY)

        with pytest.raises(TooManyAttemptsError) as exc_info:
            await limiter.check_allowed(IDENTITY)
        assert exc_info.value.retry_after == 60

        clock.advance(60)
        await limiter.check_allowed(IDENTITY)

    @pytest.mark.asyncio
    async def test_acquire_attempt_counts_before_outcome(self, rate_limiter):
        first = await rate_limiter.acquire_attempt(IDENTITY)
        second = await rate_limiter.acquire_attempt(IDENTITY)

        assert first.count == 1
        assert second.count == 2
        assert rate_limiter.get_attempts(IDENTITY).count == 2

    @pytest.mark.asyncio
    async def test_acquire_attempt_refuses_past_threshold(self, rate_limiter):
        for _ in range(5):
            await rate_limiter.acquire_attempt(IDENTITY)

        with pytest.raises(TooManyAttemptsError) as exc_info:
            await rate_limiter.acquire_attempt(IDENTITY)

        assert exc_info.value.retry_after == 900
        assert rate_limiter.get_attempts(IDENTITY).count == 5

    @pytest.mark.asyncio
    async def test_acquire_attempt_released_by_success(self, rate_limiter):
        for _ in range(4):
            await rate_limiter.acquire_attempt(IDENTITY)

        await rate_limiter.record_success(IDENTITY)

        assert (await rate_limiter.acquire_attempt(IDENTITY)).count == 1

    @pytest.mark.asyncio
    async def test_acquire_attempt_after_window(self, rate_limiter, clock):
        for _ in range(5):
            await rate_limiter.acquire_attempt(IDENTITY)

        clock.advance(900)

        assert (await rate_limiter.acquire_attempt(IDENTITY)).count == 1
