"""
Per-identity login lockout.

Failures are counted per email, not per source address. An attacker can lock
a known account out, and attempts spread over many accounts are not slowed.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional
import structlog

from ...core.exceptions import TooManyAttemptsError
from ...core.security import utcnow
from ...models.user import LoginAttemptRecord

logger = structlog.get_logger()


@dataclass
class LockoutPolicy:
    """Lockout configuration."""
    max_attempts: int = 5
    lockout_seconds: int = 15 * 60


class LoginRateLimiter:
    """Tracks failed sign-ins per identity and enforces a temporary lockout."""

    def __init__(
        self,
        policy: Optional[LockoutPolicy] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.policy = policy or LockoutPolicy()
        self.clock = clock
        self._attempts: Dict[str, LoginAttemptRecord] = {}
        self._lock = asyncio.Lock()

    @property
    def lockout_window(self) -> timedelta:
        return timedelta(seconds=self.policy.lockout_seconds)

    async def check_allowed(self, identity: str) -> None:
        """
        Raises:
            TooManyAttemptsError: While the identity is locked out
        """
        async with self._lock:
            self._ensure_allowed(identity)

    async def record_failure(self, identity: str) -> LoginAttemptRecord:
        async with self._lock:
            return self._increment(identity)

    async def acquire_attempt(self, identity: str) -> LoginAttemptRecord:
        """
        Check the lockout and count the attempt in one locked step.

        The attempt is counted as a failure up front; ``record_success``
        clears it. Concurrent callers therefore cannot all pass the check
        before any of them is counted.

        Raises:
            TooManyAttemptsError: While the identity is locked out
        """
        async with self._lock:
            self._ensure_allowed(identity)
            return self._increment(identity)

    def _ensure_allowed(self, identity: str) -> None:
        record = self._attempts.get(identity)
        if record is None or record.count < self.policy.max_attempts:
            return

        elapsed = self.clock() - record.last_attempt
        if elapsed < self.lockout_window:
            retry_after = max(1, int((self.lockout_window - elapsed).total_seconds()))
            logger.warning("Login blocked by lockout", retry_after=retry_after)
            raise TooManyAttemptsError(retry_after=retry_after)

        # Window elapsed; start counting from zero
        del self._attempts[identity]

    def _increment(self, identity: str) -> LoginAttemptRecord:
        record = self._attempts.get(identity)
        if record is None:
            record = LoginAttemptRecord(identity=identity, count=0)
            self._attempts[identity] = record
        record.count += 1
        record.last_attempt = self.clock()

        return LoginAttemptRecord(
            identity=record.identity,
            count=record.count,
            last_attempt=record.last_attempt
        )

    async def record_success(self, identity: str) -> None:
        async with self._lock:
            self._attempts.pop(identity, None)

    def get_attempts(self, identity: str) -> Optional[LoginAttemptRecord]:
        return self._attempts.get(identity)

    def is_threshold_reached(self, record: LoginAttemptRecord) -> bool:
        return record.count >= self.policy.max_attempts

    async def reset(self) -> None:
        async with self._lock:
            self._attempts.clear()
