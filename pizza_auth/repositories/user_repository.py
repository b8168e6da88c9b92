"""
In-memory user repository.
Keeps the primary map plus secondary indexes (email, verification token,
reset token) consistent under a single asyncio lock.
"""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional
import structlog

from ..core.exceptions import AlreadyVerifiedError, DuplicateEmailError
from ..interfaces.repository_interface import IUserRepository
from ..models.user import UserRecord, UserUpdate

logger = structlog.get_logger()


class InMemoryUserRepository(IUserRepository):
    """Process-local user storage; state lives only as long as the instance."""

    def __init__(self):
        self._users: Dict[str, UserRecord] = {}
        self._by_email: Dict[str, str] = {}
        self._by_verification_token: Dict[str, str] = {}
        self._by_reset_token: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def add(self, user: UserRecord) -> UserRecord:
        async with self._lock:
            if user.email in self._by_email:
                raise DuplicateEmailError()

            stored = user.copy()
            self._users[stored.id] = stored
            self._by_email[stored.email] = stored.id
            if stored.verification_token:
                self._by_verification_token[stored.verification_token] = stored.id
            if stored.reset_token:
                self._by_reset_token[stored.reset_token] = stored.id

            logger.info("User stored", user_id=stored.id)
            return stored.copy()

    async def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        user = self._users.get(user_id)
        return user.copy() if user else None

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        user_id = self._by_email.get(email)
        if user_id is None:
            return None
        return self._users[user_id].copy()

    async def exists_by_email(self, email: str) -> bool:
        return email in self._by_email

    async def update(self, user_id: str, update: UserUpdate) -> Optional[UserRecord]:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None

            changes = update.changes()
            new_email = changes.get("email")
            if new_email is not None and new_email != user.email:
                owner = self._by_email.get(new_email)
                if owner is not None and owner != user_id:
                    raise DuplicateEmailError()
                del self._by_email[user.email]
                self._by_email[new_email] = user_id
            elif "email" in changes:
                # None means "leave as is"; email is never optional on a record
                changes.pop("email")

            for key, value in changes.items():
                setattr(user, key, value)

            if user.email_verified and user.verification_token:
                self._by_verification_token.pop(user.verification_token, None)
                user.verification_token = None

            if changes:
                logger.info("User updated", user_id=user_id, fields=sorted(changes))
            return user.copy()

    async def set_verification_token(self, user_id: str, token: str) -> Optional[UserRecord]:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            if user.email_verified:
                raise AlreadyVerifiedError()

            if user.verification_token:
                self._by_verification_token.pop(user.verification_token, None)
            user.verification_token = token
            self._by_verification_token[token] = user_id
            return user.copy()

    async def consume_verification_token(self, token: str) -> Optional[UserRecord]:
        async with self._lock:
            user_id = self._by_verification_token.pop(token, None)
            if user_id is None:
                return None

            user = self._users[user_id]
            user.email_verified = True
            user.verification_token = None
            return user.copy()

    async def set_reset_token(
        self,
        email: str,
        token: str,
        expires_at: datetime
    ) -> Optional[UserRecord]:
        async with self._lock:
            user_id = self._by_email.get(email)
            if user_id is None:
                return None

            user = self._users[user_id]
            if user.reset_token:
                self._by_reset_token.pop(user.reset_token, None)
            user.reset_token = token
            user.reset_token_expiry = expires_at
            self._by_reset_token[token] = user_id
            return user.copy()

    async def consume_reset_token(
        self,
        token: str,
        now: datetime,
        new_password_hash: str
    ) -> Optional[UserRecord]:
        async with self._lock:
            user_id = self._by_reset_token.get(token)
            if user_id is None:
                return None

            user = self._users[user_id]
            if user.reset_token_expiry is None or not now < user.reset_token_expiry:
                # Expired tokens stay indexed until replaced; they never match
                return None

            del self._by_reset_token[token]
            user.password_hash = new_password_hash
            user.reset_token = None
            user.reset_token_expiry = None
            return user.copy()

    async def get_all(self) -> List[UserRecord]:
        return [user.copy() for user in self._users.values()]

    async def count(self) -> int:
        return len(self._users)

    async def clear(self) -> None:
        async with self._lock:
            self._users.clear()
            self._by_email.clear()
            self._by_verification_token.clear()
            self._by_reset_token.clear()
