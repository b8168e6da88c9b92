"""
Repository interfaces for dependency abstraction.
Defines the contract for user storage so services can be tested against
any implementation and never reach for module-level state.
"""

from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable

from ..models.user import UserRecord, UserUpdate


@runtime_checkable
class IUserRepository(Protocol):
    """Protocol for user repository operations."""

    async def add(self, user: UserRecord) -> UserRecord:
        """
        Insert a new user.

        The email uniqueness check and the insert happen as one step.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        ...

    async def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Get user by ID, or None if not found."""
        ...

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        """Get user by email, or None if not found."""
        ...

    async def exists_by_email(self, email: str) -> bool:
        ...

    async def update(self, user_id: str, update: UserUpdate) -> Optional[UserRecord]:
        """
        Apply the fields set on ``update``.

        Args:
            user_id: User ID to update
            update: Typed update request

        Returns:
            Updated user, or None if the id is unknown

        Raises:
            DuplicateEmailError: If the new email belongs to another user
        """
        ...

    async def set_verification_token(self, user_id: str, token: str) -> Optional[UserRecord]:
        """
        Replace the pending verification token; the old one stops working.

        Returns:
            Updated user, or None if the user does not exist

        Raises:
            AlreadyVerifiedError: If the user is already verified
        """
        ...

    async def consume_verification_token(self, token: str) -> Optional[UserRecord]:
        """
        Mark the token's owner verified and clear the token in one step.

        Returns:
            Updated user, or None if no user holds the token
        """
        ...

    async def set_reset_token(
        self,
        email: str,
        token: str,
        expires_at: datetime
    ) -> Optional[UserRecord]:
        """Replace the pending reset token; None if the email is unknown."""
        ...

    async def consume_reset_token(
        self,
        token: str,
        now: datetime,
        new_password_hash: str
    ) -> Optional[UserRecord]:
        """
        Swap in the new password hash if the token is held and ``now`` is
        strictly before its expiry, clearing token and expiry in the same step.

        Returns:
            Updated user, or None if the token is unknown or expired
        """
        ...

    async def get_all(self) -> List[UserRecord]:
        ...

    async def clear(self) -> None:
        """Drop every record and index."""
        ...
