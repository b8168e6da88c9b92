"""
In-memory user and login-attempt records.
Records handed out by the repository are copies; stored state only changes
through repository methods.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.security import utcnow


@dataclass
class UserRecord:
    """A registered dashboard user and the credential state attached to it."""

    id: str
    email: str
    name: str
    password_hash: str
    email_verified: bool = False
    verification_token: Optional[str] = None
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    image: Optional[str] = None

    def copy(self) -> "UserRecord":
        return replace(self)

    def to_public_dict(self) -> Dict[str, Any]:
        """Fields safe to return to API clients."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "email_verified": self.email_verified,
            "image": self.image,
            "created_at": self.created_at,
        }

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, email_verified={self.email_verified})>"


@dataclass
class LoginAttemptRecord:
    """Failed sign-in counter for one identity."""

    identity: str
    count: int = 0
    last_attempt: datetime = field(default_factory=utcnow)


_UNSET: Any = object()


@dataclass
class UserUpdate:
    """
    Explicit update request. Only fields that were passed are applied, so
    ``UserUpdate(image=None)`` clears the image while ``UserUpdate()`` is a no-op.
    """

    email: Optional[str] = _UNSET
    name: Optional[str] = _UNSET
    password_hash: Optional[str] = _UNSET
    email_verified: Optional[bool] = _UNSET
    image: Optional[str] = _UNSET

    def changes(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not _UNSET
        }
