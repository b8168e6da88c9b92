from .user import UserRecord, LoginAttemptRecord, UserUpdate

__all__ = [
    "UserRecord",
    "LoginAttemptRecord",
    "UserUpdate"
]
