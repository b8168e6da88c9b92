"""
Decomposed authentication services following Single Responsibility Principle.
Each service handles a specific aspect of the credential lifecycle.
"""

from .rate_limiter import LoginRateLimiter, LockoutPolicy
from .credential_service import CredentialService
from .token_service import TokenLifecycleService
from .authentication_service import AuthenticationService

__all__ = [
    "LoginRateLimiter",
    "LockoutPolicy",
    "CredentialService",
    "TokenLifecycleService",
    "AuthenticationService"
]
