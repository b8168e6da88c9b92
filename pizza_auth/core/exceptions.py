"""
Typed failures raised by the credential and token services.
Callers translate these into transport responses; none of them is fatal.
"""

from typing import Optional


class CredentialError(Exception):
    """Base class for credential subsystem failures."""

    error_code = "CREDENTIAL_ERROR"
    default_message = "Credential operation failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class DuplicateEmailError(CredentialError):
    """Raised when an email is already registered to another user."""

    error_code = "DUPLICATE_EMAIL"
    default_message = "User with this email already exists"


class NotFoundError(CredentialError):
    """Raised for unknown ids or emails where the caller needs a signal."""

    error_code = "NOT_FOUND"
    default_message = "User not found"


class InvalidCredentialsError(CredentialError):
    """Wrong password and unknown email are reported the same way."""

    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class TooManyAttemptsError(CredentialError):
    """Raised while an identity is locked out after repeated failures."""

    error_code = "TOO_MANY_ATTEMPTS"
    default_message = "Too many login attempts. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None):
        super().__init__(message)
        self.retry_after = retry_after


class InvalidOrExpiredTokenError(CredentialError):
    """Unknown, consumed and expired tokens are reported the same way."""

    error_code = "INVALID_OR_EXPIRED_TOKEN"
    default_message = "Invalid or expired token"


class AlreadyVerifiedError(CredentialError):
    error_code = "ALREADY_VERIFIED"
    default_message = "Email is already verified"


class EmailNotVerifiedError(CredentialError):
    error_code = "EMAIL_NOT_VERIFIED"
    default_message = "Please verify your email before signing in"
