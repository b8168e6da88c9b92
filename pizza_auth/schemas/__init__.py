from .auth_schemas import (
    SignUpRequest,
    SignUpResponse,
    LoginRequest,
    LoginResponse,
    UserResponse,
    ResendVerificationRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    PasswordStrengthRequest,
    PasswordStrengthResponse,
    MessageResponse,
    ErrorResponse,
)

__all__ = [
    "SignUpRequest",
    "SignUpResponse",
    "LoginRequest",
    "LoginResponse",
    "UserResponse",
    "ResendVerificationRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "PasswordStrengthRequest",
    "PasswordStrengthResponse",
    "MessageResponse",
    "ErrorResponse",
]
