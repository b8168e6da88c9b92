"""
Authentication-related Pydantic schemas for request/response validation.
"""
from typing import Optional, List
from datetime import datetime
import re
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..core.security import SecurityService

NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$")


def _check_password(value: str) -> str:
    is_valid, errors = SecurityService.validate_password_strength(value)
    if not is_valid:
        raise ValueError("; ".join(errors))
    return value


class SignUpRequest(BaseModel):
    """Sign-up request schema."""

    name: str = Field(..., min_length=2, max_length=50, description="Display name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="Password meeting the strength policy")
    confirm_password: str = Field(..., min_length=1, description="Must match password")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "Jane Doe",
            "email": "jane@example.com",
            "password": "Secret123!",
            "confirm_password": "Secret123!"
        }
    })

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not NAME_PATTERN.match(v):
            raise ValueError("Name can only contain letters and spaces")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "SignUpRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class SignUpResponse(BaseModel):
    message: str
    user_id: str


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "email": "demo@example.com",
            "password": "Demo123!"
        }
    })


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    email_verified: bool
    image: Optional[str] = None
    created_at: datetime


class LoginResponse(BaseModel):
    """Login response schema."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    user: UserResponse


class ResendVerificationRequest(BaseModel):
    email: EmailStr = Field(..., description="Address to re-send the verification link to")


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(..., description="User's email address")


class ResetPasswordRequest(BaseModel):
    """Password reset confirmation schema."""

    token: str = Field(..., min_length=1, description="Reset token from the emailed link")
    password: str = Field(..., description="New password")
    confirm_password: str = Field(..., min_length=1, description="Must match password")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class PasswordStrengthRequest(BaseModel):
    password: str


class PasswordStrengthResponse(BaseModel):
    score: int = Field(..., ge=0, le=5)
    label: str
    feedback: List[str]


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str
    error_code: str
