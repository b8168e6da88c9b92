"""Test data factories for auth service testing."""

from .user_factory import UserFactory, SignUpPayloadFactory, DEFAULT_PASSWORD

__all__ = [
    "UserFactory",
    "SignUpPayloadFactory",
    "DEFAULT_PASSWORD"
]
