"""
Repository implementations following the Repository pattern.
"""

from .user_repository import InMemoryUserRepository

__all__ = [
    "InMemoryUserRepository"
]
