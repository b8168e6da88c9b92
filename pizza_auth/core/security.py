from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
import asyncio
import re
import secrets
from .config import settings
import structlog

logger = structlog.get_logger()

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def utcnow() -> datetime:
    """Timezone-aware current time; the default clock for every service."""
    return datetime.now(timezone.utc)


@lru_cache()
def _dummy_hash() -> str:
    # Compared against when the email is unknown so timing matches a real check
    return pwd_context.hash(secrets.token_urlsafe(16))


class SecurityService:
    """Handles all security-related operations"""

    @staticmethod
    async def hash_password_async(password: str) -> str:
        """Hash in a worker thread so bcrypt does not stall the event loop."""
        return await asyncio.to_thread(pwd_context.hash, password)

    @staticmethod
    async def verify_password_async(plain_password: str, hashed_password: Optional[str]) -> bool:
        """
        Constant-time comparison in a worker thread.

        A missing hash is still checked against a throwaway hash and always
        fails, so unknown accounts cost the same as wrong passwords.
        """
        if hashed_password is None:
            await asyncio.to_thread(pwd_context.verify, plain_password, _dummy_hash())
            return False
        return await asyncio.to_thread(pwd_context.verify, plain_password, hashed_password)

    @staticmethod
    def generate_token(nbytes: Optional[int] = None) -> str:
        """Random hex token for email verification and password reset links."""
        return secrets.token_hex(nbytes or settings.VERIFICATION_TOKEN_BYTES)

    @staticmethod
    def generate_user_id() -> str:
        return secrets.token_hex(16)

    @staticmethod
    def validate_password_strength(password: str) -> tuple[bool, list[str]]:
        """Validate password meets security requirements"""
        errors = []

        if len(password) < settings.PASSWORD_MIN_LENGTH:
            errors.append(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")

        if settings.PASSWORD_REQUIRE_UPPERCASE and not re.search(r"[A-Z]", password):
            errors.append("Password must contain at least one uppercase letter")

        if settings.PASSWORD_REQUIRE_LOWERCASE and not re.search(r"[a-z]", password):
            errors.append("Password must contain at least one lowercase letter")

        if settings.PASSWORD_REQUIRE_NUMBERS and not re.search(r"[0-9]", password):
            errors.append("Password must contain at least one number")

        if settings.PASSWORD_REQUIRE_SPECIAL and not re.search(r"[^A-Za-z0-9]", password):
            errors.append("Password must contain at least one special character")

        return len(errors) == 0, errors

    @staticmethod
    def password_strength_score(password: str) -> tuple[int, list[str]]:
        """
        Score 0-5, one point per satisfied rule, with feedback for the
        missing ones. Drives the strength meter on the sign-up form.
        """
        checks = [
            (len(password) >= 8, "Use at least 8 characters"),
            (re.search(r"[A-Z]", password) is not None, "Add uppercase letters"),
            (re.search(r"[a-z]", password) is not None, "Add lowercase letters"),
            (re.search(r"[0-9]", password) is not None, "Add numbers"),
            (re.search(r"[^A-Za-z0-9]", password) is not None, "Add special characters"),
        ]
        score = sum(1 for passed, _ in checks if passed)
        feedback = [hint for passed, hint in checks if not passed]
        return score, feedback

    @staticmethod
    def password_strength_label(score: int) -> str:
        labels = {2: "Weak", 3: "Fair", 4: "Good", 5: "Strong"}
        return labels.get(score, "Very Weak")

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create JWT access token"""
        to_encode = data.copy()
        now = utcnow()
        if expires_delta:
            expire = now + expires_delta
        else:
            expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        to_encode.update({
            "exp": expire,
            "iat": now,
            "type": "access"
        })

        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Optional[Dict[str, Any]]:
        """Decode and validate JWT token; None when invalid or expired"""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            return None
        if payload.get("type") != "access":
            return None
        return payload
