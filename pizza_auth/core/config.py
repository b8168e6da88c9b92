from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator, ValidationError
from typing import Annotated, List, Any
import sys
import secrets
from functools import lru_cache
import structlog

logger = structlog.get_logger()


class Settings(BaseSettings):
    """
    Pizza Dashboard Auth Service Configuration

    Every value can be overridden through environment variables or a .env file.
    Lockout and token lifetimes are policy constants; change them deliberately.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )

    # Application settings
    APP_NAME: str = "Pizza Dashboard Auth Service"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Pizza Dashboard Auth"

    # Session tokens
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(48), min_length=32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24, ge=5, le=60 * 24 * 30)

    # Password hashing (bcrypt cost factor)
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # Verification / reset tokens
    VERIFICATION_TOKEN_BYTES: int = Field(default=32, ge=16, le=128)
    RESET_TOKEN_EXPIRE_SECONDS: int = Field(default=3600, ge=60)

    # Login lockout
    LOGIN_MAX_ATTEMPTS: int = Field(default=5, ge=1)
    LOGIN_LOCKOUT_SECONDS: int = Field(default=15 * 60, ge=1)

    # Password policy
    PASSWORD_MIN_LENGTH: int = Field(default=8, ge=8, le=128)
    PASSWORD_REQUIRE_UPPERCASE: bool = True
    PASSWORD_REQUIRE_LOWERCASE: bool = True
    PASSWORD_REQUIRE_NUMBERS: bool = True
    PASSWORD_REQUIRE_SPECIAL: bool = True

    # Links embedded in verification / reset emails
    FRONTEND_BASE_URL: str = "http://localhost:3002"

    # Seed demo@example.com on startup
    SEED_DEMO_USER: bool = True

    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["http://localhost:3002"])

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> List[str]:
        """Parse CORS origins from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        elif isinstance(v, list):
            return v
        return []

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid_envs = ["development", "testing", "staging", "production"]
        if v not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of: {valid_envs}")
        return v

    @field_validator("FRONTEND_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def validate_required_settings(settings: Settings) -> None:
    """
    Validate settings combinations that a single field validator cannot see.
    Fail fast if the production configuration is unsafe.
    """
    errors = []

    if settings.ENVIRONMENT == "production":
        if settings.DEBUG:
            errors.append("DEBUG must be False in production")

        if settings.SEED_DEMO_USER:
            errors.append("SEED_DEMO_USER must be False in production")

        if settings.BCRYPT_ROUNDS < 12:
            errors.append("BCRYPT_ROUNDS must be at least 12 in production")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.error(error_msg)
        raise ValueError(error_msg)

    logger.info(
        "Configuration validated successfully",
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        login_max_attempts=settings.LOGIN_MAX_ATTEMPTS,
        login_lockout_seconds=settings.LOGIN_LOCKOUT_SECONDS,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Exits the process if the environment holds invalid values.
    """
    try:
        settings = Settings()
        validate_required_settings(settings)
        return settings
    except ValidationError as e:
        logger.error("Failed to load settings", errors=e.errors())
        sys.exit(1)


settings = get_settings()
