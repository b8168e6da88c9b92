"""
Dependency injection for FastAPI endpoints.
Resolves services from the application container and the current user from
the bearer token.
"""
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..container.container import Container, get_container
from ..models.user import UserRecord
from ..services.auth.authentication_service import AuthenticationService
from ..services.auth.credential_service import CredentialService
from ..services.auth.token_service import TokenLifecycleService

security = HTTPBearer(auto_error=False)


def get_app_container() -> Container:
    return get_container()


def get_credential_service(
    container: Container = Depends(get_app_container)
) -> CredentialService:
    return container.credential_service


def get_token_service(
    container: Container = Depends(get_app_container)
) -> TokenLifecycleService:
    return container.token_service


def get_authentication_service(
    container: Container = Depends(get_app_container)
) -> AuthenticationService:
    return container.authentication_service


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, preferring the first X-Forwarded-For hop."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthenticationService = Depends(get_authentication_service)
) -> UserRecord:
    """
    Get current authenticated user from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    user = None
    if credentials is not None:
        user = await auth_service.validate_token(credentials.credentials)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return user
