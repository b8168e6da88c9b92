"""
Authentication endpoints for the dashboard.
Implements sign-up, email verification, sign-in, and forgot/reset password.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
import structlog

from ..core.config import settings
from ..core.exceptions import (
    AlreadyVerifiedError,
    DuplicateEmailError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    TooManyAttemptsError,
)
from ..core.security import SecurityService
from ..models.user import UserRecord
from ..schemas.auth_schemas import (
    SignUpRequest, SignUpResponse, LoginRequest, LoginResponse, UserResponse,
    ResendVerificationRequest, ForgotPasswordRequest, ResetPasswordRequest,
    PasswordStrengthRequest, PasswordStrengthResponse, MessageResponse, ErrorResponse
)
from ..services.auth.authentication_service import AuthenticationService
from ..services.auth.credential_service import CredentialService
from ..services.auth.token_service import TokenLifecycleService
from .deps import (
    get_authentication_service,
    get_client_ip,
    get_credential_service,
    get_current_user,
    get_token_service,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])

FORGOT_PASSWORD_MESSAGE = "If an account exists for this email, a password reset link has been sent."


def _user_response(user: UserRecord) -> UserResponse:
    return UserResponse(**user.to_public_dict())


@router.post(
    "/signup",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}
)
async def signup(
    signup_data: SignUpRequest,
    credential_service: CredentialService = Depends(get_credential_service)
):
    """
    Register a new account.

    The account cannot sign in until the emailed verification link is opened.
    """
    try:
        user = await credential_service.create_user(
            email=signup_data.email,
            password=signup_data.password,
            name=signup_data.name
        )
        return SignUpResponse(
            message="User created successfully. Please check your email to verify your account.",
            user_id=user.id
        )

    except DuplicateEmailError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists"
        )
    except Exception as e:
        logger.error("Signup failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Signup failed"
        )


@router.get(
    "/verify-email",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}}
)
async def verify_email(
    token: str = Query("", description="Verification token from the emailed link"),
    token_service: TokenLifecycleService = Depends(get_token_service)
):
    """Redeem an email verification token."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Verification token is required"
        )

    try:
        await token_service.consume_verification_token(token)
        return MessageResponse(message="Email verified successfully")

    except InvalidOrExpiredTokenError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification token"
        )
    except Exception as e:
        logger.error("Email verification failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Email verification failed"
        )


@router.post(
    "/verify-email",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def resend_verification_email(
    resend_data: ResendVerificationRequest,
    token_service: TokenLifecycleService = Depends(get_token_service)
):
    """Send a fresh verification link; the previous link stops working."""
    try:
        await token_service.resend_verification_email(resend_data.email)
        return MessageResponse(message="Verification email sent successfully")

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    except AlreadyVerifiedError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is already verified"
        )
    except Exception as e:
        logger.error("Resend verification failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification email"
        )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        429: {"model": ErrorResponse}
    }
)
async def login(
    request: Request,
    login_data: LoginRequest,
    auth_service: AuthenticationService = Depends(get_authentication_service)
):
    """
    Authenticate with email and password.

    Returns a bearer token and the user's public profile.
    """
    try:
        user, access_token = await auth_service.authenticate_user(
            email=login_data.email,
            password=login_data.password,
            ip_address=get_client_ip(request)
        )
        return LoginResponse(
            access_token=access_token,
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=_user_response(user)
        )

    except TooManyAttemptsError as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=e.message,
            headers={"Retry-After": str(e.retry_after)}
        )
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )
    except EmailNotVerifiedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=e.message
        )
    except Exception as e:
        logger.error("Login failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    forgot_data: ForgotPasswordRequest,
    token_service: TokenLifecycleService = Depends(get_token_service)
):
    """
    Request a password reset link.

    Always responds the same way so the endpoint cannot be used to discover accounts.
    """
    try:
        await token_service.issue_reset_token(forgot_data.email)
    except Exception as e:
        logger.error("Password reset initiation failed", error=str(e))
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}}
)
async def reset_password(
    reset_data: ResetPasswordRequest,
    token_service: TokenLifecycleService = Depends(get_token_service)
):
    """Set a new password with a reset token."""
    try:
        success = await token_service.consume_reset_token(reset_data.token, reset_data.password)
    except Exception as e:
        logger.error("Password reset completion failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Password reset failed"
        )

    if not success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token"
        )
    return MessageResponse(message="Password reset successfully")


@router.post("/password-strength", response_model=PasswordStrengthResponse)
async def password_strength(strength_data: PasswordStrengthRequest):
    """Score a candidate password for the sign-up form's strength meter."""
    score, feedback = SecurityService.password_strength_score(strength_data.password)
    return PasswordStrengthResponse(
        score=score,
        label=SecurityService.password_strength_label(score),
        feedback=feedback
    )


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
async def read_current_user(current_user: UserRecord = Depends(get_current_user)):
    return _user_response(current_user)
