"""
Authentication Routes

Endpoints:
- POST /auth/register - Create account, returns JWT + encrypted recovery file
- POST /auth/login - Exchange username/password for a session
- POST /auth/recover - Reset password with the recovery file
- POST /auth/logout - Clear session cookie
- GET /auth/profile - Current user profile

The JWT is returned in the response body and also set as an HttpOnly cookie;
clients may use either.
"""

from fastapi import APIRouter, Response, status

from counsel.api.deps import CurrentUser, DbSession, create_access_token
from counsel.config import get_settings
from counsel.db.models import User
from counsel.schemas.auth import (
    LoginRequest,
    ProfileResponse,
    RecoverRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from counsel.schemas.base import MessageEnvelope
from counsel.schemas.user import UserSummary
from counsel.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()


def _issue_session(response: Response, user: User) -> tuple[str, int]:
    """Create a JWT for the user and set it as an HttpOnly cookie."""
    access_token = create_access_token(user)
    expires_in = settings.jwt_expire_minutes * 60

    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=settings.environment != "development",
        samesite="lax",
        max_age=expires_in,
    )
    return access_token, expires_in


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    response: Response,
    db: DbSession,
) -> RegisterResponse:
    """
    Register a new account.

    Returns 409 if the username is taken. The recovery file in the response
    is the only copy; the client must offer it for download.
    """
    user, recovery_file = await auth_service.register(db, data)
    access_token, expires_in = _issue_session(response, user)

    return RegisterResponse(
        message="User registered successfully",
        user=UserSummary.model_validate(user),
        access_token=access_token,
        expires_in=expires_in,
        recovery_file=recovery_file,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: DbSession,
) -> TokenResponse:
    """Authenticate with username and password."""
    user = await auth_service.login(db, data.username, data.password)
    access_token, expires_in = _issue_session(response, user)

    return TokenResponse(
        message="Login successful",
        user=UserSummary.model_validate(user),
        access_token=access_token,
        expires_in=expires_in,
    )


@router.post("/recover", response_model=MessageEnvelope)
async def recover(data: RecoverRequest, db: DbSession) -> MessageEnvelope:
    """Reset the password of an account using its recovery file."""
    await auth_service.recover(db, data.username, data.recovery_file_content, data.new_password)
    return MessageEnvelope(message="Password reset successful")


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """
    Clear the authentication cookie.

    A JWT kept elsewhere by the client stays valid until it expires.
    """
    response.delete_cookie(
        key="access_token",
        httponly=True,
        secure=settings.environment != "development",
        samesite="lax",
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: CurrentUser) -> ProfileResponse:
    """Get the current authenticated user's profile."""
    return ProfileResponse(user=UserSummary.model_validate(current_user))
