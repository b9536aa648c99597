"""Authentication schemas."""

from pydantic import BaseModel, Field

from counsel.schemas.base import BaseSchema
from counsel.schemas.user import UserRoleType, UserSummary


class RegisterRequest(BaseModel):
    """Request schema for account registration."""

    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRoleType = "student"


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RecoverRequest(BaseModel):
    """Request schema for password reset with a recovery file."""

    username: str = Field(..., min_length=1)
    recovery_file_content: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class RecoveryFile(BaseSchema):
    """Encrypted recovery file handed out once at registration."""

    filename: str
    content: str
    instructions: str


class TokenResponse(BaseSchema):
    """Response schema for successful authentication."""

    message: str
    user: UserSummary
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiry in seconds")


class RegisterResponse(TokenResponse):
    recovery_file: RecoveryFile


class ProfileResponse(BaseSchema):
    user: UserSummary
