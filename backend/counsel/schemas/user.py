"""User schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from counsel.schemas.base import BaseSchema

UserRoleType = Literal["student", "counselor", "admin"]


class UserSummary(BaseSchema):
    """Public identity of a user as shown to other parties."""

    id: UUID
    username: str
    role: UserRoleType


class UserRead(UserSummary):
    """Schema for reading user data."""

    is_active: bool
    created_at: datetime


class UserListResponse(BaseSchema):
    message: str
    users: list[UserRead]
    count: int


class CounselorListResponse(BaseSchema):
    message: str
    counselors: list[UserRead]
    count: int


class UserDeletedResponse(BaseSchema):
    message: str
    user: UserSummary
