"""User directory and account deletion routes."""

from uuid import UUID

from fastapi import APIRouter

from counsel.api.deps import AdminUser, CurrentUser, DbSession, StaffUser
from counsel.schemas.user import (
    CounselorListResponse,
    UserDeletedResponse,
    UserListResponse,
    UserRead,
)
from counsel.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(current_user: AdminUser, db: DbSession) -> UserListResponse:
    """Active users, newest first (admin only)."""
    users = await user_service.list_active_users(db)
    return UserListResponse(
        message="Users retrieved successfully",
        users=[UserRead.model_validate(u) for u in users],
        count=len(users),
    )


@router.get("/counselors", response_model=CounselorListResponse)
async def list_counselors(current_user: StaffUser, db: DbSession) -> CounselorListResponse:
    """Active counselors by username, for assignment pickers."""
    counselors = await user_service.list_counselors(db)
    return CounselorListResponse(
        message="Counselors retrieved successfully",
        counselors=[UserRead.model_validate(u) for u in counselors],
        count=len(counselors),
    )


@router.delete("/me", response_model=UserDeletedResponse)
async def delete_own_account(current_user: CurrentUser, db: DbSession) -> UserDeletedResponse:
    """Delete the caller's account and all conversations attached to it."""
    deleted = await user_service.delete_user(db, current_user.id)
    return UserDeletedResponse(message="User and all associated data deleted successfully", user=deleted)


@router.delete("/{user_id}", response_model=UserDeletedResponse)
async def delete_user(user_id: UUID, current_user: AdminUser, db: DbSession) -> UserDeletedResponse:
    """Delete any account and all conversations attached to it (admin only)."""
    deleted = await user_service.delete_user(db, user_id)
    return UserDeletedResponse(message="User and all associated data deleted successfully", user=deleted)
