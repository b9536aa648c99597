"""Account registration, login and password recovery."""

import logging
import time

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from counsel.config import get_settings
from counsel.db.models import User, UserRole
from counsel.errors import ConflictError, ForbiddenError
from counsel.schemas.auth import RecoveryFile, RegisterRequest
from counsel.services.security import (
    InvalidRecoveryFile,
    decrypt_recovery_file,
    encrypt_recovery_file,
    generate_recovery_key,
    hash_secret,
    verify_secret,
)

logger = logging.getLogger(__name__)
settings = get_settings()

RECOVERY_INSTRUCTIONS = (
    "Please download and save this recovery file securely. You will need it to "
    "recover your account if you forget your password."
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthService:
    """Identity lifecycle: register, login, recover."""

    async def _get_by_username(self, db: AsyncSession, username: str) -> User | None:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, data: RegisterRequest) -> tuple[User, RecoveryFile]:
        """
        Create an account and its one-time recovery file.

        The plain recovery key only ever exists inside the encrypted file
        returned here; the database keeps a bcrypt hash of it.
        """
        if data.role == UserRole.ADMIN.value and not settings.allow_admin_registration:
            raise ForbiddenError("Admin accounts cannot be self-registered")

        if await self._get_by_username(db, data.username) is not None:
            raise ConflictError("Username already exists")

        recovery_key = generate_recovery_key()
        user = User(
            username=data.username,
            password_hash=hash_secret(data.password),
            recovery_key_hash=hash_secret(recovery_key),
            role=data.role,
        )
        db.add(user)
        try:
            await db.flush()  # Get user.id
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Username already exists")

        recovery_file = RecoveryFile(
            filename=f"recovery_{user.username}_{int(time.time() * 1000)}.key",
            content=encrypt_recovery_file(recovery_key, user.id),
            instructions=RECOVERY_INSTRUCTIONS,
        )
        await db.commit()
        await db.refresh(user)

        logger.info("Registered user %s with role %s", user.id, user.role)
        return user, recovery_file

    async def login(self, db: AsyncSession, username: str, password: str) -> User:
        result = await db.execute(
            select(User).where(User.username == username, User.is_active.is_(True))
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_secret(password, user.password_hash):
            logger.info("Failed login for username %r", username)
            raise _unauthorized("Invalid credentials")

        return user

    async def recover(
        self,
        db: AsyncSession,
        username: str,
        recovery_file_content: str,
        new_password: str,
    ) -> None:
        """Reset a password after validating the user's recovery file."""
        user = await self._get_by_username(db, username)
        if user is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not found")

        try:
            recovery_key, user_id = decrypt_recovery_file(recovery_file_content)
        except InvalidRecoveryFile:
            logger.warning("Undecryptable recovery file submitted for user %s", user.id)
            raise _unauthorized("Invalid recovery file or key")

        if user_id != user.id or not verify_secret(recovery_key, user.recovery_key_hash):
            logger.warning("Recovery key mismatch for user %s", user.id)
            raise _unauthorized("Invalid recovery file or key")

        user.password_hash = hash_secret(new_password)
        await db.commit()
        logger.info("Password reset via recovery file for user %s", user.id)


auth_service = AuthService()
