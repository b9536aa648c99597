"""
Request dependencies: session tokens, the authenticated caller and role gates.

Tokens are HS256 JWTs carrying the user id in `sub`. They are read from the
`access_token` cookie set at login, or from an `Authorization: Bearer` header.
The role inside the token is informational only; every request reloads the
user, so deleted or deactivated accounts lose access immediately.

Role gates here are coarse (which roles may call a route at all). Ownership and
assignment checks belong to services/access_policy.py.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends, Header, HTTPException, status
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from counsel.config import get_settings
from counsel.db.models import User, UserRole
from counsel.db.session import get_db
from counsel.errors import ForbiddenError

settings = get_settings()

DbSession = Annotated[AsyncSession, Depends(get_db)]


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# =============================================================================
# TOKENS
# =============================================================================


def create_access_token(user: User) -> str:
    """Sign a session token for `user` valid for `jwt_expire_minutes`."""
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID | None:
    """User id from a valid token; None when the token is bad, expired or has no subject."""
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        subject = claims.get("sub")
        return UUID(subject) if subject else None
    except (JWTError, ValueError):
        return None


# =============================================================================
# CALLER
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """Session token from the cookie first, then the bearer header."""
    if access_token:
        return access_token

    scheme, _, credentials = (authorization or "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    raise _unauthenticated("Not authenticated")


async def get_current_user(
    token: Annotated[str, Depends(get_token_from_request)],
    db: DbSession,
) -> User:
    """The active user behind the token, or 401."""
    user_id = decode_access_token(token)
    if user_id is None:
        raise _unauthenticated("Could not validate credentials")

    result = await db.execute(select(User).where(User.id == user_id, User.is_active.is_(True)))
    user = result.scalar_one_or_none()
    if user is None:
        raise _unauthenticated("Could not validate credentials")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


# =============================================================================
# ROLE GATES
# =============================================================================


def require_roles(*roles: UserRole):
    """
    Dependency factory letting only `roles` through; anyone else gets 403.

        StaffUser = Annotated[User, Depends(require_roles(UserRole.COUNSELOR, UserRole.ADMIN))]
    """
    allowed = {role.value for role in roles}

    async def _check(current_user: CurrentUser) -> User:
        if current_user.role not in allowed:
            raise ForbiddenError("Your role is not permitted to perform this action")
        return current_user

    return _check


StudentUser = Annotated[User, Depends(require_roles(UserRole.STUDENT))]
StaffUser = Annotated[User, Depends(require_roles(UserRole.COUNSELOR, UserRole.ADMIN))]
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
