"""Pytest configuration and fixtures."""

import os

# Settings are read once at import time; provide the required secrets first.
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("RECOVERY_KEY_SECRET", "test-recovery-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from counsel.api.deps import create_access_token
from counsel.db.base import Base
from counsel.db.models import User, UserRole
from counsel.db.session import build_engine, build_session_factory, get_db
from counsel.main import app
from counsel.services.security import hash_secret


@dataclass
class Account:
    """A seeded user plus ready-made auth headers."""

    user: User
    headers: dict[str, str]

    @property
    def id(self) -> UUID:
        return self.user.id

    @property
    def username(self) -> str:
        return self.user.username


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test, foreign keys enforced."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory) -> Callable[..., Awaitable[Account]]:
    """Insert a user directly and return it with a bearer token."""

    async def _make(
        username: str,
        role: UserRole = UserRole.STUDENT,
        password: str = "password123",
        is_active: bool = True,
    ) -> Account:
        async with session_factory() as session:
            user = User(
                username=username,
                password_hash=hash_secret(password),
                role=role.value,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
        token = create_access_token(user)
        return Account(user=user, headers={"Authorization": f"Bearer {token}"})

    return _make


@pytest.fixture
async def student(make_user) -> Account:
    return await make_user("alice", UserRole.STUDENT)


@pytest.fixture
async def other_student(make_user) -> Account:
    return await make_user("bob", UserRole.STUDENT)


@pytest.fixture
async def counselor(make_user) -> Account:
    return await make_user("carol", UserRole.COUNSELOR)


@pytest.fixture
async def other_counselor(make_user) -> Account:
    return await make_user("dave", UserRole.COUNSELOR)


@pytest.fixture
async def admin(make_user) -> Account:
    return await make_user("root", UserRole.ADMIN)


@pytest.fixture
def open_conversation(client) -> Callable[..., Awaitable[dict]]:
    """Create a conversation through the API as the given student."""

    async def _open(
        owner: Account,
        urgency: str = "medium",
        category: str = "academic",
        is_anonymous: bool = False,
        initial_message: str = "I need some help",
    ) -> dict:
        response = await client.post(
            "/conversations",
            json={
                "category": category,
                "urgency": urgency,
                "is_anonymous": is_anonymous,
                "initial_message": initial_message,
            },
            headers=owner.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["conversation"]

    return _open
