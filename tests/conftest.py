import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from crm_attendance.auth.models import User
from crm_attendance.auth.security import create_access_token
from crm_attendance.core.models import Team
from crm_attendance.db.init_db import create_tables
from crm_attendance.db.session import get_db
from crm_attendance.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test."""
    test_engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_team(db_session: AsyncSession) -> Callable[..., Awaitable[Team]]:
    async def _make(team_name: str) -> Team:
        team = Team(team_name=team_name)
        db_session.add(team)
        await db_session.commit()
        return team

    return _make


@pytest.fixture()
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make(
        name: str,
        email: str,
        team: Optional[Team] = None,
        role: str = "member",
        is_blocked: bool = False,
    ) -> User:
        user = User(
            name=name,
            email=email,
            role=role,
            team_id=team.id if team else None,
            is_blocked=is_blocked,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture()
async def sales(make_team) -> Team:
    return await make_team("Sales")


@pytest.fixture()
async def admin(make_user) -> User:
    return await make_user("Ada Admin", "ada@example.com", role="admin")


@pytest.fixture()
async def member(make_user, sales) -> User:
    return await make_user("Mia Member", "mia@example.com", team=sales)


@pytest.fixture()
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(user.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers
