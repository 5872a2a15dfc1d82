"""
Pytest configuration and fixtures for testing
"""
from typing import Dict, List, Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from services.users_service import UsersServiceError, get_users_service

# In-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SESSION_TOKEN = "session-token-123"
TEST_USER = {"id": "user-1", "email": "printer@example.com"}


class FakeUsersService:
    """
    Stand-in for the hosted users service.
    Knows one valid code and one valid session token.
    """

    def __init__(self, user: Optional[dict] = None):
        self.user = dict(user or TEST_USER)
        self.codes: Dict[str, str] = {"good-code": SESSION_TOKEN}
        self.sessions: Dict[str, dict] = {SESSION_TOKEN: self.user}
        self.deleted: List[str] = []

    async def get_oauth_redirect_url(self, provider: str = "google") -> str:
        return f"https://users.example.com/oauth/{provider}/start"

    async def exchange_code_for_session_token(self, code: str) -> str:
        if code not in self.codes:
            raise UsersServiceError("Invalid authorization code")
        return self.codes[code]

    async def get_current_user(self, session_token: str) -> Optional[dict]:
        return self.sessions.get(session_token)

    async def delete_session(self, session_token: str) -> None:
        self.deleted.append(session_token)
        self.sessions.pop(session_token, None)


@pytest.fixture
async def session_factory():
    """
    Fresh in-memory database per test. StaticPool keeps the single
    connection alive so every session sees the same tables.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    # Import models to ensure they're registered with Base
    import database_models  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    await engine.dispose()


@pytest.fixture
async def test_db(session_factory):
    """Isolated AsyncSession for repository/service tests."""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@pytest.fixture
def users_service():
    return FakeUsersService()


@pytest.fixture
async def async_client(session_factory, users_service):
    """
    Async HTTP client against the app with the database and users service
    dependencies overridden.
    """
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_users_service] = lambda: users_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="https://test") as client:
        yield client

    app.dependency_overrides.clear()
