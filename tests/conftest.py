"""Pytest fixtures and configuration."""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.errors import AIServiceError
from app.core.security import create_access_token
from app.db.postgres import Base, get_db
from app.main import app
from app.models.sql import board, document, feature, user  # noqa: F401
from app.models.sql.user import User
from app.services.ai_service import AIService, DiagramType, get_ai_service
from app.services.content_store import ContentStore, get_content_store

# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeContentCollection:
    """In-memory stand-in for the Motor content collection.

    Set ``error`` to make every call raise it.
    """

    def __init__(self):
        self.documents: dict[str, dict[str, Any]] = {}
        self.error: Exception | None = None

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    async def replace_one(self, query: dict, document: dict, upsert: bool = False):
        self._check()
        self.documents[query["_id"]] = dict(document)
        return MagicMock(matched_count=1)

    async def find_one(self, query: dict):
        self._check()
        return self.documents.get(query["_id"])

    async def delete_one(self, query: dict):
        self._check()
        removed = self.documents.pop(query["_id"], None)
        return MagicMock(deleted_count=1 if removed else 0)


class FakeAIService(AIService):
    """AI service answering from canned text instead of the network."""

    def __init__(self):
        super().__init__(api_key="test-key", model="test-model")
        self.error: AIServiceError | None = None
        self.calls: list[tuple[str, str]] = []

    async def refine(self, content: str) -> str:
        self.calls.append(("refine", content))
        if self.error:
            raise self.error
        return f"# Refined\n\n{content.strip()}"

    async def generate_diagram(
        self, prompt: str, diagram_type: DiagramType = DiagramType.FLOWCHART
    ) -> str:
        self.calls.append(("diagram", prompt))
        if self.error:
            raise self.error
        return "flowchart TD\n    A --> B"


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh in-memory database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def content_collection() -> FakeContentCollection:
    return FakeContentCollection()


@pytest.fixture
def fake_ai() -> FakeAIService:
    return FakeAIService()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    content_collection: FakeContentCollection,
    fake_ai: FakeAIService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden dependencies."""

    async def override_get_db():
        yield db_session

    # Rate limiter sees an empty window for every request
    mock_pipeline = MagicMock()
    mock_pipeline.execute = AsyncMock(return_value=[0, 0, 1, True])
    mock_redis = MagicMock()
    mock_redis.pipeline.return_value = mock_pipeline
    mock_redis.zrem = AsyncMock()

    with patch("app.db.redis.get_redis", return_value=mock_redis):
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_content_store] = lambda: ContentStore(
            content_collection, timeout=1
        )
        app.dependency_overrides[get_ai_service] = lambda: fake_ai

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        provider_uid="google-uid-test",
        email="test@example.com",
        name="Test User",
        provider="google",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Create a second user for ownership checks."""
    user = User(
        provider_uid="google-uid-other",
        email="other@example.com",
        name="Other User",
        provider="google",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def make_auth_headers(user: User) -> dict:
    token = create_access_token(
        user.provider_uid,
        additional_claims={"email": user.email, "name": user.name},
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Create authentication headers for test user."""
    return make_auth_headers(test_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    """Create authentication headers for the second user."""
    return make_auth_headers(other_user)
