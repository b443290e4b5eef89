"""
Meal Planner Backend - Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the test suite.
How:   Environment variables are set before any `mealplanner` import so the
       settings singleton never points at a real database, API key, or bucket.

Fixture Overview:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── temp_storage: temporary blob root
    ├── test_blob_store: LocalBlobStore rooted in temp_storage
    ├── db_session_factory: real SQLite (aiosqlite) store with both collections
    ├── fake_llm: records prompts, returns canned text or raises
    └── test_client: HTTPX AsyncClient wired to the app with the fakes above
"""

import os
import tempfile
from typing import List, Optional

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="mealplanner_db_"), "unused.db"
)
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="mealplanner_storage_")
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from mealplanner.database import Base, get_db_session  # noqa: E402
from mealplanner.exceptions import GenerationServiceError  # noqa: E402
from mealplanner.models import cookbook, favorite  # noqa: E402,F401
from mealplanner.services.blob_store import LocalBlobStore  # noqa: E402
from mealplanner.services.llm_base import LLMService  # noqa: E402


class FakeLLM(LLMService):
    """Text generator double: remembers prompts, returns `reply` or raises `error`."""

    def __init__(self, reply: str = "# Week 1\n- Monday: Shakshuka"):
        self.reply = reply
        self.error: Optional[Exception] = None
        self.prompts: List[str] = []

    async def generate_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def health_check(self) -> bool:
        return True


@pytest.fixture
def mock_db_session():
    """
    Mock async session: execute, flush, commit, rollback and close are
    AsyncMocks; add is a plain MagicMock.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def test_blob_store(temp_storage):
    return LocalBlobStore(storage_root=temp_storage, bucket="test-bucket")


@pytest_asyncio.fixture
async def db_session_factory(tmp_path):
    """A throwaway SQLite document store with `favorites` and `cookbooks` created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def generation_error():
    """Error a provider raises when the upstream call fails."""
    return GenerationServiceError(context={"error_type": "ServiceUnavailable"})


@pytest_asyncio.fixture
async def test_client(monkeypatch, db_session_factory, test_blob_store, fake_llm):
    """
    HTTPX AsyncClient talking to the app in-process via ASGITransport.

    The document store, blob store, and text generator are swapped for the
    SQLite store, the temp bucket, and FakeLLM.
    """
    from mealplanner.main import app
    from mealplanner.services.cookbook_service import cookbook_service
    from mealplanner.services.generation_service import generation_service

    async def override_get_db_session():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    monkeypatch.setattr(cookbook_service, "blob_store", test_blob_store)
    monkeypatch.setattr(generation_service, "_llm", fake_llm)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
