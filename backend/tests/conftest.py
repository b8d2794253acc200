"""
Pytest configuration and fixtures for Arbor tests.
"""

import os

# Use in-memory SQLite for tests; must be set before the app is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.main import app
from app.database import get_session
from app.schemas import ProjectCreate, TaskCreate
from app.services.projects import create_project
from app.services.task_lifecycle import create_task


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_maker):
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_maker):
    """Create an async test client with test database."""

    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def project(test_session) -> dict:
    """A project with no tasks."""
    return await create_project(test_session, ProjectCreate(
        user_id=1,
        ws_id=1,
        name="Website relaunch",
        start_date="2025-01-01T09:00:00",
        end_date="2025-03-31T18:00:00",
    ))


@pytest.fixture
def make_task(test_session, project):
    """Factory creating tasks in the `project` fixture through the lifecycle service."""

    async def _make_task(name: str, task_level: int = 1, parent_id: int = 0, **fields) -> dict:
        return await create_task(test_session, TaskCreate(
            ws_id=1,
            user_id=1,
            project_id=fields.pop("project_id", project["id"]),
            name=name,
            task_level=task_level,
            parent_id=parent_id,
            **fields,
        ))

    return _make_task


@pytest_asyncio.fixture(scope="function")
async def full_tree(make_task) -> dict:
    """
    One branch per level plus siblings:

        T1
        ├── S1
        │   ├── A1
        │   │   ├── X1
        │   │   └── X2
        │   └── A2
        └── S2
        T2
    """
    t1 = await make_task("T1")
    s1 = await make_task("S1", 2, t1["id"])
    a1 = await make_task("A1", 3, s1["id"])
    x1 = await make_task("X1", 4, a1["id"])
    x2 = await make_task("X2", 4, a1["id"])
    a2 = await make_task("A2", 3, s1["id"])
    s2 = await make_task("S2", 2, t1["id"])
    t2 = await make_task("T2")
    return {
        "T1": t1, "S1": s1, "A1": a1, "X1": x1, "X2": x2,
        "A2": a2, "S2": s2, "T2": t2,
    }


@pytest.fixture
def fail_flush(monkeypatch):
    """Make the n-th AsyncSession.flush from now on raise a store error."""

    def _install(call_number: int) -> None:
        real_flush = AsyncSession.flush
        calls = 0

        async def flaky_flush(self, *args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == call_number:
                raise OperationalError("UPDATE tasks", {}, Exception("disk I/O error"))
            return await real_flush(self, *args, **kwargs)

        monkeypatch.setattr(AsyncSession, "flush", flaky_flush)

    return _install
