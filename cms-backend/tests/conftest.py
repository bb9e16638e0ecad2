"""Shared pytest fixtures for backend tests."""

import os
import sys
from datetime import datetime, timedelta
from typing import Any, AsyncGenerator, Optional
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Add app to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cms_versions.database import Base
from cms_versions.main import app
from cms_versions.schemas.page import PageState
from cms_versions.schemas.version import Snapshot
from cms_versions.services.version_store import VersionStore, get_version_store


def make_state(title: str = "Home", sections: Optional[list[dict]] = None, **fields: Any) -> PageState:
    """Build a PageState from camelCase fields and section dicts."""
    return PageState.model_validate({"title": title, "sections": sections or [], **fields})


def make_snapshot(
    state: PageState,
    page_id: Optional[UUID] = None,
    version_number: int = 1,
) -> Snapshot:
    """Build a detached Snapshot for pure comparison tests."""
    return Snapshot(
        id=uuid4(),
        page_id=page_id or uuid4(),
        version_number=version_number,
        created_at=datetime(2026, 1, 1) + timedelta(minutes=version_number),
        created_by="tester",
        state=state,
    )


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed SQLite test database.

    A file (rather than :memory:) lets concurrent sessions see each
    other's commits, which the concurrency tests rely on.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )

    # Enable foreign key support for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to the test database."""
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def store(session_factory: async_sessionmaker) -> VersionStore:
    """VersionStore on the test database."""
    return VersionStore(session_factory)


@pytest_asyncio.fixture
async def client(store: VersionStore) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with the version store dependency overridden."""
    app.dependency_overrides[get_version_store] = lambda: store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def home_v1() -> PageState:
    """Home page with a single hero section."""
    return make_state(
        "Home",
        sections=[{"sectionKey": "hero", "title": "Welcome"}],
    )


@pytest.fixture
def home_v2() -> PageState:
    """Home page with an edited hero and an added call to action."""
    return make_state(
        "Home",
        sections=[
            {"sectionKey": "hero", "title": "Welcome!"},
            {"sectionKey": "cta", "title": "Sign up"},
        ],
    )


@pytest_asyncio.fixture
async def home_page(store: VersionStore, home_v1: PageState, home_v2: PageState):
    """A page with versions 1 and 2; returns (page_id, v1, v2)."""
    page, v1 = await store.create_page("home", home_v1, created_by="alice")
    v2 = await store.create_snapshot(
        page.id,
        home_v2,
        created_by="alice",
        change_description="Add call to action",
    )
    return page.id, v1, v2
