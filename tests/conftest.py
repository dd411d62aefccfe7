import os
from contextlib import asynccontextmanager

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OPENAI_API_KEY", "test")

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from eatoff.core.database import get_session, get_session_factory
from eatoff.main import app
from eatoff.models import Base


@asynccontextmanager
async def _memory_db():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@asynccontextmanager
async def _api_client():
    async with _memory_db() as factory:

        async def _session():
            async with factory() as session:
                yield session

        app.dependency_overrides[get_session] = _session
        app.dependency_overrides[get_session_factory] = lambda: factory
        transport = httpx.ASGITransport(app=app)
        try:
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                yield client, factory
        finally:
            app.dependency_overrides.clear()


@pytest.fixture
def memory_db():
    """Async context manager yielding a session factory over a fresh in-memory database."""
    return _memory_db


@pytest.fixture
def api_client():
    """Async context manager yielding ``(client, session_factory)`` wired to the app."""
    return _api_client
