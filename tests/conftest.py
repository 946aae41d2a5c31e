"""
Pytest configuration and shared fixtures.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Settings are read from the environment on every get_settings() call; the
# process-wide engine is built at import time, so point it at a scratch file first.
_scratch = Path(tempfile.mkdtemp(prefix="reconstruct-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_scratch / 'app.db'}"
os.environ["DB_CONNECT_RETRIES"] = "0"
os.environ["SECRET_KEY"] = "test-secret"
os.environ.pop("SMTP_HOST", None)

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from reconstruct.db.base import Base  # noqa: E402
from reconstruct.db.session import get_db  # noqa: E402
from reconstruct.main import app  # noqa: E402
from reconstruct.services import email as email_service  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite database per test. NullPool so no connection outlives its event loop."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def fetch_rows(session_factory):
    """Read rows straight from the test database from a synchronous test."""

    def fetch(model, **filters):
        async def run():
            async with session_factory() as session:
                stmt = select(model).filter_by(**filters).order_by(model.id)
                result = await session.execute(stmt)
                return list(result.scalars().all())

        return asyncio.run(run())

    return fetch


@pytest.fixture
def welcome_mail(monkeypatch):
    """Replace SMTP delivery with a mock recording (email, name) calls."""
    mock = AsyncMock(
        return_value=email_service.DeliveryInfo(message_id="<test@reconstruct>", recipient="x")
    )
    monkeypatch.setattr(email_service, "send_welcome_email", mock)
    return mock


@pytest.fixture
def client(session_factory, welcome_mail):
    """FastAPI test client bound to the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user through the API and return (token, user)."""

    def _register(username="Ann", email="ann@example.com", password="correct-horse"):
        response = client.post(
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["token"], body["user"]

    return _register
