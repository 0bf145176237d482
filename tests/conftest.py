"""Pytest fixtures for tenancy tests."""

import asyncio
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tenancy.config.settings import InitializationConfig, Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.db.models import Base


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    Tests that call setup_logging() change global state; this keeps them
    from leaking into the next test.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests: in-memory database, cheap password hashing."""
    return Settings(
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        API_SECRET_KEY=SecretStr("test-api-secret"),
        CACHE_PREFIX="test_tenant",
        initialization=InitializationConfig(password_hash_rounds=4),
    )


# =============================================================================
# Redis double
# =============================================================================


def make_fake_redis() -> MagicMock:
    """Asynchronous Redis double backed by a dict.

    Supports the calls RedisCache makes: pipeline() with get/ttl/execute,
    set(ex=), delete(*keys) and ping. The
    backing dict is exposed as ``.store`` and TTLs as ``.ttls``.

    Reads yield to the event loop before touching the store and writes
    yield after applying, so invalidations already scheduled land before
    a later read the way they would against a real server.
    """
    store: dict[str, str] = {}
    ttls: dict[str, int] = {}
    client = MagicMock(name="redis")
    client.store = store
    client.ttls = ttls

    async def _set(key: str, value: str, ex: int | None = None) -> bool:
        store[key] = value
        if ex is not None:
            ttls[key] = ex
        await asyncio.sleep(0)
        return True

    async def _get(key: str) -> str | None:
        await asyncio.sleep(0)
        return store.get(key)

    async def _delete(*keys: str) -> int:
        deleted = 0
        for key in keys:
            if store.pop(key, None) is not None:
                deleted += 1
            ttls.pop(key, None)
        await asyncio.sleep(0)
        return deleted

    def _pipeline() -> MagicMock:
        calls: list[tuple[str, str]] = []
        pipe = MagicMock(name="pipeline")
        pipe.get = MagicMock(side_effect=lambda key: calls.append(("get", key)))
        pipe.ttl = MagicMock(side_effect=lambda key: calls.append(("ttl", key)))

        async def _execute() -> list[Any]:
            await asyncio.sleep(0)
            results: list[Any] = []
            for op, key in calls:
                if op == "get":
                    results.append(store.get(key))
                else:
                    results.append(ttls.get(key, -1) if key in store else -2)
            calls.clear()
            return results

        pipe.execute = AsyncMock(side_effect=_execute)
        return pipe

    client.get = AsyncMock(side_effect=_get)
    client.set = AsyncMock(side_effect=_set)
    client.delete = AsyncMock(side_effect=_delete)
    client.ping = AsyncMock(return_value=True)
    client.pipeline = MagicMock(side_effect=_pipeline)
    return client


@pytest.fixture
def fake_redis() -> MagicMock:
    return make_fake_redis()


@pytest.fixture
def runner() -> CacheTaskRunner:
    """Cache task runner; tests drain it before asserting on cache state."""
    return CacheTaskRunner()


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the full schema, one per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def service_kwargs(test_settings: Settings, runner: CacheTaskRunner) -> dict[str, Any]:
    """Keyword arguments shared by every service under test."""
    return {"settings": test_settings, "runner": runner}


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def test_app(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    fake_redis: MagicMock,
    runner: CacheTaskRunner,
) -> FastAPI:
    """FastAPI application wired to the in-memory database and Redis double."""
    from tenancy.api.app import create_app
    from tenancy.api.dependencies import get_db, get_redis

    app = create_app(settings=test_settings)
    app.state.cache_runner = runner

    async def override_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    async def override_redis() -> MagicMock:
        return fake_redis

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_redis] = override_redis
    return app


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client calling the application in-process."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def authenticated_client(
    test_app: FastAPI,
    test_settings: Settings,
) -> AsyncGenerator[AsyncClient, None]:
    """Client sending the test API key and an acting user."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
        headers={
            "Authorization": f"Bearer {test_settings.API_SECRET_KEY.get_secret_value()}",
            "X-User-ID": "user-test-actor",
        },
    ) as client:
        yield client


@pytest.fixture
def create_tenant(authenticated_client: AsyncClient):
    """Factory that creates a tenant through the API and returns its payload."""

    async def _create(name: str = "Acme Corporation", **fields: Any) -> dict[str, Any]:
        response = await authenticated_client.post(
            "/v1/tenants", json={"name": name, **fields}
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
