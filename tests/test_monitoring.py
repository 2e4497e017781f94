from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.db.migrations.runner import discover_migrations, migrate
from shikshan.db.schema_check import list_tables
from shikshan.db.seed_subscriptions import seed_subscriptions
from shikshan.db.seed_super_admin import seed_super_admin
from shikshan.db.session import create_engine, create_session_factory
from shikshan.main import create_app


@pytest.fixture()
async def migrated_engine(tmp_path, settings) -> AsyncGenerator[AsyncEngine, None]:
    db_engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'monitoring.db'}", settings=settings)
    await migrate(db_engine)
    yield db_engine
    await db_engine.dispose()


def _client_for(engine: AsyncEngine) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=create_app(engine)), base_url="http://test")


async def test_health_is_healthy_when_migrated(migrated_engine: AsyncEngine, settings) -> None:
    async with create_session_factory(migrated_engine)() as db:
        await seed_subscriptions(db)
        await seed_super_admin(db, settings)

    async with _client_for(migrated_engine) as client:
        response = await client.get("/api/v1/monitoring/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == {"connected": True, "dialect": "sqlite", "error": None}
    assert data["migrations"]["up_to_date"] is True
    assert data["counts"] == {"schools": 0, "users": 1}


async def test_health_is_degraded_with_pending_migrations(client: AsyncClient) -> None:
    response = await client.get("/api/v1/monitoring/health")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"]["connected"] is True
    assert len(data["migrations"]["pending"]) == len(discover_migrations())


async def test_health_is_degraded_when_database_unreachable(tmp_path, settings) -> None:
    db_engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}", settings=settings)
    try:
        async with _client_for(db_engine) as client:
            response = await client.get("/api/v1/monitoring/health")
    finally:
        await db_engine.dispose()

    assert response.status_code == 503
    data = response.json()
    assert data["database"]["connected"] is False
    assert data["database"]["error"]
    assert data["migrations"] is None


async def test_migration_status_endpoint(migrated_engine: AsyncEngine) -> None:
    async with _client_for(migrated_engine) as client:
        response = await client.get("/api/v1/monitoring/migrations")

    assert response.status_code == 200
    data = response.json()
    names = [m.name for m in discover_migrations()]
    assert data == {"applied": names, "pending": [], "total": len(names), "up_to_date": True}


async def test_health_on_fresh_database_creates_nothing(tmp_path, settings) -> None:
    db_engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}", settings=settings)
    try:
        async with _client_for(db_engine) as client:
            response = await client.get("/api/v1/monitoring/health")
        tables = await list_tables(db_engine)
    finally:
        await db_engine.dispose()

    assert response.status_code == 503
    assert response.json()["migrations"]["applied"] == []
    assert "schema_migrations" not in tables
