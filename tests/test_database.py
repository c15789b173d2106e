"""Tests for engine and session setup."""

import pytest
import pytest_asyncio
from sqlalchemy import select

from hrms_core import database
from hrms_core.config import get_settings
from hrms_core.models import Organization


@pytest_asyncio.fixture
async def memory_database(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    get_settings.cache_clear()
    await database.dispose_db()
    yield
    await database.dispose_db()
    get_settings.cache_clear()


class TestInitDb:
    async def test_engine_created_once(self, memory_database):
        engine, factory = database.init_db()

        assert database.init_db() == (engine, factory)
        assert engine.url.drivername == "sqlite+aiosqlite"

    async def test_dispose_resets_globals(self, memory_database):
        first, _ = database.init_db()
        await database.dispose_db()

        second, _ = database.init_db()
        assert second is not first

    async def test_schema_created_on_global_engine(self, memory_database):
        await database.create_schema()

        async with database.get_session() as session:
            session.add(Organization(name="Acme Corp"))

        async with database.get_session() as session:
            names = (await session.scalars(select(Organization.name))).all()
        assert names == ["Acme Corp"]


class TestSavepoints:
    async def test_rolled_back_savepoint_keeps_outer_work(self, session):
        """Test that a failed nested block only discards its own rows."""
        session.add(Organization(name="Kept"))
        await session.flush()

        with pytest.raises(RuntimeError):
            async with session.begin_nested():
                session.add(Organization(name="Dropped"))
                await session.flush()
                raise RuntimeError("write failed")

        names = (await session.scalars(select(Organization.name))).all()
        assert names == ["Kept"]
