"""
Shared fixtures

Settings are read at import time, so the test database and the offline
emblem are configured before any application module is imported.
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="land-certs-")
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["DEBUG"] = "false"
os.environ["EMBLEM_URL"] = ""
os.environ["LOG_FILE"] = f"{_TMP_DIR}/app.log"
os.environ["LOG_LEVEL"] = "INFO"

import pytest

from infrastructure.persistence.database import Base, engine, async_session_factory
import infrastructure.persistence.models  # noqa: F401


@pytest.fixture
async def db():
    """Fresh tables for every test"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(db):
    async with async_session_factory() as s:
        yield s
        await s.rollback()
