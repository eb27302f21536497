"""
Registry database: engine, sessions and schema creation

from infrastructure.persistence.database import Base, get_session
"""
import os
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from config import settings

# Seconds a writer waits for another transaction's lock (two issuances racing for one parcel)
SQLITE_BUSY_TIMEOUT = 15


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def _ensure_sqlite_dir(url: str) -> None:
    db_url = make_url(url)
    if db_url.database and db_url.database != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(db_url.database)), exist_ok=True)


def _engine_options(url: str) -> dict:
    if _is_sqlite(url):
        return {"connect_args": {"timeout": SQLITE_BUSY_TIMEOUT}}
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


if _is_sqlite(settings.DB_URL):
    _ensure_sqlite_dir(settings.DB_URL)

engine = create_async_engine(
    settings.DB_URL,
    echo=settings.DEBUG,
    future=True,
    **_engine_options(settings.DB_URL),
)

if _is_sqlite(settings.DB_URL):
    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_pragmas(dbapi_connection, connection_record):
        # ON DELETE SET NULL for certificates.created_by
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)

Base = declarative_base()


async def init_db():
    """Create the users, certificates and certificate_assets tables"""
    import infrastructure.persistence.models  # noqa: F401  registers all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: commit on success, rollback on any error"""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_session():
    """Same unit of work for the CLI and tests"""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
