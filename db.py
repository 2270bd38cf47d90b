"""
Storage backends.

A single Storage instance is created at process start (create_storage) and
passed to every job and service that needs to open sessions. Repositories
only ever see the AsyncSession handed to them.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.pool import StaticPool

import config
from models.base import Base

# Imports of these models are needed to correctly create tables in the database.
from models.product import Product  # noqa: F401
from models.addon import Addon  # noqa: F401
from models.user import User  # noqa: F401
from models.order import Order  # noqa: F401
from models.email_log import EmailLog  # noqa: F401

logger = logging.getLogger(__name__)

# SQL echo stays off, statements clutter the application log
sql_echo = False


class Storage(ABC):
    """Relational record store shared by repositories."""

    name: str = "storage"

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session that rolls back on any error. Callers commit explicitly."""
        session = self._session_maker()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"[Storage] {self.name} error, transaction rolled back: {e}")
            raise
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"[Storage] {self.name} health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()

    @classmethod
    @abstractmethod
    def from_config(cls) -> "Storage":
        ...


class SQLiteStorage(Storage):
    """File (or in-memory) SQLite through aiosqlite."""

    name = "sqlite"

    def __init__(self, db_path: str):
        if db_path == ":memory:":
            # One shared connection, otherwise every session sees an empty database
            engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=sql_echo,
                                         connect_args={"check_same_thread": False}, poolclass=StaticPool)
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=sql_echo)

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        super().__init__(engine)
        self.db_path = db_path

    @classmethod
    def from_config(cls) -> "SQLiteStorage":
        if config.DB_NAME == ":memory:":
            return cls(":memory:")
        return cls(str(Path("data") / config.DB_NAME))


class PostgresStorage(Storage):
    """PostgreSQL through asyncpg with a pre-pinged connection pool."""

    name = "postgres"

    def __init__(self, database_url: str, pool_size: int = 5, max_overflow: int = 10):
        engine = create_async_engine(
            normalize_postgres_url(database_url),
            echo=sql_echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        super().__init__(engine)

    @classmethod
    def from_config(cls) -> "PostgresStorage":
        return cls(config.DATABASE_URL, pool_size=config.DB_POOL_SIZE, max_overflow=config.DB_MAX_OVERFLOW)


def normalize_postgres_url(url: str) -> str:
    """Force the asyncpg driver on plain postgres:// / postgresql:// URLs."""
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


def create_storage(backend: str | None = None) -> Storage:
    """Build the configured backend. Call once at startup."""
    backend = backend or config.DB_BACKEND
    if backend == "postgres":
        storage = PostgresStorage.from_config()
    elif backend == "sqlite":
        storage = SQLiteStorage.from_config()
    else:
        raise ValueError(f"Unsupported storage backend: {backend}")
    logger.info(f"[Storage] Using {storage.name} backend")
    return storage
