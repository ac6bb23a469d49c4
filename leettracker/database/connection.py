"""
Database connection and session management.

Provides the async SQLAlchemy engine and session factory. SQLite (via
aiosqlite) is the default store; PostgreSQL URLs are rewritten to asyncpg.
"""

import logging
from typing import AsyncGenerator, Optional, Dict, Any
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
    AsyncEngine,
)
from sqlalchemy.pool import NullPool

from config import settings
from .exceptions import DatabaseConnectionError
from .models import Base

logger = logging.getLogger(__name__)


def normalize_database_url(database_url: str) -> str:
    """Convert plain postgres/sqlite URLs to their async driver variants."""
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


class Database:
    """Database connection manager."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.database_url
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._initialized = False

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect in use ("sqlite" or "postgresql")."""
        if self.engine is not None:
            return self.engine.dialect.name
        return normalize_database_url(self.database_url).split("+", 1)[0].split(":", 1)[0]

    def insert(self, model):
        """Dialect-specific INSERT supporting ON CONFLICT clauses."""
        if self.dialect_name == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            from sqlalchemy.dialects.sqlite import insert
        return insert(model)

    async def initialize(self) -> bool:
        """Initialize database connection and create tables."""
        if self._initialized:
            return True

        if not self.database_url:
            logger.warning("DATABASE_URL not configured")
            return False

        try:
            database_url = normalize_database_url(self.database_url)

            if database_url.startswith("sqlite"):
                # One connection per session; the file itself serializes writers
                engine_kwargs: Dict[str, Any] = {"poolclass": NullPool}
            else:
                engine_kwargs = {
                    "pool_size": settings.db_pool_size,
                    "max_overflow": settings.db_max_overflow,
                    "pool_timeout": settings.db_pool_timeout,
                    "pool_recycle": settings.db_pool_recycle,
                    "pool_pre_ping": True,
                    "connect_args": {
                        "server_settings": {"application_name": "leettracker"}
                    },
                }
                logger.info(
                    f"Database pool config: size={settings.db_pool_size}, "
                    f"max_overflow={settings.db_max_overflow}"
                )

            self.engine = create_async_engine(
                database_url,
                echo=settings.database_echo,
                **engine_kwargs
            )

            self.session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            self._initialized = True
            logger.info(f"Database initialized successfully ({self.engine.dialect.name})")
            return True

        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            return False

    async def close(self):
        """Close database connection."""
        if self.engine:
            await self.engine.dispose()
            self._initialized = False
            logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session. Commits on success, rolls back on error."""
        if not self._initialized:
            await self.initialize()

        if not self.session_factory:
            raise DatabaseConnectionError("Database not initialized")

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Database session error: {e}")
                raise

    async def health_check(self) -> dict:
        """Perform health check on database."""
        try:
            async with self.session() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()

            return {
                "status": "healthy",
                "dialect": self.dialect_name,
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
            }


# Singleton instance
_database: Optional[Database] = None


def get_database() -> Database:
    """Get the database singleton."""
    global _database
    if _database is None:
        _database = Database()
    return _database


async def init_database() -> bool:
    """Initialize the database."""
    db = get_database()
    return await db.initialize()


async def close_database():
    """Close the database connection."""
    global _database
    if _database:
        await _database.close()
        _database = None
