from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from fastapi import Request
from typing import AsyncGenerator, Optional

from app.core.config import Settings, settings as default_settings

# Create base class for models (can be defined before engine)
Base = declarative_base()


class Database:
    """
    Process-wide connection pool handle.

    Created once by the application lifespan, stored on ``app.state.database``
    and handed to request handlers through :func:`get_db`.

    Connection pooling strategy:
    - SQLite: NullPool (tests and local development)
    - PostgreSQL: the async engine's queue pool with connection limits

    Settings used:
    - DB_POOL_SIZE: Maximum pool size
    - DB_MAX_OVERFLOW: Extra connections allowed
    - DB_POOL_TIMEOUT: Seconds to wait for a pooled connection before failing
    - DB_POOL_RECYCLE: Seconds before connection is recycled
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    def connect(self) -> AsyncEngine:
        """Create the engine and session factory"""
        if self._engine is not None:
            return self._engine

        db_url = self.config.async_database_url

        if "sqlite" in db_url:
            self._engine = create_async_engine(
                db_url,
                echo=self.config.DB_ECHO,
                connect_args={"check_same_thread": False},
                poolclass=NullPool,
            )
        else:
            self._engine = create_async_engine(
                db_url,
                echo=self.config.DB_ECHO,
                pool_size=self.config.DB_POOL_SIZE,
                max_overflow=self.config.DB_MAX_OVERFLOW,
                pool_timeout=self.config.DB_POOL_TIMEOUT,
                pool_recycle=self.config.DB_POOL_RECYCLE,
                pool_pre_ping=True,  # Verify connections before use
            )

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False
        )
        return self._engine

    def session(self) -> AsyncSession:
        """Create a new async session"""
        if self._session_factory is None:
            self.connect()
        return self._session_factory()

    async def create_tables(self) -> None:
        """Create all tables known to the model metadata"""
        import app.models  # noqa: F401 - register models on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all pooled connections"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


# Dependency to get DB session
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session - only commits if there are pending changes"""
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            # Only commit if there are pending changes (new, dirty, or deleted objects)
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
