# database.py - Async storage handle for the Kanban API
import os
import logging
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

logger = logging.getLogger("kanban-api.database")

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./kanban.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class KanbanDatabase:
    """Owns the engine and session factory for one process.

    Built once at startup (see ``main.lifespan``), shared by every request
    through :func:`get_db_session`, and released with :meth:`close`.
    """

    def __init__(self, url: str = DATABASE_URL, echo: bool = SQL_ECHO):
        self.url = url
        engine_options = {}
        if not url.startswith("sqlite"):
            # Connection pooling for server databases
            engine_options.update(pool_size=20, max_overflow=0, pool_pre_ping=True, pool_recycle=3600)

        self.engine = create_async_engine(url, echo=echo, future=True, **engine_options)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
            autocommit=False,
        )

    async def init(self):
        """Create tables if they don't exist"""
        from models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info(f"Database initialized ({self.engine.dialect.name})")

    async def close(self):
        """Close the connection pool"""
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self):
        async with self.session_maker() as session:
            try:
                yield session
            finally:
                await session.close()


async def get_db_session(request: Request):
    """Dependency for getting database session (FastAPI Depends)"""
    db: KanbanDatabase = request.app.state.db
    async with db.session() as session:
        yield session
