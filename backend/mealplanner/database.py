"""
Meal Planner Backend - Document Store Session Management
========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   One engine per process; one AsyncSession per request. The dependency
       commits on success and rolls back on error.
Who:   Route handlers (via Depends), the lifespan hook, and the health check.

Each "collection" of the document store is a table: `favorites` and
`cookbooks`. PostgreSQL (asyncpg) is the production backend; SQLite
(aiosqlite) is used for tests and local runs, in which case pool sizing
options are not passed to the engine.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from mealplanner.config import settings


def _engine_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


engine: AsyncEngine = create_async_engine(settings.database_url, **_engine_options())

# expire_on_commit=False: attributes stay readable after the dependency commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata is what Alembic tracks."""
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a document store session per request.

    1. Creates a new session from the factory
    2. Yields it to the route handler
    3. Commits on success, rolls back on any error, always closes

    Example usage in a route:
        @router.get("/favorites")
        async def list_favorites(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables() -> None:
    """Creates any missing collections. Used when DB_CREATE_TABLES is set."""
    # Models must be imported so their tables are registered on Base.metadata
    from mealplanner.models import cookbook, favorite  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
