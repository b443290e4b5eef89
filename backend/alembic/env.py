"""
Alembic Migration Environment
=============================

What:  Applies the `favorites` / `cookbooks` migrations.
How:   The URL comes from `alembic -x db_url=...` if given, else DATABASE_URL
       via mealplanner settings. SQLite (the dev/test store) runs in batch
       mode so ALTERs work; PostgreSQL migrates through asyncpg.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from mealplanner.config import settings
from mealplanner.database import Base
from mealplanner.models.cookbook import Cookbook  # noqa: F401
from mealplanner.models.favorite import Favorite  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("db_url", settings.database_url)


def configure(**kwargs) -> None:
    url = database_url()
    context.configure(
        target_metadata=Base.metadata,
        render_as_batch=url.startswith("sqlite"),
        compare_type=True,
        **kwargs,
    )


def run_offline() -> None:
    configure(url=database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def migrate(connection: Connection) -> None:
    configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    engine = create_async_engine(database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
