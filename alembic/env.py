import asyncio
import logging
import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from infra.databases.models.queue_entry_model import Base
from infra.settings.settings import get_settings
from config.database import DatabaseConfig

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def resolve_queue_store_url(async_driver: bool) -> str:
    """
    Queue store URL taken from the application settings.

    DATABASE_URL wins over the individual DATABASE_* variables, exactly as it
    does for the API and the drain workers.
    """
    url = get_settings().database.url
    return url if async_driver else DatabaseConfig.to_sync_url(url)


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without connecting to the queue store."""
    context.configure(
        url=resolve_queue_store_url(async_driver=False),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def apply_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    url = resolve_queue_store_url(async_driver=True)
    logger.info(f"Migrating queue store at {url.split('@')[-1]}")

    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(apply_migrations)
    finally:
        await engine.dispose()


provided_connection = config.attributes.get("connection")

if context.is_offline_mode():
    run_migrations_offline()
elif provided_connection is not None:
    apply_migrations(provided_connection)
else:
    asyncio.run(run_migrations_online())
