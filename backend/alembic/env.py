"""Alembic environment: URL from verifyadmin settings, migrations run over asyncpg."""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from verifyadmin.core.config import settings
from verifyadmin.core.database import Base
from verifyadmin.models import authorized_app, authorized_app_stats, realm, user  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def _migrate(connection) -> None:  # type: ignore[no-untyped-def]
    context.configure(connection=connection, target_metadata=Base.metadata)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    migration_engine = create_async_engine(settings.DATABASE_URL, poolclass=pool.NullPool)
    async with migration_engine.connect() as connection:
        await connection.run_sync(_migrate)
    await migration_engine.dispose()


if context.is_offline_mode():
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(_migrate_online())
