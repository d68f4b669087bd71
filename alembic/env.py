"""Alembic migrations for the master database (tenants, super admins).

Tenant databases are not migrated here; DatabaseRegistry.create_tenant_database
creates their tables from TenantBase.metadata.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from hireflow.config import settings
from hireflow.database import DatabaseRegistry, MasterBase
from hireflow.models import SuperAdmin, Tenant  # noqa: F401

# Alembic configuration
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = MasterBase.metadata


def get_url() -> str:
    url = DatabaseRegistry(settings).build_url(settings.master_database_name)
    return url.render_as_string(hide_password=False)


async def run_migrations_online():
    """Run migrations in 'online' mode using AsyncEngine."""
    connectable = create_async_engine(get_url())

    async with connectable.connect() as connection:
        def do_run_migrations(sync_connection):
            context.configure(
                connection=sync_connection,
                target_metadata=target_metadata,
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()

        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
