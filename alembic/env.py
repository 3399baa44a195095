import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from api.features.auth.entities import AUTH_TABLES
from api.shared.entities.registry import BaseEntity
from core.settings import SETTINGS

# Alembic Config object
config = context.config
config.set_main_option("sqlalchemy.url", str(SETTINGS.DATABASE.DATABASE_URL))

# Configure logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Registry import makes every entity visible in the metadata
target_metadata = BaseEntity.metadata


def include_object(obj, name, type_, reflected, compare_to):
    # Auth tables belong to the auth service and are migrated there
    if type_ == "table" and name in AUTH_TABLES:
        return False
    return True


def run_migrations_offline() -> None:
    """Generate SQL without a live database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        include_object=include_object,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        include_object=include_object,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations against a live database with the async engine."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
