import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncConnection, async_engine_from_config

from src.db.base import Base, load_entities
from src.db.config import ConnectionDescriptor, resolve_connection_descriptor, snapshot_environment
from src.settings import app_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# CLI кладёт готовый descriptor в attributes; при запуске голого `alembic` собираем сами
descriptor: ConnectionDescriptor = config.attributes.get("descriptor") or resolve_connection_descriptor(
    snapshot_environment(app_settings.ENV_FILE)
)
load_entities(descriptor.entity_locations)

# configparser использует % для интерполяции
config.set_main_option(
    "sqlalchemy.url",
    descriptor.url.render_as_string(hide_password=False).replace("%", "%%"),
)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Генерация SQL без подключения к БД (alembic upgrade --sql)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Готовое соединение из attributes (тесты) или новый engine по descriptor."""
    connectable = config.attributes.get("connection")

    if connectable is not None:
        if isinstance(connectable, AsyncConnection):

            async def run_with_async_connection() -> None:
                await connectable.run_sync(do_run_migrations)

            asyncio.run(run_with_async_connection())
        else:
            do_run_migrations(connectable)
        return

    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
