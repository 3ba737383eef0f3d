"""
Тесты однократной инициализации подключения.

Проверяем:
- фабрика вызывается ровно один раз, в том числе при параллельном старте
- synchronize_schema создаёт таблицы, без него схема не трогается
- ошибка подключения уходит наверх без изменений и без повторов
"""

import asyncio

import pytest
from sqlalchemy import exc, inspect
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.db.bootstrap import DatabaseBootstrap, create_engine_from_descriptor
from src.db.config import ConnectionDescriptor, resolve_connection_descriptor
from src.db.exceptions import DatabaseNotInitializedError


async def _table_names(engine: AsyncEngine) -> list[str]:
    async with engine.connect() as conn:
        return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())


async def test_initialize_calls_factory_once(engine_factory):
    descriptor = ConnectionDescriptor()
    bootstrap = DatabaseBootstrap(descriptor, engine_factory)

    first = await bootstrap.initialize()
    second = await bootstrap.initialize()

    assert first is second
    assert bootstrap.engine is first
    assert engine_factory.calls == [descriptor]
    await bootstrap.dispose()


async def test_concurrent_initialize_creates_single_engine(engine_factory):
    bootstrap = DatabaseBootstrap(ConnectionDescriptor(), engine_factory)

    engines = await asyncio.gather(*(bootstrap.initialize() for _ in range(10)))

    assert len(engine_factory.calls) == 1
    assert all(engine is engines[0] for engine in engines)
    await bootstrap.dispose()


async def test_engine_before_initialize_raises(engine_factory):
    bootstrap = DatabaseBootstrap(ConnectionDescriptor(), engine_factory)

    assert bootstrap.is_initialized is False
    with pytest.raises(DatabaseNotInitializedError):
        _ = bootstrap.engine
    assert engine_factory.calls == []


async def test_factory_receives_descriptor_unchanged(engine_factory):
    descriptor = resolve_connection_descriptor({"DB_HOST": "db.internal", "DB_PORT": "6543"})
    bootstrap = DatabaseBootstrap(descriptor, engine_factory)

    await bootstrap.initialize()

    assert engine_factory.calls[0] is descriptor
    await bootstrap.dispose()


async def test_synchronize_schema_creates_tables(
    engine_factory, dev_descriptor: ConnectionDescriptor
):
    bootstrap = DatabaseBootstrap(dev_descriptor, engine_factory)

    engine = await bootstrap.initialize()

    assert "users" in await _table_names(engine)
    await bootstrap.dispose()


async def test_without_synchronize_schema_is_untouched(engine_factory):
    bootstrap = DatabaseBootstrap(ConnectionDescriptor(), engine_factory)

    engine = await bootstrap.initialize()

    assert await _table_names(engine) == []
    await bootstrap.dispose()


async def test_factory_error_propagates_unmodified():
    error = ConnectionRefusedError("db.internal:5432 unreachable")
    calls: list[ConnectionDescriptor] = []

    def failing_factory(descriptor: ConnectionDescriptor) -> AsyncEngine:
        calls.append(descriptor)
        raise error

    bootstrap = DatabaseBootstrap(ConnectionDescriptor(host="db.internal"), failing_factory)

    with pytest.raises(ConnectionRefusedError) as exc_info:
        await bootstrap.initialize()

    assert exc_info.value is error
    assert bootstrap.is_initialized is False
    with pytest.raises(DatabaseNotInitializedError):
        _ = bootstrap.engine


async def test_failed_initialize_is_not_retried():
    calls: list[ConnectionDescriptor] = []

    def failing_factory(descriptor: ConnectionDescriptor) -> AsyncEngine:
        calls.append(descriptor)
        raise ConnectionRefusedError("unreachable")

    bootstrap = DatabaseBootstrap(ConnectionDescriptor(), failing_factory)

    with pytest.raises(ConnectionRefusedError):
        await bootstrap.initialize()
    with pytest.raises(ConnectionRefusedError):
        await bootstrap.initialize()

    assert len(calls) == 1


async def test_connect_error_disposes_engine(tmp_path):
    """Engine создан, но подключиться нельзя: ошибка драйвера наверх, пул закрыт."""
    created: list[AsyncEngine] = []

    def broken_sqlite_factory(descriptor: ConnectionDescriptor) -> AsyncEngine:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
        created.append(engine)
        return engine

    bootstrap = DatabaseBootstrap(ConnectionDescriptor(), broken_sqlite_factory)

    with pytest.raises(exc.OperationalError):
        await bootstrap.initialize()

    assert len(created) == 1
    assert bootstrap.is_initialized is False


async def test_unreachable_postgres_fails_startup():
    """Реальная фабрика asyncpg: на закрытый порт соединение отвергается сразу."""
    descriptor = resolve_connection_descriptor({"DB_HOST": "127.0.0.1", "DB_PORT": "1"})
    bootstrap = DatabaseBootstrap(descriptor)

    with pytest.raises((OSError, exc.DBAPIError)):
        await bootstrap.initialize()

    assert bootstrap.is_initialized is False


def test_default_factory_builds_asyncpg_engine():
    descriptor = resolve_connection_descriptor({"DB_HOST": "db.internal", "NODE_ENV": "development"})

    engine = create_engine_from_descriptor(descriptor)

    assert engine.url.drivername == "postgresql+asyncpg"
    assert engine.url.host == "db.internal"
    assert engine.echo is True


async def test_dispose_before_initialize_is_noop(engine_factory):
    bootstrap = DatabaseBootstrap(ConnectionDescriptor(), engine_factory)

    await bootstrap.dispose()

    assert engine_factory.calls == []


async def test_cancelled_initialize_is_terminal(engine_factory, monkeypatch):
    """Отмена после создания engine: повторный initialize() фабрику не вызывает."""

    def cancelled_load(patterns):
        raise asyncio.CancelledError

    monkeypatch.setattr("src.db.bootstrap.load_entities", cancelled_load)
    bootstrap = DatabaseBootstrap(ConnectionDescriptor(), engine_factory)

    with pytest.raises(asyncio.CancelledError):
        await bootstrap.initialize()
    with pytest.raises(asyncio.CancelledError):
        await bootstrap.initialize()

    assert len(engine_factory.calls) == 1
    assert bootstrap.is_initialized is False


async def test_engine_unavailable_after_dispose(engine_factory):
    bootstrap = DatabaseBootstrap(ConnectionDescriptor(), engine_factory)
    await bootstrap.initialize()

    await bootstrap.dispose()

    assert bootstrap.is_initialized is False
    with pytest.raises(DatabaseNotInitializedError):
        _ = bootstrap.engine
    with pytest.raises(DatabaseNotInitializedError):
        await bootstrap.initialize()
    assert len(engine_factory.calls) == 1
