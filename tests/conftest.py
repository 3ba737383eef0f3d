"""
Общие фикстуры для тестов.

Вместо PostgreSQL везде SQLite в памяти (aiosqlite):
быстро и не требует внешней БД.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from src.db.base import Base
from src.db.bootstrap import async_session_factory
from src.db.config import ConnectionDescriptor
from src.db.entities.user import UserEntity
from src.db.repositories import UserRepository
from src.services import UsersService

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


def sqlite_engine_factory(descriptor: ConnectionDescriptor) -> AsyncEngine:
    """
    Фабрика соединений для тестов.

    StaticPool — одно соединение на engine, иначе каждая сессия
    получала бы свою пустую in-memory БД.
    """
    return create_async_engine(
        SQLITE_MEMORY_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


class CountingEngineFactory:
    """Запоминает, сколько раз и с каким descriptor вызывалась фабрика."""

    def __init__(self, factory: Callable[[ConnectionDescriptor], AsyncEngine] = sqlite_engine_factory):
        self.factory = factory
        self.calls: list[ConnectionDescriptor] = []

    def __call__(self, descriptor: ConnectionDescriptor) -> AsyncEngine:
        self.calls.append(descriptor)
        return self.factory(descriptor)


@pytest.fixture
def engine_factory() -> CountingEngineFactory:
    return CountingEngineFactory()


@pytest.fixture
def dev_descriptor() -> ConnectionDescriptor:
    """Descriptor режима development: схема создаётся при старте."""
    return ConnectionDescriptor(synchronize_schema=True, verbose_logging=True)


@pytest.fixture
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Сессия поверх чистой in-memory БД, таблицы создаются для каждого теста.
    """
    engine = sqlite_engine_factory(ConnectionDescriptor())

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory(engine)() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def user_repo(async_session: AsyncSession) -> UserRepository:
    return UserRepository(async_session)


@pytest.fixture
def users_service(user_repo: UserRepository) -> UsersService:
    return UsersService(user_repo)


@pytest.fixture
async def sample_user(user_repo: UserRepository) -> UserEntity:
    """
    Просто какой-то существующий пользователь для тестов чтения/обновления/удаления.
    """
    return await user_repo.create(
        first_name="Иван",
        last_name="Петров",
        email="ivan@example.com",
    )


@pytest.fixture
def user_factory(user_repo: UserRepository) -> Callable[..., Awaitable[UserEntity]]:
    """
    Фабрика пользователей: несколько пользователей с уникальными email.

    Пример:
        async def test_something(user_factory):
            first = await user_factory(email="a@example.com")
            second = await user_factory(email="b@example.com")
    """

    async def _create(**kwargs) -> UserEntity:
        defaults = {
            "first_name": "Тест",
            "last_name": "Тестов",
            "email": "test@example.com",
        }
        defaults.update(kwargs)
        return await user_repo.create(**defaults)

    return _create
