"""
DI провайдеры для Dishka.

Scope (область жизни):
- APP — создаётся один раз при старте приложения (descriptor, engine, фабрика сессий)
- REQUEST — создаётся на каждый HTTP запрос (сессия, репозитории, сервисы)
"""

from collections.abc import AsyncGenerator

from dishka import Provider, Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.db.bootstrap import (
    DatabaseBootstrap,
    EngineFactory,
    async_session_factory,
    create_engine_from_descriptor,
)
from src.db.config import ConnectionDescriptor
from src.db.repositories import UserRepository
from src.services import UsersService


class DatabaseProvider(Provider):
    """
    Провайдер подключения к БД.

    Descriptor передаётся готовым: провайдер его не пересобирает и окружение
    не читает. Engine живёт в scope APP, поэтому фабрика соединений
    вызывается один раз на контейнер.
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        engine_factory: EngineFactory = create_engine_from_descriptor,
    ):
        super().__init__()
        self._descriptor = descriptor
        self._engine_factory = engine_factory

    @provide(scope=Scope.APP)
    def get_descriptor(self) -> ConnectionDescriptor:
        return self._descriptor

    @provide(scope=Scope.APP)
    def get_bootstrap(self, descriptor: ConnectionDescriptor) -> DatabaseBootstrap:
        return DatabaseBootstrap(descriptor, self._engine_factory)

    @provide(scope=Scope.APP)
    async def get_engine(self, bootstrap: DatabaseBootstrap) -> AsyncGenerator[AsyncEngine, None]:
        """
        Engine создаётся при первом запросе к контейнеру (lifespan делает это на старте)
        и закрывается вместе с контейнером.
        """
        engine = await bootstrap.initialize()
        yield engine
        await bootstrap.dispose()

    @provide(scope=Scope.APP)
    def get_session_maker(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return async_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_maker: async_sessionmaker[AsyncSession]
    ) -> AsyncGenerator[AsyncSession, None]:
        """
        Сессия на запрос: commit если обработчик завершился без ошибок,
        иначе rollback.
        """
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


class RepositoriesProvider(Provider):
    scope = Scope.REQUEST

    @provide
    def get_user_repository(self, session: AsyncSession) -> UserRepository:
        return UserRepository(session)


class ServicesProvider(Provider):
    scope = Scope.REQUEST

    @provide
    def get_users_service(self, user_repo: UserRepository) -> UsersService:
        return UsersService(user_repo)
