"""
Инициализация подключения к БД.

DatabaseBootstrap получает готовый ConnectionDescriptor и ровно один раз
вызывает фабрику соединений (по умолчанию create_async_engine).
Результат — AsyncEngine (пул соединений), общий для всех репозиториев.

Жизненный цикл:
1. initialize() — создаёт engine, подгружает сущности, проверяет соединение,
   при synchronize_schema создаёт таблицы
2. engine — отдаёт один и тот же engine всем потребителям
3. dispose() — закрывает пул при остановке приложения

Ошибка подключения фатальна: исключение уходит наверх без изменений,
повторных попыток нет.
"""

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.db.base import Base, load_entities
from src.db.config import ConnectionDescriptor
from src.db.exceptions import DatabaseNotInitializedError

logger = logging.getLogger(__name__)

EngineFactory = Callable[[ConnectionDescriptor], AsyncEngine]


def create_engine_from_descriptor(descriptor: ConnectionDescriptor) -> AsyncEngine:
    """
    Фабрика соединений по умолчанию.

    echo=verbose_logging — SQL пишется в лог только в development.
    """
    return create_async_engine(
        descriptor.url,
        echo=descriptor.verbose_logging,
        pool_pre_ping=True,
    )


def async_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False — объекты остаются доступны после commit
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


class DatabaseBootstrap:
    """
    Однократная инициализация AsyncEngine.

    Attributes:
        descriptor: Параметры подключения, не перечитываются
        engine_factory: Фабрика engine, в тестах подменяется на SQLite

    Example:
        ```python
        bootstrap = DatabaseBootstrap(resolve_connection_descriptor(snapshot_environment()))
        engine = await bootstrap.initialize()
        ```
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        engine_factory: EngineFactory = create_engine_from_descriptor,
    ):
        self.descriptor = descriptor
        self.engine_factory = engine_factory
        self._engine: AsyncEngine | None = None
        self._error: BaseException | None = None
        self._disposed = False
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            if self._disposed:
                raise DatabaseNotInitializedError("Database engine requested after dispose()")
            raise DatabaseNotInitializedError("Database engine requested before initialize()")
        return self._engine

    async def initialize(self) -> AsyncEngine:
        """
        Создаёт engine, если он ещё не создан.

        Параллельные вызовы ждут на lock и получают тот же engine.
        После неудачи повторный вызов поднимает ту же ошибку,
        фабрика второй раз не вызывается.

        Returns:
            AsyncEngine: Общий engine приложения

        Raises:
            Исключение фабрики или драйвера без изменений
            DatabaseNotInitializedError: если engine уже закрыт через dispose()
        """
        async with self._lock:
            if self._engine is not None:
                return self._engine
            if self._error is not None:
                raise self._error
            if self._disposed:
                raise DatabaseNotInitializedError("Database engine has been disposed")

            descriptor = self.descriptor
            logger.info(
                "Connecting to %s at %s:%s/%s (synchronize=%s, logging=%s)",
                descriptor.type,
                descriptor.host,
                descriptor.port,
                descriptor.database,
                descriptor.synchronize_schema,
                descriptor.verbose_logging,
            )
            engine: AsyncEngine | None = None
            try:
                engine = self.engine_factory(descriptor)
                load_entities(descriptor.entity_locations)
                async with engine.begin() as conn:
                    if descriptor.synchronize_schema:
                        logger.warning("Schema synchronization enabled, creating missing tables")
                        await conn.run_sync(Base.metadata.create_all)
            # BaseException: отмена старта (CancelledError) тоже закрывает engine
            # и считается окончательной неудачей
            except BaseException as err:
                logger.error("Database initialization failed: %r", err)
                self._error = err
                if engine is not None:
                    await engine.dispose()
                raise

            self._engine = engine
            logger.info("Database connection established")
            return engine

    async def dispose(self) -> None:
        """
        Закрывает пул соединений. До initialize() ничего не делает.

        После dispose() engine больше не отдаётся, а initialize()
        не создаёт новый.
        """
        if self._engine is None:
            return
        engine, self._engine = self._engine, None
        self._disposed = True
        await engine.dispose()
        logger.info("Database connection pool disposed")
