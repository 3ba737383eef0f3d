"""
Точка входа FastAPI приложения.

Порядок старта:
1. Снимок окружения -> ConnectionDescriptor (один раз, при создании app)
2. DI контейнер получает готовый descriptor
3. lifespan запрашивает AsyncEngine — подключение к БД до приёма запросов
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from src.api import health_router, users_router
from src.db.bootstrap import EngineFactory, create_engine_from_descriptor
from src.db.config import ConnectionDescriptor, resolve_connection_descriptor, snapshot_environment
from src.di import init_di_container
from src.settings import app_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Подключается к БД на старте и закрывает контейнер при остановке.

    Если БД недоступна, исключение выходит из lifespan и сервер не стартует.
    """
    container = app.state.dishka_container
    try:
        await container.get(AsyncEngine)
        logger.info("Application startup complete")
        yield
    finally:
        await container.close()


def create_web_app(
    descriptor: ConnectionDescriptor | None = None,
    engine_factory: EngineFactory = create_engine_from_descriptor,
) -> FastAPI:
    """
    Создаёт и настраивает FastAPI приложение.

    Args:
        descriptor: Параметры подключения; None — разрешить из .env и окружения
        engine_factory: Фабрика AsyncEngine (в тестах — SQLite)
    """
    if descriptor is None:
        descriptor = resolve_connection_descriptor(snapshot_environment(app_settings.ENV_FILE))

    app = FastAPI(
        title="Postgres ORM Starter",
        description="FastAPI + SQLAlchemy + PostgreSQL",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health_router)
    app.include_router(users_router)

    init_di_container(app, descriptor, engine_factory)

    return app


# Для запуска через uvicorn src.main:app
app = create_web_app()


if __name__ == "__main__":
    import uvicorn

    from src.common import setup_logging

    setup_logging(app_settings.LOG_LEVEL)
    uvicorn.run(
        app,
        host=app_settings.HOST,
        port=app_settings.PORT,
        log_level=app_settings.LOG_LEVEL.lower(),
        log_config=None,
    )
