"""
Инициализация DI контейнера Dishka.

Использование:
    from src.di import init_di_container

    app = FastAPI()
    init_di_container(app, descriptor)
"""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI

from src.db.bootstrap import EngineFactory, create_engine_from_descriptor
from src.db.config import ConnectionDescriptor
from src.di.providers import DatabaseProvider, RepositoriesProvider, ServicesProvider

__all__ = [
    "DatabaseProvider",
    "RepositoriesProvider",
    "ServicesProvider",
    "container_factory",
    "init_di_container",
]


def container_factory(
    descriptor: ConnectionDescriptor,
    engine_factory: EngineFactory = create_engine_from_descriptor,
) -> AsyncContainer:
    """
    Создаёт DI контейнер со всеми провайдерами.

    Args:
        descriptor: Уже разрешённые параметры подключения
        engine_factory: Фабрика AsyncEngine
    """
    return make_async_container(
        DatabaseProvider(descriptor, engine_factory),
        RepositoriesProvider(),
        ServicesProvider(),
    )


def init_di_container(
    app: FastAPI,
    descriptor: ConnectionDescriptor,
    engine_factory: EngineFactory = create_engine_from_descriptor,
) -> None:
    """
    Подключает контейнер к FastAPI (app.state.dishka_container).
    """
    setup_dishka(container_factory(descriptor, engine_factory), app)
