"""
Модуль для работы с базой данных.

Содержит:
- config.py — ConnectionDescriptor из переменных окружения
- bootstrap.py — однократное создание AsyncEngine
- base.py — базовая ORM модель и загрузка сущностей
- entities/ — ORM сущности
- repositories/ — репозитории для доступа к данным
- migrations/ и cli.py — миграции Alembic
"""

from src.db.bootstrap import DatabaseBootstrap, async_session_factory, create_engine_from_descriptor
from src.db.config import ConnectionDescriptor, resolve_connection_descriptor, snapshot_environment
from src.db.exceptions import DatabaseNotInitializedError

__all__ = [
    "ConnectionDescriptor",
    "DatabaseBootstrap",
    "DatabaseNotInitializedError",
    "async_session_factory",
    "create_engine_from_descriptor",
    "resolve_connection_descriptor",
    "snapshot_environment",
]
