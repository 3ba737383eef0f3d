"""
Базовая ORM модель и поиск сущностей.

Все сущности наследуются от Base и лежат в пакетах entities/
(например src/db/entities/user.py). load_entities импортирует их по
glob-шаблонам из ConnectionDescriptor.entity_locations, чтобы таблицы
попали в Base.metadata до create_all или autogenerate в alembic.
"""

import importlib
import logging
from collections.abc import Iterable
from datetime import datetime
from glob import glob
from pathlib import Path

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.functions import func

from src.db.config import SRC_DIR

logger = logging.getLogger(__name__)

PROJECT_ROOT = SRC_DIR.parent


class Base(DeclarativeBase):
    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    def dump_dict(self) -> dict:
        """
        Словарь колонок сущности без служебного состояния SQLAlchemy.
        """
        return {column.key: getattr(self, column.key) for column in self.__mapper__.column_attrs}


def _module_name(path: Path) -> str:
    return ".".join(path.resolve().relative_to(PROJECT_ROOT).with_suffix("").parts)


def load_entities(patterns: Iterable[str]) -> list[str]:
    """
    Импортирует модули сущностей по glob-шаблонам.

    Args:
        patterns: Шаблоны вида /app/src/**/entities/*.py

    Returns:
        Отсортированный список импортированных модулей

    Ошибки импорта не перехватываются — сломанная сущность
    должна остановить старт, а не тихо пропасть из схемы.
    """
    modules: set[str] = set()
    for pattern in patterns:
        for file_name in glob(pattern, recursive=True):
            path = Path(file_name)
            if path.name.startswith("__"):
                continue
            modules.add(_module_name(path))

    for module in sorted(modules):
        importlib.import_module(module)
        logger.debug("Entity module loaded: %s", module)
    return sorted(modules)
