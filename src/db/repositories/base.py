"""
Базовый репозиторий для CRUD операций.

Конкретный репозиторий наследуется от BaseRepository и указывает сущность.
Транзакцией управляет тот, кто выдал сессию (DatabaseProvider),
поэтому здесь только flush, без commit.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.base import Base

logger = logging.getLogger(__name__)


class BaseRepository[EntityT: Base]:
    """
    Типовые CRUD операции над одной сущностью.

    Attributes:
        entity: Класс ORM сущности (указывается в наследнике)
        session: AsyncSession текущего запроса

    Example:
        ```python
        class UserRepository(BaseRepository[UserEntity]):
            entity = UserEntity

        repo = UserRepository(session)
        user = await repo.get_by_id(42)
        ```
    """

    entity: type[EntityT]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, entity_id: int) -> EntityT | None:
        logger.debug("Get %s by id=%s", self.entity.__name__, entity_id)
        return await self.session.get(self.entity, entity_id)

    async def get_one(self, **filters) -> EntityT | None:
        """
        Одна сущность по точному совпадению полей.

        Example:
            ```python
            user = await repo.get_one(email="ivan@example.com")
            ```
        """
        logger.debug("Get %s with filters=%s", self.entity.__name__, filters)
        stmt = select(self.entity).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, offset: int = 0, limit: int | None = None, **filters) -> list[EntityT]:
        """
        Список сущностей по фильтрам, упорядоченный по id.

        Args:
            offset: Сколько записей пропустить
            limit: Максимум записей (None — без ограничения)
            **filters: Поля для фильтрации
        """
        logger.debug(
            "Get many %s with filters=%s offset=%s limit=%s",
            self.entity.__name__,
            filters,
            offset,
            limit,
        )
        stmt = select(self.entity).filter_by(**filters).order_by(self.entity.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **data) -> EntityT:
        """
        Создаёт сущность; id появляется после flush, commit делает провайдер сессии.
        """
        logger.debug("Create %s", self.entity.__name__)
        instance = self.entity(**data)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        logger.debug("Created %s with id=%s", self.entity.__name__, instance.id)
        return instance

    async def update(self, entity_id: int, **data) -> EntityT | None:
        """
        Обновляет переданные поля.

        Returns:
            Обновлённая сущность или None если не найдена
        """
        instance = await self.get_by_id(entity_id)
        if instance is None:
            logger.debug("%s with id=%s not found", self.entity.__name__, entity_id)
            return None

        for key, value in data.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.session.flush()
        logger.debug("Updated %s id=%s fields=%s", self.entity.__name__, entity_id, list(data))
        return instance

    async def delete(self, entity_id: int) -> bool:
        instance = await self.get_by_id(entity_id)
        if instance is None:
            logger.debug("%s with id=%s not found", self.entity.__name__, entity_id)
            return False

        await self.session.delete(instance)
        await self.session.flush()
        logger.debug("Deleted %s id=%s", self.entity.__name__, entity_id)
        return True
