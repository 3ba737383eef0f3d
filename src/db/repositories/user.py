"""
Репозиторий пользователей.

Наследует базовые CRUD операции и добавляет поиск по email.
"""

import logging

from src.db.entities.user import UserEntity
from src.db.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[UserEntity]):
    """
    Репозиторий пользователей.

    Наследует от BaseRepository:
    - get_by_id(id) -> UserEntity | None
    - get_one(**filters) -> UserEntity | None
    - get_many(offset, limit, **filters) -> list[UserEntity]
    - create(**data) -> UserEntity
    - update(id, **data) -> UserEntity | None
    - delete(id) -> bool
    """

    entity = UserEntity

    async def get_by_email(self, email: str) -> UserEntity | None:
        """
        Email уникален (индекс в БД), поэтому не больше одной записи.
        """
        logger.debug("Get user by email=%s", email)
        return await self.get_one(email=email)
