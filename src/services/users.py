"""
Сервис пользователей.

Тонкая прослойка над UserRepository: роутер работает с сервисом,
а не с репозиторием напрямую, чтобы бизнес-логике было куда расти.
"""

from src.db.entities.user import UserEntity
from src.db.repositories import UserRepository


class UsersService:
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def find_all(self, offset: int = 0, limit: int | None = None) -> list[UserEntity]:
        return await self.user_repo.get_many(offset=offset, limit=limit)

    async def find_one(self, user_id: int) -> UserEntity | None:
        return await self.user_repo.get_by_id(user_id)

    async def find_by_email(self, email: str) -> UserEntity | None:
        return await self.user_repo.get_by_email(email)

    async def create(self, **data) -> UserEntity:
        return await self.user_repo.create(**data)

    async def update(self, user_id: int, **data) -> UserEntity | None:
        return await self.user_repo.update(user_id, **data)

    async def remove(self, user_id: int) -> bool:
        return await self.user_repo.delete(user_id)
