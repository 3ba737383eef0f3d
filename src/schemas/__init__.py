"""
Pydantic схемы для валидации данных API.

- *Create — данные для создания сущности
- *Read — данные для чтения (включают id, created_at)
- *Update — данные для обновления (все поля опциональные)
"""

from src.schemas.user import UserCreate, UserRead, UserUpdate

__all__ = [
    "UserCreate",
    "UserRead",
    "UserUpdate",
]
