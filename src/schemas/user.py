"""
Схемы для работы с пользователями.
"""

from pydantic import EmailStr, Field

from src.schemas.base import BaseReadSchema, BaseSchema


class UserCreate(BaseSchema):
    """
    Схема для создания пользователя.

    Example:
        ```python
        UserCreate(first_name="Иван", last_name="Петров", email="ivan@example.com")
        ```
    """

    first_name: str = Field(..., min_length=1, max_length=100, description="Имя")
    last_name: str = Field(..., min_length=1, max_length=100, description="Фамилия")
    email: EmailStr = Field(..., description="Email адрес")
    is_active: bool = Field(True, description="Активен ли пользователь")


class UserRead(BaseReadSchema):
    first_name: str
    last_name: str
    email: str
    is_active: bool


class UserUpdate(BaseSchema):
    """
    Все поля опциональные — передаются только те, которые нужно изменить.
    """

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    is_active: bool | None = None
