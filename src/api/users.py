"""
Роутер для работы с пользователями.

Пример CRUD поверх UsersService.
"""

import logging

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError

from src.schemas import UserCreate, UserRead, UserUpdate
from src.services import UsersService

router = APIRouter(
    prefix="/users",
    tags=["users"],
    route_class=DishkaRoute,
)

logger = logging.getLogger(__name__)


def _not_found(user_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"User with id={user_id} not found",
    )


def _email_taken(email: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"User with email={email} already exists",
    )


@router.get("", response_model=list[UserRead])
async def list_users(
    users_service: FromDishka[UsersService],
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
) -> list[UserRead]:
    users = await users_service.find_all(offset=offset, limit=limit)
    return [UserRead.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    users_service: FromDishka[UsersService],
) -> UserRead:
    user = await users_service.find_one(user_id)
    if user is None:
        raise _not_found(user_id)
    return UserRead.model_validate(user)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    users_service: FromDishka[UsersService],
) -> UserRead:
    """
    Создание пользователя.

    Raises:
        HTTPException 409 если пользователь с таким email уже существует
    """
    if await users_service.find_by_email(data.email):
        raise _email_taken(data.email)

    # Параллельный запрос мог успеть вставить тот же email после проверки
    try:
        user = await users_service.create(**data.model_dump())
    except IntegrityError as err:
        raise _email_taken(data.email) from err

    logger.info("User created with id=%s", user.id)
    return UserRead.model_validate(user)


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    data: UserUpdate,
    users_service: FromDishka[UsersService],
) -> UserRead:
    """
    Обновление пользователя, меняются только переданные поля.

    Raises:
        HTTPException 404 если пользователь не найден
        HTTPException 409 если email занят другим пользователем
    """
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in update_data:
        owner = await users_service.find_by_email(update_data["email"])
        if owner is not None and owner.id != user_id:
            raise _email_taken(update_data["email"])

    if not update_data:
        user = await users_service.find_one(user_id)
    else:
        logger.info("Updating user id=%s fields=%s", user_id, list(update_data))
        try:
            user = await users_service.update(user_id, **update_data)
        except IntegrityError as err:
            if "email" not in update_data:
                raise
            raise _email_taken(update_data["email"]) from err

    if user is None:
        raise _not_found(user_id)
    return UserRead.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    users_service: FromDishka[UsersService],
) -> None:
    logger.info("Deleting user id=%s", user_id)
    if not await users_service.remove(user_id):
        raise _not_found(user_id)
