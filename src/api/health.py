"""
Проверка живости приложения и доступности БД.
"""

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

router = APIRouter(
    prefix="/health",
    tags=["health"],
    route_class=DishkaRoute,
)


@router.get("")
async def health(engine: FromDishka[AsyncEngine]) -> dict[str, str]:
    """
    Выполняет SELECT 1 через общий engine.

    Ошибка драйвера не перехватывается: FastAPI вернёт 500.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}
