"""
API роутеры приложения.
"""

from src.api.health import router as health_router
from src.api.users import router as users_router

__all__ = [
    "health_router",
    "users_router",
]
