from src.services.users import UsersService

__all__ = ["UsersService"]
