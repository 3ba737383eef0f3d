from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class AppSettings(BaseSettings):
    """
    Настройки веб-сервера.

    Загружаются из .env в корне проекта и переменных окружения.
    Параметры БД (DB_HOST, DB_PORT, ..., NODE_ENV) сюда не входят:
    их разбирает src.db.config.resolve_connection_descriptor,
    чтобы кривой DB_PORT не ронял приложение.

    Пример переменных окружения:
    - HOST=0.0.0.0
    - PORT=8000
    - LOG_LEVEL=DEBUG
    """

    BASE_DIR: Path = BASE_DIR
    ENV_FILE: Path = BASE_DIR / ".env"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )


app_settings = AppSettings()
