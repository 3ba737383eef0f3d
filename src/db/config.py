"""
Конфигурация подключения к PostgreSQL.

Собирает ConnectionDescriptor из переменных окружения:
- DB_HOST, DB_PORT, DB_USERNAME, DB_PASSWORD, DB_DATABASE
- NODE_ENV — режим; только "development" включает синхронизацию схемы и SQL-логи

Почему функция принимает environ явно, а не читает os.environ:
- Снимок окружения берётся один раз при старте (snapshot_environment)
- Тесты подсовывают синтетическое окружение без monkeypatch
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, model_validator
from sqlalchemy.engine import URL

SRC_DIR = Path(__file__).resolve().parent.parent

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5432
DEFAULT_USERNAME = "postgres"
DEFAULT_PASSWORD = "postgres"
DEFAULT_DATABASE = "postgres"

MODE_ENV_VAR = "NODE_ENV"
DEVELOPMENT_MODE = "development"

# Где искать сущности и миграции — не настраивается через окружение
ENTITY_LOCATIONS: tuple[str, ...] = (str(SRC_DIR / "**" / "entities" / "*.py"),)
MIGRATION_LOCATIONS: tuple[str, ...] = (
    str(Path(__file__).resolve().parent / "migrations" / "versions" / "*.py"),
)

# Только ASCII-цифры: \d в re совпадает и с "٥٤٣٢"
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_port(raw: str | None, default: int = DEFAULT_PORT) -> int:
    """
    Разбирает порт как десятичное число.

    Берутся только ведущие цифры ("6543abc" -> 6543), как parseInt.
    Если цифр нет (None, "", "abc") — возвращается default.
    Диапазон не проверяется: "70000" и "-1" проходят как есть.
    Строка цифр длиннее лимита int (sys.int_info) тоже даёт default.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    if match is None:
        return default
    try:
        return int(match.group(1), 10)
    except ValueError:
        return default


class ConnectionDescriptor(BaseModel):
    """
    Неизменяемый набор параметров подключения к БД.

    frozen=True — после создания поля менять нельзя,
    два дескриптора с одинаковыми полями равны.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["postgres"] = "postgres"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: str = DEFAULT_USERNAME
    password: str = DEFAULT_PASSWORD
    database: str = DEFAULT_DATABASE
    entity_locations: tuple[str, ...] = ENTITY_LOCATIONS
    migration_locations: tuple[str, ...] = MIGRATION_LOCATIONS
    synchronize_schema: bool = False
    verbose_logging: bool = False
    # Миграции запускаются только явно через CLI
    auto_run_migrations_on_startup: Literal[False] = False

    @model_validator(mode="after")
    def check_development_gate(self) -> "ConnectionDescriptor":
        if self.synchronize_schema != self.verbose_logging:
            raise ValueError("synchronize_schema and verbose_logging must follow the same mode gate")
        return self

    @property
    def url(self) -> URL:
        """URL для драйвера asyncpg. Пароль в repr маскируется самим SQLAlchemy."""
        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    def to_options(self) -> dict[str, Any]:
        """
        Параметры под внешними именами, которые ожидает фабрика ORM.

        Returns:
            dict: type, host, port, username, password, database,
                  entities, migrations, synchronize, logging, migrationsRun
        """
        return {
            "type": self.type,
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "password": self.password,
            "database": self.database,
            "entities": list(self.entity_locations),
            "migrations": list(self.migration_locations),
            "synchronize": self.synchronize_schema,
            "logging": self.verbose_logging,
            "migrationsRun": self.auto_run_migrations_on_startup,
        }


def resolve_connection_descriptor(environ: Mapping[str, str]) -> ConnectionDescriptor:
    """
    Строит ConnectionDescriptor из снимка окружения.

    Никогда не падает: отсутствующие переменные заменяются значениями
    по умолчанию, нечисловой DB_PORT — портом 5432. Строки (в том числе
    пустые) передаются без изменений.

    Любое значение NODE_ENV кроме "development" (включая отсутствие)
    молча выключает синхронизацию схемы и логирование.

    Args:
        environ: Снимок переменных окружения

    Returns:
        ConnectionDescriptor

    Example:
        ```python
        descriptor = resolve_connection_descriptor({"DB_HOST": "db.internal", "DB_PORT": "6543"})
        descriptor.port  # 6543
        ```
    """
    development = environ.get(MODE_ENV_VAR) == DEVELOPMENT_MODE
    return ConnectionDescriptor(
        host=environ.get("DB_HOST", DEFAULT_HOST),
        port=parse_port(environ.get("DB_PORT")),
        username=environ.get("DB_USERNAME", DEFAULT_USERNAME),
        password=environ.get("DB_PASSWORD", DEFAULT_PASSWORD),
        database=environ.get("DB_DATABASE", DEFAULT_DATABASE),
        synchronize_schema=development,
        verbose_logging=development,
    )


def snapshot_environment(env_file: Path | str | None = None) -> dict[str, str]:
    """
    Делает один согласованный снимок окружения.

    Значения из .env дополняются переменными процесса; переменные процесса
    имеют приоритет (как dotenv.config(), который ничего не перезаписывает).
    Отсутствие файла — не ошибка.

    Args:
        env_file: Путь к .env файлу (None — только окружение процесса)

    Returns:
        dict[str, str]: Копия окружения, дальше не зависит от os.environ
    """
    snapshot: dict[str, str] = {}
    if env_file is not None and Path(env_file).is_file():
        snapshot.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    snapshot.update(os.environ)
    return snapshot
