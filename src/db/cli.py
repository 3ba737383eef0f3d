"""
CLI для миграций — обёртка над alembic.

Команды:
    db-migrate generate src/db/migrations/versions/add_user_phone   # autogenerate по сущностям
    db-migrate create src/db/migrations/versions/seed_admin         # пустая миграция
    db-migrate run                                                  # upgrade head
    db-migrate revert                                               # downgrade -1

Для generate/create путь задаёт и каталог, и имя миграции (имя файла без расширения).
Миграции на старте приложения не запускаются никогда — только отсюда.
"""

import argparse
import logging
import os
from collections.abc import Sequence
from pathlib import Path

from alembic import command
from alembic.config import Config

from src.common import setup_logging
from src.db.config import ConnectionDescriptor, resolve_connection_descriptor, snapshot_environment
from src.settings import app_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"
ALEMBIC_INI = app_settings.BASE_DIR / "alembic.ini"


def build_alembic_config(descriptor: ConnectionDescriptor, ini_path: Path = ALEMBIC_INI) -> Config:
    """
    Собирает alembic Config из descriptor.

    version_locations — каталоги из descriptor.migration_locations,
    сам descriptor передаётся в env.py через attributes.
    """
    alembic_config = Config(str(ini_path)) if ini_path.is_file() else Config()
    alembic_config.set_main_option("script_location", str(MIGRATIONS_DIR))
    alembic_config.set_main_option("path_separator", "os")
    version_dirs = dict.fromkeys(str(Path(pattern).parent) for pattern in descriptor.migration_locations)
    alembic_config.set_main_option("version_locations", os.pathsep.join(version_dirs))
    alembic_config.attributes["descriptor"] = descriptor
    return alembic_config


def _split_migration_path(raw: str) -> tuple[str, str | None]:
    path = Path(raw)
    version_path = str(path.parent) if path.parent != Path(".") else None
    return path.stem, version_path


def generate(alembic_config: Config, migration_path: str) -> None:
    message, version_path = _split_migration_path(migration_path)
    logger.info("Generating migration %s", message)
    command.revision(alembic_config, message=message, autogenerate=True, version_path=version_path)


def create(alembic_config: Config, migration_path: str) -> None:
    message, version_path = _split_migration_path(migration_path)
    logger.info("Creating empty migration %s", message)
    command.revision(alembic_config, message=message, version_path=version_path)


def run(alembic_config: Config) -> None:
    logger.info("Running migrations up to head")
    command.upgrade(alembic_config, "head")


def revert(alembic_config: Config) -> None:
    logger.info("Reverting last migration")
    command.downgrade(alembic_config, "-1")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="db-migrate", description="Database migrations")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("generate", "autogenerate a migration from entity changes"),
        ("create", "create an empty migration"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("path", help="migration file path, e.g. src/db/migrations/versions/add_users")

    subparsers.add_parser("run", help="apply all pending migrations")
    subparsers.add_parser("revert", help="revert the last applied migration")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(app_settings.LOG_LEVEL, log_dir=None)

    descriptor = resolve_connection_descriptor(snapshot_environment(app_settings.ENV_FILE))
    alembic_config = build_alembic_config(descriptor)

    if args.command == "generate":
        generate(alembic_config, args.path)
    elif args.command == "create":
        create(alembic_config, args.path)
    elif args.command == "run":
        run(alembic_config)
    else:
        revert(alembic_config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
