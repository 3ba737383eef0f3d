import logging
import logging.config
from pathlib import Path

PATH_LOGS = Path(__file__).resolve().parent.parent / "logs"

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)40s:%(lineno)-3d - %(message)s"


def build_logging_config(root_log_level: str | int = logging.INFO, log_dir: Path | None = PATH_LOGS) -> dict:
    """
    Конфиг для dictConfig: stdout всегда, файлы app.log/errors.log если задан log_dir.

    SQL-логи sqlalchemy.engine управляются через echo у engine
    (ConnectionDescriptor.verbose_logging), здесь им только задаётся формат.
    """
    handlers: dict[str, dict] = {
        "console_stdout": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "level": root_log_level,
            "formatter": "default",
        },
    }
    if log_dir is not None:
        handlers["general_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(Path(log_dir) / "app.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "default",
        }
        handlers["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(Path(log_dir) / "errors.log"),
            "maxBytes": 10485760,
            "backupCount": 5,
            "level": "ERROR",
            "formatter": "default",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": handlers,
        "loggers": {
            "asyncio": {"level": "WARNING"},
            "alembic": {"level": "INFO"},
        },
        "root": {
            "level": root_log_level,
            "handlers": list(handlers),
        },
    }


def setup_logging(root_log_level: str | int = logging.INFO, log_dir: Path | None = PATH_LOGS) -> None:
    if log_dir is not None:
        Path(log_dir).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(root_log_level, log_dir))
    logging.info("Logging configured with dictConfig")
