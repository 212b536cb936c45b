from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from taskflow.config import PROJECT_ROOT, SETTINGS, Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_FILENAME = "taskflow.log"


def log_file_for(settings: Settings) -> Path:
    log_dir = Path(settings.log_dir).expanduser()
    if not log_dir.is_absolute():
        log_dir = PROJECT_ROOT / log_dir
    return log_dir / LOG_FILENAME


def setup_logging(settings: Settings = SETTINGS) -> Path:
    log_file = log_file_for(settings)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)

    # CLI output goes to stdout; only problems reach the console log
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(settings.console_log_level)

    logging.basicConfig(level=settings.log_level, handlers=[file_handler, console_handler])
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.sql_echo else logging.WARNING)
    return log_file
