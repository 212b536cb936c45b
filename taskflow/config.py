from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///taskflow.db"


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    """Load ``.env`` then let ``.env.<APP_ENV>`` override it.

    The working directory wins over the project root for each file.
    """
    env_name = os.getenv("APP_ENV", "development")
    search = [Path.cwd(), PROJECT_ROOT]
    for filename, override in ((".env", False), (f".env.{env_name}", True)):
        found = next((base / filename for base in search if (base / filename).exists()), None)
        if found is not None:
            load_dotenv(found, override=override)


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    console_log_level: str = "WARNING"
    log_dir: str = "logs"
    sql_echo: bool = False
    user_id: str = "local"
    export_dir: str | None = None


def _text(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name, "").strip()
    return value or None


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return (_text(environ, name) or "").lower() in {"1", "true", "yes", "on"}


def load_settings(environ: Mapping[str, str] = os.environ) -> Settings:
    defaults = Settings()
    return Settings(
        database_url=_text(environ, "DATABASE_URL") or defaults.database_url,
        log_level=(_text(environ, "LOG_LEVEL") or defaults.log_level).upper(),
        console_log_level=(_text(environ, "CONSOLE_LOG_LEVEL") or defaults.console_log_level).upper(),
        log_dir=_text(environ, "LOG_DIR") or defaults.log_dir,
        sql_echo=_flag(environ, "SQL_ECHO"),
        user_id=_text(environ, "TASKFLOW_USER") or defaults.user_id,
        export_dir=_text(environ, "EXPORT_DIR"),
    )


load_env()

SETTINGS = load_settings()
