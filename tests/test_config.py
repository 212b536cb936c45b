from __future__ import annotations

from pathlib import Path

from taskflow.config import DEFAULT_DATABASE_URL, PROJECT_ROOT, Settings, load_settings
from taskflow.infra.logging import log_file_for


def test_defaults_when_environment_is_empty() -> None:
    settings = load_settings({})

    assert settings == Settings()
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.user_id == "local"
    assert settings.export_dir is None


def test_values_are_read_and_normalized() -> None:
    settings = load_settings({
        "DATABASE_URL": " postgresql://db/taskflow ",
        "LOG_LEVEL": "debug",
        "SQL_ECHO": "Yes",
        "TASKFLOW_USER": "alice",
        "EXPORT_DIR": "   ",
    })

    assert settings.database_url == "postgresql://db/taskflow"
    assert settings.log_level == "DEBUG"
    assert settings.sql_echo is True
    assert settings.user_id == "alice"
    assert settings.export_dir is None


def test_log_file_relative_to_project_root(tmp_path: Path) -> None:
    assert log_file_for(Settings(log_dir="logs")) == PROJECT_ROOT / "logs" / "taskflow.log"
    assert log_file_for(Settings(log_dir=str(tmp_path))) == tmp_path / "taskflow.log"
