# src/task_browser/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
- Bad values fall back to defaults instead of failing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_models import Availability, OrderType

ENV_PREFIX = "TASKB"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, enum_cls, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    tasks_db_path: Path
    log_dir: Path

    # ---- Browse defaults (CLI) ----
    default_availability: Availability
    default_order: OrderType
    default_ascending: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-browser")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task_browser"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        default_availability = _env_choice(
            _k("DEFAULT_AVAILABILITY"), Availability, Availability.INCOMPLETE
        )
        default_order = _env_choice(_k("DEFAULT_ORDER"), OrderType, OrderType.CAPTURED)
        default_ascending = _env_bool(_k("DEFAULT_ASCENDING"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            log_dir=log_dir,
            default_availability=default_availability,
            default_order=default_order,
            default_ascending=default_ascending,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
